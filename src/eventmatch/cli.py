"""Typer CLI entrypoint for matching and analytics runs."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer
import yaml
from pydantic import ValidationError

from .container import MatchingContainer, create_container
from .logging import configure_logging
from .schemas.config import load_config

app = typer.Typer(help="Contractor matching and marketplace analytics CLI.")


def _build_container(
    config: Optional[Path],
    *,
    store: Optional[Path] = None,
    placeholder_estimates: bool = False,
) -> MatchingContainer:
    settings: dict[str, Any] = {}
    if config:
        with config.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle)
        if loaded is not None and not isinstance(loaded, dict):
            raise typer.BadParameter("Config file must be a YAML object", param_name="config")
        try:
            settings = load_config(loaded).to_settings()
        except ValidationError as exc:
            raise typer.BadParameter(str(exc), param_name="config") from exc
    return create_container(
        settings=settings,
        store_path=store,
        placeholder_estimates=placeholder_estimates,
    )


@app.command()
def match(
    event: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Event JSON path."),
    contractors: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Contractor profiles JSONL path."),
    output: Path = typer.Option(..., dir_okay=False, resolve_path=True, help="Output JSON path."),
    store: Optional[Path] = typer.Option(None, dir_okay=False, help="JSON file used as the match store."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
) -> None:
    """Rank contractors for an event."""
    configure_logging(log_level)
    container = _build_container(config, store=store)
    response = container.matching_pipeline().run(
        event_path=event,
        contractors_path=contractors,
        output_path=output,
    )
    typer.echo(f"Ranked {len(response['matches'])} contractors. Results saved to {output}.")


@app.command()
def performance(
    contractors: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Contractor profiles JSONL path."),
    jobs: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Job records JSONL path."),
    output: Path = typer.Option(..., dir_okay=False, resolve_path=True, help="Output JSON path."),
    as_of: Optional[str] = typer.Option(None, help="Evaluation time (ISO 8601) for the activity window."),
    placeholder_estimates: bool = typer.Option(
        False,
        "--placeholder-estimates",
        help="Fill missing response time and satisfaction with random demo values.",
    ),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
) -> None:
    """Aggregate contractor performance from job history."""
    configure_logging(log_level)
    container = _build_container(config, placeholder_estimates=placeholder_estimates)
    payload = container.performance_pipeline().run(
        contractors_path=contractors,
        jobs_path=jobs,
        output_path=output,
        as_of=as_of,
    )
    typer.echo(f"Scored {len(payload['contractors'])} contractors. Results saved to {output}.")


@app.command("ab-test")
def ab_test(
    samples: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="A/B samples JSONL path."),
    output: Path = typer.Option(..., dir_okay=False, resolve_path=True, help="Output JSON path."),
    name: str = typer.Option("ab-test", help="Test name echoed in the results."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
) -> None:
    """Compute significance statistics for an A/B test."""
    configure_logging(log_level)
    container = create_container()
    payload = container.ab_test_pipeline().run(
        samples_path=samples,
        output_path=output,
        test_name=name,
    )
    confidence = payload["test_results"]["statistics"]["confidence_level"]
    typer.echo(f"Confidence level {confidence}%. Results saved to {output}.")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
