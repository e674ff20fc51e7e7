from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Priority = Literal["low", "medium", "high"]


class ServiceRequirement(BaseModel):
    """A service the event needs, e.g. catering or photography."""

    id: str | None = None
    category: str
    priority: Priority = "medium"
    is_required: bool = False

    model_config = ConfigDict(extra="ignore", frozen=True)


class EventLocation(BaseModel):
    """Where the event takes place."""

    city: str | None = None
    region: str | None = None

    model_config = ConfigDict(extra="ignore")


class EventRequirements(BaseModel):
    """Event document loaded before matching."""

    event_id: str
    service_requirements: list[ServiceRequirement] = Field(default_factory=list)
    location_data: EventLocation | None = None

    model_config = ConfigDict(extra="allow")

    def categories(self) -> set[str]:
        return {req.category for req in self.service_requirements}
