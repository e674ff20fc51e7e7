"""Contractor-side records consumed by the scorers."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

JobStatus = Literal["pending", "in_progress", "completed", "cancelled"]


class ServicePriceRange(BaseModel):
    """Price band a contractor lists for one service type."""

    service_type: str
    price_range_min: float | None = Field(default=None, ge=0)
    price_range_max: float | None = Field(default=None, ge=0)

    model_config = ConfigDict(extra="ignore")


class ContractorProfile(BaseModel):
    """Business profile of a contractor, read-only input to scoring."""

    id: str
    name: str | None = None
    service_categories: set[str] = Field(default_factory=set)
    average_rating: float | None = Field(default=None, ge=0, le=5)
    review_count: int = Field(default=0, ge=0)
    service_areas: list[str] = Field(default_factory=list)
    services: list[ServicePriceRange] = Field(default_factory=list)
    is_verified: bool = False
    subscription_tier: str | None = None
    last_sign_in_at: datetime | None = None
    response_time_minutes: float | None = Field(default=None, ge=0)
    customer_satisfaction: float | None = Field(default=None, ge=0, le=5)

    model_config = ConfigDict(extra="ignore")


class JobRecord(BaseModel):
    """Historical job outcome for a contractor."""

    job_id: str
    contractor_id: str
    status: JobStatus = "pending"
    amount: float = Field(default=0.0, ge=0)

    model_config = ConfigDict(extra="ignore")
