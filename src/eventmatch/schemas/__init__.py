"""Pydantic schema definitions for marketplace records."""

from __future__ import annotations

from .ab_test import ABTestSample
from .contractor import ContractorProfile, JobRecord, ServicePriceRange
from .event import EventLocation, EventRequirements, ServiceRequirement

__all__ = [
    "ABTestSample",
    "ContractorProfile",
    "EventLocation",
    "EventRequirements",
    "JobRecord",
    "ServicePriceRange",
    "ServiceRequirement",
]
