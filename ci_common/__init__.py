"""
CI Common module.

This module contains shared domain models, errors and interfaces used across
the build components (engine, client).

The common module has no dependencies on other ci_* modules, making it
a pure domain layer that can be imported by any component.
"""

from .errors import (
    BuildsError,
    MalformedPayloadError,
    RecordError,
    TransportError,
    UnsupportedProviderError,
)
from .models import Build, BuildFilter, BuildStatus, Job, JobStatus, Provider
from .repository import BuildSource, Transport

__all__ = [
    "Build",
    "BuildFilter",
    "BuildSource",
    "BuildStatus",
    "BuildsError",
    "Job",
    "JobStatus",
    "MalformedPayloadError",
    "Provider",
    "RecordError",
    "Transport",
    "TransportError",
    "UnsupportedProviderError",
]
