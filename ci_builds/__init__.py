"""
CI Builds module.

This module contains the normalization engine that turns raw ingestion
records (webhook payload plus job records) into canonical builds, and the
orchestrator that pages through them.
"""

from .builder import BuildAggregateBuilder
from .duration import estimate_duration
from .enrichment import EnrichmentClient
from .orchestrator import BuildFetchOrchestrator
from .providers import NORMALIZERS, ProviderNormalizer, get_normalizer
from .status import aggregate_status

__all__ = [
    "BuildAggregateBuilder",
    "BuildFetchOrchestrator",
    "EnrichmentClient",
    "NORMALIZERS",
    "ProviderNormalizer",
    "aggregate_status",
    "estimate_duration",
    "get_normalizer",
]
