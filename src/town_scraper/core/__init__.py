# ABOUTME: Business logic and orchestration layer
# ABOUTME: Parsed observations → reconciled town records → output artifact

"""
Core Layer: Business logic and workflow orchestration

This layer handles:
- Domain models for observations, parsed fields and canonical records
- Reconciliation of duplicate sightings into one record per town
- Derived solvency metric
- Pipeline orchestration and source fallback

Data Flow: extraction/ observations → Parsing → Reconciliation → ScrapeResult
"""

from .metrics import days_remaining
from .models import (
    CanonicalRecord,
    Location,
    ParsedFields,
    RawObservation,
    ScrapeResult,
    ScrapeStats,
    SourceKind,
    SourceScan,
)
from .reconciler import Reconciler, reconcile

# Import the pipeline on-demand to avoid pulling in the browser layer
# Use: from town_scraper.core.pipeline import TownScrapePipeline

__all__ = [
    "CanonicalRecord",
    "Location",
    "ParsedFields",
    "RawObservation",
    "Reconciler",
    "ScrapeResult",
    "ScrapeStats",
    "SourceKind",
    "SourceScan",
    "days_remaining",
    "reconcile",
]
