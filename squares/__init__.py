"""This is the init module for squares"""

from .client import WorkoutApiClient
from .enrich import DetailEnricher
from .reconcile import MergeReport, SummaryReconciler
from .store import WorkoutStore
from .summary import WorkoutSummary

__version__ = "0.1.0"
__all__ = [
    "DetailEnricher",
    "MergeReport",
    "SummaryReconciler",
    "WorkoutApiClient",
    "WorkoutStore",
    "WorkoutSummary",
]
