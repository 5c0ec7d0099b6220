"""
Core domain layer: record model, filter spec, filter engine, comparison
selection and the record store
"""

from .comparison import ComparisonSelection
from .filter_state import FeatureFilter, FilterSpec, SortDirection, SortKey
from .presets import SavedFilterPreset
from .record import Record
from .store import RecordStore

__all__ = [
    "ComparisonSelection",
    "FeatureFilter",
    "FilterSpec",
    "SortDirection",
    "SortKey",
    "SavedFilterPreset",
    "Record",
    "RecordStore",
]
