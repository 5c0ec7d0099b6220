"""
Services around the core: storage, persisted snapshot, record sources,
import/export and derived aggregates.
"""
