"""
Three-way line alignment and conflict detection for side-by-side merge views.
"""

from .core import (
    DiffOrderError,
    MergeAligner,
    MergeAlignError,
    compute_merge_fillers,
    compute_merge_fillers_and_conflicts,
)
from .grouping import compute_mapping_alignments, cover_base_text
from .schema import (
    ConflictBlock,
    Filler,
    LineDiffEntry,
    MappingAlignment,
    MergeAlignConfig,
    MergeLayout,
)
from .session import ConflictTracker, MergeSession

__all__ = [
    # Engine
    "MergeAligner",
    "compute_merge_fillers",
    "compute_merge_fillers_and_conflicts",
    "compute_mapping_alignments",
    "cover_base_text",
    # Models
    "ConflictBlock",
    "Filler",
    "LineDiffEntry",
    "MappingAlignment",
    "MergeAlignConfig",
    "MergeLayout",
    # Session
    "ConflictTracker",
    "MergeSession",
    # Errors
    "MergeAlignError",
    "DiffOrderError",
]
