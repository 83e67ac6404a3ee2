"""Tag state aggregation, link mutation, and tag directory creation."""

from .aggregator import TagStateAggregator
from .directories import TagDirectoryManager, validate_tag_name
from .errors import (
    InvalidNameError,
    LinkCreateError,
    LinkError,
    LinkRemoveError,
    TagAlreadyExistsError,
    TagCreateError,
    TagDirectoryError,
    TaggingError,
)
from .models import (
    AppliedMutation,
    ItemFailure,
    MutationResult,
    Selection,
    SkippedMutation,
    TagState,
)
from .mutation import TagMutationEngine

__all__ = [
    "TagStateAggregator",
    "TagMutationEngine",
    "TagDirectoryManager",
    "validate_tag_name",
    "TagState",
    "Selection",
    "ItemFailure",
    "AppliedMutation",
    "SkippedMutation",
    "MutationResult",
    "TaggingError",
    "LinkError",
    "LinkCreateError",
    "LinkRemoveError",
    "TagDirectoryError",
    "TagAlreadyExistsError",
    "InvalidNameError",
    "TagCreateError",
]
