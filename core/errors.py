"""
Exception taxonomy for filter synchronization.

Every failure raised by the engine, the storage layer, or a provider derives
from FilterSyncError so the CLI can turn any of them into an exit status.
"""

from typing import Any, Optional


class FilterSyncError(Exception):
    """Base class for all filter sync failures."""


class InvalidRule(FilterSyncError):
    """A rule is structurally invalid and cannot be translated."""


class LabelResolutionFailed(FilterSyncError):
    """A label name could not be resolved to (or created as) a provider id."""

    def __init__(self, label: str, message: str = ""):
        self.label = label
        super().__init__(message or f"resolving label {label!r} failed")


class ProviderRequestFailed(FilterSyncError):
    """
    A create/list/delete call against the provider failed.

    Attributes:
        filter: The provider filter being created, when known
        filter_id: The provider filter id being deleted, when known
    """

    def __init__(
        self,
        message: str,
        filter: Optional[Any] = None,
        filter_id: Optional[str] = None,
    ):
        self.filter = filter
        self.filter_id = filter_id
        super().__init__(message)


class PersistenceFailed(FilterSyncError):
    """The rules file could not be read or written."""
