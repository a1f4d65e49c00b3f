"""
Abstract base class for filter providers.

Defines the gateway interface the sync engine talks to: listing, creating and
deleting server-side filters, plus the label calls the label directory needs.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Tuple

from core.models import ProviderFilter


class FilterProvider(ABC):
    """
    Abstract base class for filter provider implementations.

    Supports the context manager protocol for connection management.

    Example:
        with GmailFilterProvider() as provider:
            for pf in provider.list_filters():
                print(pf.id, pf.criteria.query)

    Attributes:
        name: Human-readable provider name
    """

    name: str = "abstract"

    def __enter__(self) -> "FilterProvider":
        """Context manager entry - establish connection."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - close connection."""
        self.disconnect()

    @abstractmethod
    def connect(self) -> None:
        """
        Establish connection to the mail service.

        Called automatically when using the context manager.
        """

    @abstractmethod
    def disconnect(self) -> None:
        """Close the connection. Safe to call more than once."""

    @abstractmethod
    def list_filters(self) -> List[ProviderFilter]:
        """
        List the account's filters in provider order.

        Raises:
            ProviderRequestFailed: If the listing fails
        """

    @abstractmethod
    def create_filter(self, provider_filter: ProviderFilter) -> str:
        """
        Create a filter.

        Args:
            provider_filter: Criteria and action to create (id ignored)

        Returns:
            The id the provider assigned

        Raises:
            ProviderRequestFailed: If creation fails (carries the filter)
        """

    @abstractmethod
    def delete_filter(self, filter_id: str) -> None:
        """
        Delete a filter by id.

        Raises:
            ProviderRequestFailed: If deletion fails (carries the id)
        """

    @abstractmethod
    def list_labels(self) -> Dict[str, str]:
        """
        Get all labels.

        Returns:
            Dict mapping label id to label name
        """

    @abstractmethod
    def resolve_or_create_label(self, name: str) -> str:
        """
        Return the id of the label called name, creating it if missing.

        Raises:
            ProviderRequestFailed: If the label cannot be listed or created
        """

    def health_check(self) -> Tuple[bool, str]:
        """
        Verify the provider connection is healthy.

        Returns:
            Tuple of (is_healthy, status_message)
        """
        try:
            count = len(self.list_filters())
        except Exception as e:
            return False, str(e)
        return True, f"OK ({count} filters)"
