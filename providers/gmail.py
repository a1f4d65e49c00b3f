"""
Gmail API filter provider.

Wraps the Gmail settings.filters and labels endpoints (google-api-python-client)
to implement the FilterProvider interface.
"""

import logging
from typing import Any, Dict, List, Optional

from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import HttpError

from core.config import DEFAULT_SCOPES
from core.errors import ProviderRequestFailed
from core.models import ProviderFilter
from providers.base import FilterProvider

logger = logging.getLogger(__name__)


class GmailFilterProvider(FilterProvider):
    """
    Gmail API filter provider.

    Example:
        from providers.gmail import GmailFilterProvider

        with GmailFilterProvider() as gmail:
            for pf in gmail.list_filters():
                gmail.delete_filter(pf.id)
    """

    name = "gmail"

    def __init__(
        self,
        user_id: str = "me",
        scopes: Optional[List[str]] = None,
        credentials_file: Optional[str] = None,
        token_file: Optional[str] = None,
        service: Optional[Any] = None,
    ):
        """
        Initialize Gmail provider.

        Args:
            user_id: Gmail userId ("me" is the authenticated user)
            scopes: OAuth scopes (defaults to settings.basic + labels)
            credentials_file: OAuth client secrets file
            token_file: Cached user token file
            service: Optional pre-built Gmail service for testing
        """
        self.user_id = user_id
        self.scopes = scopes or DEFAULT_SCOPES
        self.credentials_file = credentials_file
        self.token_file = token_file
        self._service = service
        self._label_cache: Optional[Dict[str, str]] = None
        self._connected = False

    def connect(self) -> None:
        """Establish connection via OAuth."""
        if self._service is None:
            import gmail_auth
            try:
                self._service = gmail_auth.build_gmail_service(
                    scopes=self.scopes,
                    credentials_file=self.credentials_file,
                    token_file=self.token_file,
                )
            except (RuntimeError, GoogleAuthError) as e:
                raise ProviderRequestFailed(f"connecting to Gmail failed: {e}") from e
            logger.info("Gmail provider connected")
        self._connected = True

    def disconnect(self) -> None:
        """Disconnect (no-op for Gmail API)."""
        self._connected = False
        logger.debug("Gmail provider disconnected")

    @property
    def service(self):
        if self._service is None:
            raise RuntimeError("GmailFilterProvider is not connected. Call connect() first.")
        return self._service

    def _filters(self):
        return self.service.users().settings().filters()

    def list_filters(self) -> List[ProviderFilter]:
        """List all filters for the user."""
        try:
            resp = self._filters().list(userId=self.user_id).execute()
        except HttpError as e:
            raise ProviderRequestFailed(f"listing filters failed: {e}") from e

        filters = [ProviderFilter.from_api(f) for f in resp.get("filter", [])]
        logger.debug(f"Listed {len(filters)} filters")
        return filters

    def create_filter(self, provider_filter: ProviderFilter) -> str:
        """Create a filter and return its id."""
        body = provider_filter.to_api()
        body.pop("id", None)
        try:
            created = self._filters().create(userId=self.user_id, body=body).execute()
        except HttpError as e:
            raise ProviderRequestFailed(
                f"creating filter {body} failed: {e}",
                filter=provider_filter,
            ) from e
        return created["id"]

    def delete_filter(self, filter_id: str) -> None:
        """Delete a filter by id."""
        try:
            self._filters().delete(userId=self.user_id, id=filter_id).execute()
        except HttpError as e:
            raise ProviderRequestFailed(
                f"deleting filter id {filter_id} failed: {e}",
                filter_id=filter_id,
            ) from e

    def _fetch_labels(self) -> List[Dict[str, Any]]:
        try:
            results = self.service.users().labels().list(userId=self.user_id).execute()
        except HttpError as e:
            raise ProviderRequestFailed(f"listing labels failed: {e}") from e
        return results.get("labels", [])

    def _init_label_cache(self) -> None:
        """Fetch all label ids, keyed by name."""
        self._label_cache = {label["name"]: label["id"] for label in self._fetch_labels()}
        logger.debug(f"Cached {len(self._label_cache)} labels")

    def list_labels(self) -> Dict[str, str]:
        """Get the label id -> name mapping."""
        labels = self._fetch_labels()
        self._label_cache = {label["name"]: label["id"] for label in labels}
        return {label["id"]: label["name"] for label in labels}

    def resolve_or_create_label(self, name: str) -> str:
        """Return the label's id, creating the label if it does not exist."""
        if self._label_cache is None:
            self._init_label_cache()
        if name in self._label_cache:
            return self._label_cache[name]

        logger.info(f"Creating missing label: {name}")
        label_object = {
            "name": name,
            "labelListVisibility": "labelShow",
            "messageListVisibility": "show",
        }
        try:
            created = self.service.users().labels().create(
                userId=self.user_id,
                body=label_object,
            ).execute()
        except HttpError as e:
            if getattr(e.resp, "status", None) == 409:
                # Created elsewhere since the cache was filled.
                self._init_label_cache()
                if name in self._label_cache:
                    return self._label_cache[name]
            raise ProviderRequestFailed(f"creating label {name!r} failed: {e}") from e

        self._label_cache[name] = created["id"]
        return created["id"]
