"""
Label directory: name <-> id resolution for one run.

Wraps a provider's label calls with a cache keyed by label name so each user
label is looked up (or created) at most once per run. Build one directory per
run and discard it afterwards.

In dry-run mode missing labels are never created; they resolve to a
placeholder id of the form "<new:Name>" instead.
"""

import logging
from typing import Dict, Optional

from core.errors import FilterSyncError, LabelResolutionFailed
from core.models import SYSTEM_LABEL_IDS

logger = logging.getLogger(__name__)


class LabelDirectory:
    """
    Cached label resolution backed by a FilterProvider.

    Example:
        labels = LabelDirectory(provider)
        label_id = labels.resolve_or_create("Lists/Python")
    """

    def __init__(self, provider, dry_run: bool = False):
        self._provider = provider
        self.dry_run = dry_run
        self._ids_by_name: Dict[str, str] = {}
        self._names_by_id: Optional[Dict[str, str]] = None

    def preload(self) -> None:
        """Fill the cache from the provider's existing labels."""
        self.id_to_name()

    def resolve_or_create(self, name: str) -> str:
        """
        Resolve a label name to its id, creating the label if needed.

        Raises:
            LabelResolutionFailed: If the provider cannot resolve or create it
        """
        if name in SYSTEM_LABEL_IDS:
            return name
        if name in self._ids_by_name:
            return self._ids_by_name[name]
        if self.dry_run:
            return self._placeholder(name)

        try:
            label_id = self._provider.resolve_or_create_label(name)
        except FilterSyncError as e:
            raise LabelResolutionFailed(name, f"resolving label {name!r} failed: {e}") from e
        if not label_id:
            raise LabelResolutionFailed(name, f"provider returned no id for label {name!r}")

        self._ids_by_name[name] = label_id
        if self._names_by_id is not None:
            self._names_by_id[label_id] = name
        logger.debug(f"Resolved label {name} -> {label_id}")
        return label_id

    def id_to_name(self) -> Dict[str, str]:
        """
        Get the label id -> name mapping.

        Loaded from the provider on first use and kept in step with labels
        resolved during the run.
        """
        if self._names_by_id is None:
            listed = self._provider.list_labels()
            names = dict(listed)
            # Labels created before the first listing.
            for name, label_id in self._ids_by_name.items():
                names.setdefault(label_id, name)
            self._names_by_id = names
            for label_id, name in listed.items():
                self._ids_by_name.setdefault(name, label_id)
            logger.debug(f"Cached {len(self._names_by_id)} labels")
        return dict(self._names_by_id)

    def _placeholder(self, name: str) -> str:
        # Listing is read-only, so existing labels still resolve to real ids.
        try:
            self.id_to_name()
        except FilterSyncError as e:
            raise LabelResolutionFailed(name, f"listing labels for {name!r} failed: {e}") from e
        if name not in self._ids_by_name:
            logger.info(f"[dry-run] Would create label {name!r}")
            self._ids_by_name[name] = f"<new:{name}>"
        return self._ids_by_name[name]
