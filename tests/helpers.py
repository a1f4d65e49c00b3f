from __future__ import annotations

from typing import Dict, List, Optional

from core.errors import ProviderRequestFailed
from core.models import FilterAction, FilterCriteria, ProviderFilter
from providers.base import FilterProvider


class FakeFilterProvider(FilterProvider):
    """In-memory provider that records every call."""

    name = "fake"

    def __init__(
        self,
        filters: Optional[List[ProviderFilter]] = None,
        labels: Optional[Dict[str, str]] = None,
        fail_create_at: Optional[int] = None,
        fail_delete_at: Optional[int] = None,
        fail_labels: bool = False,
        fail_list: bool = False,
    ) -> None:
        self.filters: List[ProviderFilter] = list(filters or [])
        # id -> name
        self.labels: Dict[str, str] = dict(labels or {})
        self.fail_create_at = fail_create_at
        self.fail_delete_at = fail_delete_at
        self.fail_labels = fail_labels
        self.fail_list = fail_list
        self.created: List[ProviderFilter] = []
        self.deleted: List[str] = []
        self.label_create_calls: List[str] = []
        self.list_labels_calls = 0
        self.connected = False
        self._next_id = 1

    def connect(self) -> None:
        self.connected = True

    def disconnect(self) -> None:
        self.connected = False

    def list_filters(self) -> List[ProviderFilter]:
        if self.fail_list:
            raise ProviderRequestFailed("listing filters failed: boom")
        return list(self.filters)

    def create_filter(self, provider_filter: ProviderFilter) -> str:
        if self.fail_create_at is not None and len(self.created) == self.fail_create_at:
            raise ProviderRequestFailed("creating filter failed: boom", filter=provider_filter)
        filter_id = f"f{self._next_id}"
        self._next_id += 1
        stored = ProviderFilter(
            criteria=provider_filter.criteria,
            action=provider_filter.action,
            id=filter_id,
        )
        self.created.append(stored)
        self.filters.append(stored)
        return filter_id

    def delete_filter(self, filter_id: str) -> None:
        if self.fail_delete_at is not None and len(self.deleted) == self.fail_delete_at:
            raise ProviderRequestFailed(f"deleting filter id {filter_id} failed: boom", filter_id=filter_id)
        self.deleted.append(filter_id)
        self.filters = [f for f in self.filters if f.id != filter_id]

    def list_labels(self) -> Dict[str, str]:
        self.list_labels_calls += 1
        if self.fail_labels:
            raise ProviderRequestFailed("listing labels failed: boom")
        return dict(self.labels)

    def resolve_or_create_label(self, name: str) -> str:
        if self.fail_labels:
            raise ProviderRequestFailed(f"creating label {name!r} failed: boom")
        for label_id, label_name in self.labels.items():
            if label_name == name:
                return label_id
        self.label_create_calls.append(name)
        label_id = f"Label_{len(self.labels) + 1}"
        self.labels[label_id] = name
        return label_id


def make_filter(
    *,
    query: str = "",
    negated_query: str = "",
    to: str = "",
    add: tuple[str, ...] = (),
    remove: tuple[str, ...] = (),
    forward: str = "",
    filter_id: Optional[str] = None,
) -> ProviderFilter:
    return ProviderFilter(
        criteria=FilterCriteria(query=query, negated_query=negated_query, to=to),
        action=FilterAction(add_label_ids=add, remove_label_ids=remove, forward=forward),
        id=filter_id,
    )
