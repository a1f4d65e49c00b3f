"""
Data models for filter synchronization.

Provides the declarative Rule authored in the filters file and the
provider-native filter (criteria + action) it translates to.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from core.errors import InvalidRule

logger = logging.getLogger(__name__)

# Well-known Gmail system label ids.
INBOX = "INBOX"
UNREAD = "UNREAD"
TRASH = "TRASH"
IMPORTANT = "IMPORTANT"
STARRED = "STARRED"
SPAM = "SPAM"

SYSTEM_LABEL_IDS = frozenset({INBOX, UNREAD, TRASH, IMPORTANT, STARRED, SPAM})

# "addressed-to" sentinels used by conditional archiving.
TO_ME = "me"
NOT_TO_ME = "(-me)"

# Criteria keys a ProviderFilter carries; other Gmail criteria (from, subject, ...)
# are not represented.
_API_CRITERIA_KEYS = ("query", "negatedQuery", "to")


@dataclass(frozen=True)
class FilterCriteria:
    """Match expression of a provider filter."""
    query: str = ""
    negated_query: str = ""
    to: str = ""


@dataclass(frozen=True)
class FilterAction:
    """
    What a provider filter does to a matching message.

    Attributes:
        add_label_ids: Label ids added to the message
        remove_label_ids: Label ids removed from the message
        forward: Forwarding address (empty for none)
    """
    add_label_ids: Tuple[str, ...] = ()
    remove_label_ids: Tuple[str, ...] = ()
    forward: str = ""

    @property
    def is_empty(self) -> bool:
        """True when the action neither changes labels nor forwards."""
        return not (self.add_label_ids or self.remove_label_ids or self.forward)


@dataclass(frozen=True)
class ProviderFilter:
    """
    A provider-side filter: criteria paired with an action.

    Created fresh by translation and never mutated. Filters listed from the
    provider carry their id; translated filters have none until created.
    """
    criteria: FilterCriteria
    action: FilterAction
    id: Optional[str] = None

    def to_api(self) -> Dict[str, Any]:
        """Render as a Gmail API Filter resource (empty fields omitted)."""
        criteria: Dict[str, Any] = {}
        if self.criteria.query:
            criteria["query"] = self.criteria.query
        if self.criteria.negated_query:
            criteria["negatedQuery"] = self.criteria.negated_query
        if self.criteria.to:
            criteria["to"] = self.criteria.to

        action: Dict[str, Any] = {}
        if self.action.add_label_ids:
            action["addLabelIds"] = list(self.action.add_label_ids)
        if self.action.remove_label_ids:
            action["removeLabelIds"] = list(self.action.remove_label_ids)
        if self.action.forward:
            action["forward"] = self.action.forward

        body: Dict[str, Any] = {"criteria": criteria, "action": action}
        if self.id:
            body["id"] = self.id
        return body

    @classmethod
    def from_api(cls, resource: Dict[str, Any]) -> "ProviderFilter":
        """Parse a Gmail API Filter resource."""
        criteria = resource.get("criteria") or {}
        action = resource.get("action") or {}
        dropped = sorted(set(criteria) - set(_API_CRITERIA_KEYS))
        if dropped:
            logger.debug(
                f"Filter {resource.get('id')}: ignoring unsupported criteria {dropped}"
            )
        return cls(
            criteria=FilterCriteria(
                query=criteria.get("query", ""),
                negated_query=criteria.get("negatedQuery", ""),
                to=criteria.get("to", ""),
            ),
            action=FilterAction(
                add_label_ids=tuple(action.get("addLabelIds") or ()),
                remove_label_ids=tuple(action.get("removeLabelIds") or ()),
                forward=action.get("forward", ""),
            ),
            id=resource.get("id"),
        )


# Rule attribute <-> filters-file key, in file order.
RULE_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("query", "Query"),
    ("negated_query", "NegatedQuery"),
    ("archive", "Archive"),
    ("archive_unless_to_me", "ArchiveUnlessToMe"),
    ("read", "Read"),
    ("delete", "Delete"),
    ("important", "Important"),
    ("star", "Star"),
    ("spam", "Spam"),
    ("labels", "Labels"),
    ("forward_to", "ForwardTo"),
)

_BOOL_FIELDS = {
    "archive", "archive_unless_to_me", "read", "delete", "important", "star", "spam",
}


@dataclass
class Rule:
    """
    Declarative filter rule, one entry per author-visible intent.

    Attributes:
        query: Match expression
        negated_query: Expression that must not match
        archive: Remove from inbox
        archive_unless_to_me: Remove from inbox unless addressed to me
        read: Mark as read
        delete: Move to trash
        important: Mark important
        star: Star the message
        spam: Send to spam
        labels: User label names to apply, order preserved
        forward_to: Forwarding address
    """
    query: str = ""
    negated_query: str = ""
    archive: bool = False
    archive_unless_to_me: bool = False
    read: bool = False
    delete: bool = False
    important: bool = False
    star: bool = False
    spam: bool = False
    labels: List[str] = field(default_factory=list)
    forward_to: str = ""

    @property
    def match_key(self) -> Tuple[str, str]:
        """Key used to recognise the same rule across imports."""
        return (self.query, self.negated_query)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rule":
        """Build a rule from a filters-file record."""
        if not isinstance(data, dict):
            raise InvalidRule(f"filter entry must be a mapping, got {type(data).__name__}")

        by_key = {key: attr for attr, key in RULE_FIELDS}
        unknown = sorted(set(data) - set(by_key))
        if unknown:
            raise InvalidRule(f"unknown filter field(s): {', '.join(unknown)}")

        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            attr = by_key[key]
            if value is None:
                continue
            if attr == "labels":
                if isinstance(value, str):
                    value = [value]
                if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                    raise InvalidRule(f"{key} must be a list of strings")
                kwargs[attr] = list(value)
            elif attr in _BOOL_FIELDS:
                if not isinstance(value, bool):
                    raise InvalidRule(f"{key} must be true or false, got {value!r}")
                kwargs[attr] = value
            else:
                kwargs[attr] = str(value)
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Render as a filters-file record, omitting false and empty fields."""
        out: Dict[str, Any] = {}
        for attr, key in RULE_FIELDS:
            value = getattr(self, attr)
            if value:
                out[key] = list(value) if attr == "labels" else value
        return out


@dataclass
class ApplyResult:
    """Summary of an apply run."""
    rules_count: int = 0
    filters_created: int = 0
    filters_deleted: int = 0
    created_ids: List[str] = field(default_factory=list)
    planned: List[ProviderFilter] = field(default_factory=list)


@dataclass
class ExportResult:
    """Summary of an export run, with the merged rules."""
    provider_filters: int = 0
    rules_before: int = 0
    rules: List[Rule] = field(default_factory=list)

    @property
    def rules_after(self) -> int:
        return len(self.rules)
