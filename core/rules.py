"""
Rule validation and forward translation.

Turns a declarative Rule into the provider filters that implement it. Gmail
allows a single user label per filter and has no "archive unless to me"
action, so one rule may fan out into several filters sharing its criteria.

Usage:
    from core.rules import ForwardTranslator

    translator = ForwardTranslator(LabelDirectory(provider))
    filters = translator.translate(Rule(query="from:x", delete=True))
    # -> [ProviderFilter(criteria.query="from:x", action.add_label_ids=("TRASH",))]
"""

import logging
from typing import Iterable, List

from core.errors import InvalidRule
from core.labels import LabelDirectory
from core.models import (
    IMPORTANT,
    INBOX,
    NOT_TO_ME,
    SPAM,
    STARRED,
    TO_ME,
    TRASH,
    UNREAD,
    FilterAction,
    FilterCriteria,
    ProviderFilter,
    Rule,
)

logger = logging.getLogger(__name__)


def validate_rule(rule: Rule) -> None:
    """
    Reject rules that cannot be translated.

    Raises:
        InvalidRule: If both queries are empty, or both archive flags are set
    """
    if not rule.query and not rule.negated_query:
        raise InvalidRule("Query and NegatedQuery cannot both be empty")
    if rule.archive and rule.archive_unless_to_me:
        raise InvalidRule("Archive and ArchiveUnlessToMe cannot both be true")


def validate_rules(rules: Iterable[Rule]) -> None:
    """Validate a batch, raising InvalidRule for the first bad rule (1-based)."""
    for n, rule in enumerate(rules, start=1):
        try:
            validate_rule(rule)
        except InvalidRule as e:
            raise InvalidRule(f"filter #{n}: {e}") from e


def _base_label_ids(rule: Rule):
    add: List[str] = []
    remove: List[str] = []
    if rule.archive:
        remove.append(INBOX)
    if rule.read:
        remove.append(UNREAD)
    if rule.delete:
        add.append(TRASH)
    if rule.important:
        add.append(IMPORTANT)
    if rule.star:
        add.append(STARRED)
    if rule.spam:
        add.append(SPAM)
    return add, remove


class ForwardTranslator:
    """Translates rules into provider filters, resolving labels as it goes."""

    def __init__(self, labels: LabelDirectory):
        self._labels = labels

    def translate(self, rule: Rule) -> List[ProviderFilter]:
        """
        Translate one rule.

        Filters are returned as: the conditional-archive filter (if any), then
        one label-only filter per label (when more than one label), then the
        base filter if its action is non-empty.

        Raises:
            InvalidRule: If the rule fails validation
            LabelResolutionFailed: If a label cannot be resolved or created
        """
        validate_rule(rule)

        add, remove = _base_label_ids(rule)
        forward = rule.forward_to or ""
        match_only = FilterCriteria(query=rule.query, negated_query=rule.negated_query)

        filters: List[ProviderFilter] = []

        if rule.archive_unless_to_me:
            # The to:me half below never archives; this one does.
            filters.append(ProviderFilter(
                criteria=FilterCriteria(
                    query=rule.query,
                    negated_query=rule.negated_query,
                    to=NOT_TO_ME,
                ),
                action=FilterAction(
                    add_label_ids=tuple(add),
                    remove_label_ids=tuple(remove) + (INBOX,),
                    forward=forward,
                ),
            ))

        if len(rule.labels) > 1:
            for name in rule.labels:
                label_id = self._labels.resolve_or_create(name)
                filters.append(ProviderFilter(
                    criteria=match_only,
                    action=FilterAction(add_label_ids=(label_id,)),
                ))
        elif len(rule.labels) == 1:
            add.append(self._labels.resolve_or_create(rule.labels[0]))

        base = ProviderFilter(
            criteria=FilterCriteria(
                query=rule.query,
                negated_query=rule.negated_query,
                to=TO_ME if rule.archive_unless_to_me else "",
            ),
            action=FilterAction(
                add_label_ids=tuple(add),
                remove_label_ids=tuple(remove),
                forward=forward,
            ),
        )
        if not base.action.is_empty:
            filters.append(base)

        logger.debug(f"Rule {rule.match_key} -> {len(filters)} filter(s)")
        return filters

    def translate_all(self, rules: Iterable[Rule]) -> List[ProviderFilter]:
        """
        Translate a batch of rules.

        Every rule is validated before any label is resolved, so a bad rule
        anywhere in the batch fails without touching the provider.
        """
        rules = list(rules)
        validate_rules(rules)
        filters: List[ProviderFilter] = []
        for rule in rules:
            filters.extend(self.translate(rule))
        return filters
