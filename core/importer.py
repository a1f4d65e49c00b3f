"""
Reverse translation and import of provider filters.

Each provider filter becomes a partial Rule; the importer folds partial rules
that share a (query, negated query) pair back into one rule, so the fan-out
done by ForwardTranslator is undone on export.
"""

import copy
import logging
from typing import Iterable, List, Mapping, Optional, Tuple

from core.models import (
    IMPORTANT,
    INBOX,
    NOT_TO_ME,
    SPAM,
    STARRED,
    TO_ME,
    TRASH,
    UNREAD,
    ProviderFilter,
    Rule,
)

logger = logging.getLogger(__name__)


class ReverseTranslator:
    """
    Best-effort ProviderFilter -> Rule mapping.

    Args:
        label_names: Label id -> name; ids missing from it are skipped
    """

    def __init__(self, label_names: Mapping[str, str]):
        self._label_names = dict(label_names)

    def from_provider_filter(self, provider_filter: ProviderFilter) -> Rule:
        criteria = provider_filter.criteria
        action = provider_filter.action
        rule = Rule(query=criteria.query, negated_query=criteria.negated_query)

        for label_id in action.add_label_ids:
            if label_id == TRASH:
                rule.delete = True
            elif label_id == IMPORTANT:
                rule.important = True
            elif label_id == STARRED:
                rule.star = True
            elif label_id == SPAM:
                rule.spam = True
            elif label_id in self._label_names:
                rule.labels.append(self._label_names[label_id])
            else:
                logger.debug(f"Skipping unknown label id {label_id}")

        for label_id in action.remove_label_ids:
            if label_id == UNREAD:
                rule.read = True
            elif label_id == INBOX:
                if criteria.to in (TO_ME, NOT_TO_ME):
                    rule.archive_unless_to_me = True
                    rule.archive = False
                else:
                    rule.archive = True

        if action.forward:
            rule.forward_to = action.forward

        return rule


def find_matching_rule(rules: Iterable[Rule], key: Tuple[str, str]) -> Optional[Rule]:
    """
    Find the rule whose (query, negated_query) equals key.

    Returns None when nothing matches. An all-empty key never matches.
    """
    if not any(key):
        return None
    for rule in rules:
        if rule.match_key == key:
            return rule
    return None


class FilterImporter:
    """Merges reverse-translated provider filters into a rule set."""

    def __init__(self, reverse: ReverseTranslator):
        self._reverse = reverse

    def import_all(
        self,
        provider_filters: Iterable[ProviderFilter],
        existing_rules: Iterable[Rule] = (),
    ) -> List[Rule]:
        """
        Build the exported rule set.

        Starts from a copy of existing_rules and processes filters in provider
        order. A partial rule matching an exported rule contributes its labels
        (appended, no dedup) and its archive-unless-to-me flag; otherwise it is
        added as a new rule. Setting archive-unless-to-me on a match also
        clears its plain archive flag, since a rule may not carry both.

        Args:
            provider_filters: Filters as listed by the provider
            existing_rules: Rules already known (left untouched)

        Returns:
            The merged rule list
        """
        exported: List[Rule] = [copy.deepcopy(rule) for rule in existing_rules]

        for provider_filter in provider_filters:
            partial = self._reverse.from_provider_filter(provider_filter)
            match = find_matching_rule(exported, partial.match_key)

            if match is None:
                logger.debug(f"New exported filter {partial.match_key} labels={partial.labels}")
                exported.append(partial)
                continue

            match.labels.extend(partial.labels)
            if partial.archive_unless_to_me:
                match.archive_unless_to_me = True
                match.archive = False
            logger.debug(
                f"Existing filter update {partial.match_key}: "
                f"incoming={partial.labels} updated={match.labels}"
            )

        return exported
