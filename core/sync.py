"""
Apply, sync, delete and export operations.

These drive the translators against a FilterProvider. Everything is
sequential; the first failure aborts the operation and nothing already
done is rolled back.
"""

import logging
from typing import Iterable, List

from core.importer import FilterImporter, ReverseTranslator
from core.labels import LabelDirectory
from core.models import ApplyResult, ExportResult, Rule
from core.rules import ForwardTranslator
from providers.base import FilterProvider

logger = logging.getLogger(__name__)


def _create_filters(
    provider: FilterProvider,
    result: ApplyResult,
    dry_run: bool,
) -> None:
    for provider_filter in result.planned:
        logger.debug(
            f"Adding filter criteria={provider_filter.criteria} "
            f"action={provider_filter.action}"
        )
        if dry_run:
            logger.info(f"[dry-run] Would create filter {provider_filter.to_api()}")
            continue
        filter_id = provider.create_filter(provider_filter)
        result.created_ids.append(filter_id)
        result.filters_created += 1
        logger.info(f"Created filter {filter_id} for query {provider_filter.criteria.query!r}")


def apply_rules(
    rules: List[Rule],
    provider: FilterProvider,
    labels: LabelDirectory,
    dry_run: bool = False,
) -> ApplyResult:
    """
    Create the provider filters for each rule, in order.

    All rules are translated before the first filter is created.

    Args:
        rules: Rules to apply
        provider: Connected provider
        labels: Label directory for this run (build it with the same dry_run)
        dry_run: Translate and log but create nothing

    Raises:
        InvalidRule: A rule failed validation; nothing was created
        LabelResolutionFailed: A label could not be resolved or created
        ProviderRequestFailed: Creating a filter failed; earlier filters stay
    """
    result = ApplyResult(
        rules_count=len(rules),
        planned=ForwardTranslator(labels).translate_all(rules),
    )
    _create_filters(provider, result, dry_run)
    return result


def sync_rules(
    rules: List[Rule],
    provider: FilterProvider,
    labels: LabelDirectory,
    dry_run: bool = False,
) -> ApplyResult:
    """
    Replace every existing filter with the filters for rules.

    Rules are translated first, so an invalid rule or an unresolvable label
    aborts the sync before anything is deleted.
    """
    result = ApplyResult(
        rules_count=len(rules),
        planned=ForwardTranslator(labels).translate_all(rules),
    )
    result.filters_deleted = delete_all_filters(provider, dry_run=dry_run)
    _create_filters(provider, result, dry_run)
    return result


def delete_all_filters(provider: FilterProvider, dry_run: bool = False) -> int:
    """
    Delete every existing filter, in listing order.

    Stops at the first failed deletion, leaving the rest in place.

    Returns:
        Number of filters deleted (or that would be, with dry_run)
    """
    deleted = 0
    for provider_filter in provider.list_filters():
        if dry_run:
            logger.info(f"[dry-run] Would delete filter {provider_filter.id}")
        else:
            provider.delete_filter(provider_filter.id)
            logger.info(f"Deleted filter {provider_filter.id}")
        deleted += 1
    return deleted


def export_filters(
    provider: FilterProvider,
    labels: LabelDirectory,
    existing_rules: Iterable[Rule] = (),
) -> ExportResult:
    """
    Read the provider's filters back into rules, merged with existing ones.

    Raises:
        ProviderRequestFailed: Listing filters or labels failed
    """
    provider_filters = provider.list_filters()
    logger.info(f"Exporting {len(provider_filters)} existing filters")

    existing_rules = list(existing_rules)
    importer = FilterImporter(ReverseTranslator(labels.id_to_name()))
    return ExportResult(
        provider_filters=len(provider_filters),
        rules_before=len(existing_rules),
        rules=importer.import_all(provider_filters, existing_rules),
    )
