"""
Core filter sync module.

Provides the rule model, the forward/reverse translators between rules and
Gmail filters, the import merger, label resolution, and filters-file storage.
Apply/delete/export orchestration lives in core.sync.
"""

from core.errors import (
    FilterSyncError,
    InvalidRule,
    LabelResolutionFailed,
    ProviderRequestFailed,
    PersistenceFailed,
)
from core.models import FilterAction, FilterCriteria, ProviderFilter, Rule
from core.labels import LabelDirectory
from core.rules import ForwardTranslator, validate_rule, validate_rules
from core.importer import FilterImporter, ReverseTranslator, find_matching_rule
from core.filterfile import load_rules, save_rules
from core.config import Config, load_config, create_sample_config

__all__ = [
    "FilterSyncError",
    "InvalidRule",
    "LabelResolutionFailed",
    "ProviderRequestFailed",
    "PersistenceFailed",
    "FilterAction",
    "FilterCriteria",
    "ProviderFilter",
    "Rule",
    "LabelDirectory",
    "ForwardTranslator",
    "validate_rule",
    "validate_rules",
    "FilterImporter",
    "ReverseTranslator",
    "find_matching_rule",
    "load_rules",
    "save_rules",
    "Config",
    "load_config",
    "create_sample_config",
]
