"""
Filters file persistence.

The filters file is YAML with a top-level ``Filter`` list, one record per rule:

    Filter:
      - Query: "list:announce.example.com"
        Archive: true
        Read: true
        Labels: ["Lists/Announce"]
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import List, Union

import yaml

from core.errors import InvalidRule, PersistenceFailed
from core.models import Rule

logger = logging.getLogger(__name__)

FILTER_KEY = "Filter"


def load_rules(path: Union[str, Path], missing_ok: bool = False) -> List[Rule]:
    """
    Load rules from a filters file.

    Args:
        path: Filters file location
        missing_ok: Return [] instead of failing when the file is absent

    Raises:
        PersistenceFailed: If the file cannot be read or is not valid YAML
        InvalidRule: If a record has unknown or mistyped fields
    """
    path = Path(path).expanduser()
    if not path.exists():
        if missing_ok:
            logger.info(f"No filters file at {path}, starting empty")
            return []
        raise PersistenceFailed(f"reading filters file {path} failed: file not found")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise PersistenceFailed(f"reading filters file {path} failed: {e}") from e
    except yaml.YAMLError as e:
        raise PersistenceFailed(f"decoding filters file {path} failed: {e}") from e

    if not isinstance(data, dict):
        raise PersistenceFailed(f"filters file {path} must be a mapping with a {FILTER_KEY!r} list")

    records = data.get(FILTER_KEY) or []
    if not isinstance(records, list):
        raise PersistenceFailed(f"{FILTER_KEY!r} in {path} must be a list")

    rules = []
    for index, record in enumerate(records):
        try:
            rules.append(Rule.from_dict(record))
        except InvalidRule as e:
            raise InvalidRule(f"{path}: filter #{index + 1}: {e}") from e

    logger.info(f"Loaded {len(rules)} filters from {path}")
    return rules


def dump_rules(rules: List[Rule]) -> str:
    """Serialize rules to filters-file YAML."""
    document = {FILTER_KEY: [rule.to_dict() for rule in rules]}
    return yaml.safe_dump(
        document,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )


def save_rules(path: Union[str, Path], rules: List[Rule]) -> None:
    """
    Write rules to a filters file, replacing it atomically.

    Raises:
        PersistenceFailed: If the file cannot be written
    """
    path = Path(path).expanduser()
    text = dump_rules(rules)

    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise PersistenceFailed(f"writing filters file {path} failed: {e}") from e

    logger.info(f"Exported {len(rules)} filters to {path}")
