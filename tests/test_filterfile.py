from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from core.errors import InvalidRule, PersistenceFailed
from core.filterfile import dump_rules, load_rules, save_rules
from core.models import Rule


def test_load_rules_reads_field_names(tmp_path: Path) -> None:
    path = tmp_path / "filters.yaml"
    path.write_text(
        """
Filter:
  - Query: "list:announce.example.test"
    Archive: true
    Read: true
    Labels: ["Lists/Announce", "Lists/All"]
  - NegatedQuery: "from:boss@example.test"
    ArchiveUnlessToMe: true
    ForwardTo: "backup@example.test"
""",
        encoding="utf-8",
    )

    rules = load_rules(path)

    assert rules == [
        Rule(query="list:announce.example.test", archive=True, read=True, labels=["Lists/Announce", "Lists/All"]),
        Rule(negated_query="from:boss@example.test", archive_unless_to_me=True, forward_to="backup@example.test"),
    ]


def test_load_rules_rejects_unknown_fields(tmp_path: Path) -> None:
    path = tmp_path / "filters.yaml"
    path.write_text("Filter:\n  - Query: a\n    Archiv: true\n", encoding="utf-8")

    with pytest.raises(InvalidRule, match="Archiv"):
        load_rules(path)


def test_load_rules_rejects_non_boolean_flags(tmp_path: Path) -> None:
    path = tmp_path / "filters.yaml"
    path.write_text("Filter:\n  - Query: a\n    Star: 'yes please'\n", encoding="utf-8")

    with pytest.raises(InvalidRule):
        load_rules(path)


def test_load_rules_wraps_yaml_errors(tmp_path: Path) -> None:
    path = tmp_path / "filters.yaml"
    path.write_text("Filter: [unclosed\n", encoding="utf-8")

    with pytest.raises(PersistenceFailed):
        load_rules(path)


def test_load_rules_missing_file(tmp_path: Path) -> None:
    path = tmp_path / "absent.yaml"

    with pytest.raises(PersistenceFailed):
        load_rules(path)
    assert load_rules(path, missing_ok=True) == []


def test_empty_file_has_no_rules(tmp_path: Path) -> None:
    path = tmp_path / "filters.yaml"
    path.write_text("", encoding="utf-8")

    assert load_rules(path) == []


def test_save_rules_omits_false_fields_and_keeps_key_order(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "filters.yaml"

    save_rules(path, [Rule(query="from:x", delete=True, labels=["A"])])

    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert data == {"Filter": [{"Query": "from:x", "Delete": True, "Labels": ["A"]}]}
    assert list(data["Filter"][0]) == ["Query", "Delete", "Labels"]


def test_save_then_load_preserves_rules(tmp_path: Path) -> None:
    path = tmp_path / "filters.yaml"
    rules = [
        Rule(query="list:x", archive_unless_to_me=True, labels=["A", "A"]),
        Rule(query="from:y", negated_query="subject:z", spam=True),
    ]

    save_rules(path, rules)

    assert load_rules(path) == rules


def test_save_rules_reports_write_errors(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(PersistenceFailed):
        save_rules(blocker / "filters.yaml", [Rule(query="a", star=True)])


def test_dump_rules_of_empty_list() -> None:
    assert yaml.safe_load(dump_rules([])) == {"Filter": []}
