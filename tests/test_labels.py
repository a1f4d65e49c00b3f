from __future__ import annotations

import pytest

from core.errors import LabelResolutionFailed, ProviderRequestFailed
from core.labels import LabelDirectory
from tests.helpers import FakeFilterProvider


def test_system_labels_resolve_without_provider_calls() -> None:
    provider = FakeFilterProvider(fail_labels=True)
    labels = LabelDirectory(provider)

    assert labels.resolve_or_create("STARRED") == "STARRED"
    assert labels.resolve_or_create("INBOX") == "INBOX"


def test_label_is_created_once_per_name() -> None:
    provider = FakeFilterProvider()
    labels = LabelDirectory(provider)

    first = labels.resolve_or_create("Lists/A")
    second = labels.resolve_or_create("Lists/A")

    assert first == second == "Label_1"
    assert provider.label_create_calls == ["Lists/A"]


def test_preload_avoids_create_for_existing_labels() -> None:
    provider = FakeFilterProvider(labels={"Label_7": "Lists/A"})
    labels = LabelDirectory(provider)
    labels.preload()
    provider.fail_labels = True

    assert labels.resolve_or_create("Lists/A") == "Label_7"


def test_id_to_name_is_loaded_once_and_tracks_new_labels() -> None:
    provider = FakeFilterProvider(labels={"Label_7": "Lists/A"})
    labels = LabelDirectory(provider)

    assert labels.id_to_name() == {"Label_7": "Lists/A"}
    new_id = labels.resolve_or_create("Lists/New")

    assert labels.id_to_name() == {"Label_7": "Lists/A", new_id: "Lists/New"}
    assert provider.list_labels_calls == 1


def test_provider_failure_becomes_label_resolution_failed() -> None:
    labels = LabelDirectory(FakeFilterProvider(fail_labels=True))

    with pytest.raises(LabelResolutionFailed) as excinfo:
        labels.resolve_or_create("Lists/A")

    assert excinfo.value.label == "Lists/A"
    assert isinstance(excinfo.value.__cause__, ProviderRequestFailed)


def test_dry_run_uses_existing_ids_and_placeholders_for_new_labels() -> None:
    provider = FakeFilterProvider(labels={"Label_7": "Lists/A"})
    labels = LabelDirectory(provider, dry_run=True)

    assert labels.resolve_or_create("Lists/A") == "Label_7"
    assert labels.resolve_or_create("Lists/New") == "<new:Lists/New>"
    assert labels.resolve_or_create("Lists/New") == "<new:Lists/New>"
    assert provider.label_create_calls == []
    assert provider.list_labels_calls == 1


def test_dry_run_listing_failure_becomes_label_resolution_failed() -> None:
    labels = LabelDirectory(FakeFilterProvider(fail_labels=True), dry_run=True)

    with pytest.raises(LabelResolutionFailed) as excinfo:
        labels.resolve_or_create("Lists/A")

    assert excinfo.value.label == "Lists/A"
