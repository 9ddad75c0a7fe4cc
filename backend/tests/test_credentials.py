"""Tests for the credential store."""

import pytest

from boltchat.credentials.store import (
    MASK_CHAR,
    CredentialStore,
    InvalidCredentialError,
    mask,
)


def test_empty_store_reports_absent() -> None:
    store = CredentialStore()
    assert store.get().present is False
    assert store.status().present is False
    assert store.status().masked == ""


def test_initial_value_is_stripped() -> None:
    store = CredentialStore("  sk-abc  ")
    assert store.get().value == "sk-abc"


def test_set_and_clear() -> None:
    store = CredentialStore()
    store.set("sk-live-key")
    assert store.present
    assert store.get().value == "sk-live-key"

    store.clear()
    assert not store.present


@pytest.mark.parametrize("value", ["", "   ", MASK_CHAR * 10, f"sk-{MASK_CHAR}"])
def test_rejects_empty_or_masked_input(value: str) -> None:
    store = CredentialStore("sk-original")
    with pytest.raises(InvalidCredentialError):
        store.set(value)
    assert store.get().value == "sk-original"


def test_status_never_exposes_value() -> None:
    store = CredentialStore("sk-super-secret")
    status = store.status()
    assert status.present is True
    assert "sk-super-secret" not in status.masked
    assert set(status.masked) == {MASK_CHAR}


def test_snapshot_survives_later_edits() -> None:
    store = CredentialStore("sk-first")
    snapshot = store.get()
    store.set("sk-second")
    assert snapshot.value == "sk-first"


def test_mask_of_nothing_is_empty() -> None:
    assert mask("") == ""
