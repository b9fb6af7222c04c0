# library_core/audit/tests/test_redaction_and_changes.py
from library_core.audit.recorder import compute_changes
from library_core.audit.redaction import REDACTED, is_sensitive_key, redact


def test_sensitive_keys_are_case_insensitive_substrings():
    for key in ("password", "Password", "confirmPassword", "accessToken", "client_secret", "apiKey"):
        assert is_sensitive_key(key), key
    for key in ("email", "title", "userId"):
        assert not is_sensitive_key(key), key


def test_redact_walks_nested_structures():
    payload = {
        "email": "a@b.com",
        "password": "hunter2",
        "profile": {"API_KEY": "abc", "name": "Ana"},
        "history": [{"token": "t1"}, {"note": "ok"}],
    }

    cleaned = redact(payload)

    assert cleaned == {
        "email": "a@b.com",
        "password": REDACTED,
        "profile": {"API_KEY": REDACTED, "name": "Ana"},
        "history": [{"token": REDACTED}, {"note": "ok"}],
    }
    # input untouched
    assert payload["password"] == "hunter2"


def test_compute_changes_for_equal_payloads_is_none():
    data = {"title": "A", "price": 10}
    assert compute_changes(data, dict(data)) is None


def test_compute_changes_lists_only_differing_fields():
    old = {"title": "A", "price": 10, "author": "X"}
    new = {"title": "B", "price": 10, "author": "X"}

    assert compute_changes(old, new) == {"title": {"from": "A", "to": "B"}}


def test_compute_changes_needs_both_sides():
    assert compute_changes(None, {"a": 1}) is None
    assert compute_changes({"a": 1}, None) is None
