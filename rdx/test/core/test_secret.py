from __future__ import annotations

from rdx.core.secret import Secret


def test_value_is_redacted() -> None:
    secret = Secret("GITHUB_TOKEN", "ghp_abc123")

    assert "ghp_abc123" not in repr(secret)
    assert "ghp_abc123" not in str(secret)
    assert secret.reveal() == "ghp_abc123"


def test_empty_secret_is_falsy() -> None:
    assert not Secret("GITHUB_TOKEN", "")
    assert Secret("GITHUB_TOKEN", "x")
