"""Tests for worker script composition and hashing."""

import hashlib
from pathlib import Path

import pytest

from github_webhook.worker.artifact import (
    BASE_SCRIPT,
    ComposedScript,
    compose_worker_script,
    read_handler_script,
)


def test_base_script_is_bundled() -> None:
    """The base script exposes the fetch entry point that calls handle()."""
    assert "async fetch(request, env, ctx)" in BASE_SCRIPT
    assert "await handle(githubEvent, payloadJson, env)" in BASE_SCRIPT
    assert "x-hub-signature-256" in BASE_SCRIPT


def test_compose_puts_handler_before_base() -> None:
    result = compose_worker_script("HANDLER", "BASE")

    assert isinstance(result, ComposedScript)
    assert result.content == "HANDLER\nBASE"
    assert result.content.index("HANDLER") < result.content.index("BASE")


def test_compose_uses_bundled_base_by_default() -> None:
    handler = "async function handle(githubEvent, payload, env) { return {}; }"
    result = compose_worker_script(handler)

    assert result.content.startswith(handler + "\n")
    assert result.content.endswith(BASE_SCRIPT)


def test_digest_is_sha256_hex_of_utf8_content() -> None:
    result = compose_worker_script("// héllo", "BASE")

    assert len(result.sha256) == 64
    assert result.sha256 == hashlib.sha256(result.content.encode("utf-8")).hexdigest()


def test_digest_is_deterministic() -> None:
    assert compose_worker_script("h", "b").sha256 == compose_worker_script("h", "b").sha256


@pytest.mark.parametrize(("handler", "base"), [("h!", "b"), ("h", "b!"), ("H", "b")])
def test_digest_changes_when_any_byte_changes(handler: str, base: str) -> None:
    assert compose_worker_script(handler, base).sha256 != compose_worker_script("h", "b").sha256


def test_read_handler_script(handler_path: Path) -> None:
    assert "Test handler called" in read_handler_script(handler_path)


def test_read_handler_script_missing(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc_info:
        read_handler_script(tmp_path / "nope.js")
    assert "failed to read post auth handler script" in str(exc_info.value)
