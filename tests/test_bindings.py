"""Tests for worker binding assembly."""

import pulumi
import pytest

from github_webhook.worker.bindings import (
    GITHUB_WEBHOOK_SECRET_BINDING,
    BindingType,
    WebhookEnvVar,
    build_bindings,
    ensure_unique_binding_names,
    github_secret_binding,
    parse_extra_bindings,
)


def test_build_bindings_preserves_order_and_length() -> None:
    env_vars = [
        WebhookEnvVar(name="A", text="1", type=BindingType.PLAIN_TEXT),
        WebhookEnvVar(name="B", text="2", type=BindingType.PLAIN_TEXT),
        WebhookEnvVar(name="C", text="3", type=BindingType.SECRET_TEXT),
    ]

    bindings = build_bindings(env_vars)

    assert len(bindings) == 3
    assert [b.name for b in bindings] == ["A", "B", "C"]
    assert [b.type for b in bindings] == ["plain_text", "plain_text", "secret_text"]


def test_build_bindings_keeps_plain_text_as_is() -> None:
    bindings = build_bindings([WebhookEnvVar(name="LOG_LEVEL", text="debug", type=BindingType.PLAIN_TEXT)])
    assert bindings[0].text == "debug"


def test_build_bindings_marks_secret_text_as_secret() -> None:
    bindings = build_bindings([WebhookEnvVar(name="TOKEN", text="t0p")])
    assert isinstance(bindings[0].text, pulumi.Output)


def test_build_bindings_does_not_deduplicate() -> None:
    env_vars = [WebhookEnvVar(name="A", text="1"), WebhookEnvVar(name="A", text="2")]
    assert len(build_bindings(env_vars)) == 2


def test_build_bindings_empty() -> None:
    assert build_bindings([]) == []


def test_ensure_unique_binding_names_rejects_duplicates() -> None:
    env_vars = [
        WebhookEnvVar(name="A", text="1"),
        WebhookEnvVar(name="B", text="2"),
        WebhookEnvVar(name="A", text="3"),
    ]
    with pytest.raises(ValueError) as exc_info:
        ensure_unique_binding_names(env_vars)
    assert "A" in str(exc_info.value)
    assert "B" not in str(exc_info.value)


def test_ensure_unique_binding_names_accepts_unique() -> None:
    ensure_unique_binding_names([WebhookEnvVar(name="A", text="1"), WebhookEnvVar(name="B", text="2")])


def test_github_secret_binding() -> None:
    env_var = github_secret_binding("s3cret")
    assert env_var.name == GITHUB_WEBHOOK_SECRET_BINDING == "GITHUB_WEBHOOK_SECRET"
    assert env_var.type is BindingType.SECRET_TEXT
    assert env_var.text == "s3cret"


def test_parse_extra_bindings_json_and_defaults() -> None:
    env_vars = parse_extra_bindings(
        '[{"name": "GCP_CREDENTIALS_JSON", "text": "{}"}, {"name": "MODE", "text": "ci", "type": "plain_text"}]'
    )
    assert env_vars == [
        WebhookEnvVar(name="GCP_CREDENTIALS_JSON", text="{}", type=BindingType.SECRET_TEXT),
        WebhookEnvVar(name="MODE", text="ci", type=BindingType.PLAIN_TEXT),
    ]


def test_parse_extra_bindings_yaml() -> None:
    env_vars = parse_extra_bindings("- name: MODE\n  text: ci\n  type: plain_text\n")
    assert env_vars == [WebhookEnvVar(name="MODE", text="ci", type=BindingType.PLAIN_TEXT)]


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_parse_extra_bindings_empty(raw: str | None) -> None:
    assert parse_extra_bindings(raw) == []


@pytest.mark.parametrize(
    "raw",
    [
        '{"name": "A", "text": "1"}',
        '[{"text": "1"}]',
        '[{"name": "A"}]',
        '[{"name": "A", "text": null}]',
        '[{"name": "A", "text": {"k": 1}}]',
        '[{"name": "A", "text": ["x"]}]',
        '[{"name": "A", "text": "1", "type": "kv_namespace"}]',
        "[unclosed",
    ],
)
def test_parse_extra_bindings_invalid(raw: str) -> None:
    with pytest.raises(SystemExit):
        parse_extra_bindings(raw)
