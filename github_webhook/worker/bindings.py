"""Worker environment bindings (plain text and secret text)."""

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

import pulumi
import pulumi_cloudflare
import yaml

GITHUB_WEBHOOK_SECRET_BINDING = "GITHUB_WEBHOOK_SECRET"


class BindingType(str, Enum):
    """Cloudflare binding type tags supported for worker env vars."""

    PLAIN_TEXT = "plain_text"
    SECRET_TEXT = "secret_text"


@dataclass(frozen=True)
class WebhookEnvVar:
    """One env var exposed to the worker as `env.<name>`."""

    name: str
    text: pulumi.Input[str]
    type: BindingType = BindingType.SECRET_TEXT


def github_secret_binding(secret: pulumi.Input[str]) -> WebhookEnvVar:
    """Binding for the secret the base script verifies signatures with."""
    return WebhookEnvVar(name=GITHUB_WEBHOOK_SECRET_BINDING, text=secret)


def ensure_unique_binding_names(env_vars: Sequence[WebhookEnvVar]) -> None:
    """Raise ValueError if two env vars share a name."""
    duplicates = sorted(n for n, count in Counter(v.name for v in env_vars).items() if count > 1)
    if duplicates:
        raise ValueError(f"duplicate worker binding names: {', '.join(duplicates)}")


def build_bindings(
    env_vars: Sequence[WebhookEnvVar],
) -> list[pulumi_cloudflare.WorkersScriptBindingArgs]:
    """Map env vars to worker binding args, one-to-one and in order.

    No deduplication happens here; see ensure_unique_binding_names.
    Secret text values are marked secret so they are encrypted in state.
    """
    bindings: list[pulumi_cloudflare.WorkersScriptBindingArgs] = []
    for env_var in env_vars:
        text = env_var.text
        if env_var.type == BindingType.SECRET_TEXT:
            text = pulumi.Output.secret(text)
        bindings.append(
            pulumi_cloudflare.WorkersScriptBindingArgs(
                name=env_var.name,
                type=env_var.type.value,
                text=text,
            )
        )
    return bindings


def parse_extra_bindings(raw: str | None) -> list[WebhookEnvVar]:
    """Parse a YAML/JSON list of {name, text, type} mappings into env vars.

    type defaults to secret_text. Malformed input is a fatal config error.
    """
    if not raw or not raw.strip():
        return []
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise SystemExit(f"WORKER_EXTRA_BINDINGS is not valid YAML/JSON: {e}") from e
    if not isinstance(data, list):
        raise SystemExit("WORKER_EXTRA_BINDINGS must be a list of {name, text, type} mappings")

    env_vars: list[WebhookEnvVar] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict) or not item.get("name") or "text" not in item:
            raise SystemExit(f"WORKER_EXTRA_BINDINGS[{i}]: 'name' and 'text' are required")
        if item["text"] is None or isinstance(item["text"], (dict, list)):
            raise SystemExit(f"WORKER_EXTRA_BINDINGS[{i}]: 'text' must be a string, number, or boolean")
        try:
            binding_type = BindingType(item.get("type", BindingType.SECRET_TEXT.value))
        except ValueError as e:
            allowed = ", ".join(t.value for t in BindingType)
            raise SystemExit(f"WORKER_EXTRA_BINDINGS[{i}]: type must be one of {allowed}") from e
        env_vars.append(WebhookEnvVar(name=str(item["name"]), text=str(item["text"]), type=binding_type))
    return env_vars
