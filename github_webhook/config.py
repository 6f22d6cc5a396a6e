"""Webhook relay configuration loading and validation."""

from collections.abc import Mapping
from dataclasses import dataclass
import os
from pathlib import Path
from typing import Any

import jsonschema

from github_webhook.validator import validate_webhook_config

DEFAULT_WORKER_DOMAIN_URL = "workers.path2prod.dev"
DEFAULT_WORKER_PATH = "/webhook/v1/fetch"
DEFAULT_RESOURCE_PREFIX = "ci-webhook"

# field name -> (environment variable, default); None default means required
ENV_VARS: dict[str, tuple[str, str | None]] = {
    "account_id": ("CLOUDFLARE_ACCOUNT_ID", None),
    "zone_id": ("CLOUDFLARE_ZONE_ID", None),
    "handler_script_path": ("WORKER_HANDLER_SCRIPT_PATH", None),
    "github_webhook_secret": ("GITHUB_WEBHOOK_SECRET", None),
    "worker_domain_url": ("WORKER_DOMAIN_URL", DEFAULT_WORKER_DOMAIN_URL),
    "worker_path": ("WORKER_PATH", DEFAULT_WORKER_PATH),
    "resource_prefix": ("RESOURCE_PREFIX", DEFAULT_RESOURCE_PREFIX),
}


@dataclass(frozen=True)
class WebhookConfig:
    """Settings for one webhook relay deployment."""

    account_id: str
    zone_id: str
    # JS file implementing `async function handle(githubEvent, payload, env)`
    handler_script_path: str
    github_webhook_secret: str
    worker_domain_url: str = DEFAULT_WORKER_DOMAIN_URL
    worker_path: str = DEFAULT_WORKER_PATH
    resource_prefix: str = DEFAULT_RESOURCE_PREFIX
    api_token: str | None = None

    @classmethod
    def from_mapping(cls, values: dict[str, Any]) -> "WebhookConfig":
        """Validate a plain mapping and build the config.

        Raises SystemExit when the mapping fails schema validation or the
        handler script does not exist.
        """
        try:
            validate_webhook_config(values)
        except jsonschema.ValidationError as e:
            raise SystemExit(str(e)) from e

        handler_path = Path(values["handler_script_path"])
        if not handler_path.is_file():
            raise SystemExit(f"worker script path does not exist: {handler_path}")

        return cls(
            account_id=values["account_id"],
            zone_id=values["zone_id"],
            handler_script_path=str(handler_path),
            github_webhook_secret=values["github_webhook_secret"],
            worker_domain_url=values.get("worker_domain_url", DEFAULT_WORKER_DOMAIN_URL),
            worker_path=values.get("worker_path", DEFAULT_WORKER_PATH),
            resource_prefix=values.get("resource_prefix", DEFAULT_RESOURCE_PREFIX),
            api_token=values.get("api_token"),
        )


def _read_env(environ: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    missing: list[str] = []
    for field_name, (env_name, default) in ENV_VARS.items():
        value = (environ.get(env_name) or "").strip()
        if value:
            values[field_name] = value
        elif default is not None:
            values[field_name] = default
        else:
            missing.append(env_name)
    if missing:
        raise SystemExit(
            "failed to load cloudflare config: missing required environment variables: "
            + ", ".join(missing)
        )
    token = (environ.get("CLOUDFLARE_API_TOKEN") or "").strip()
    if token:
        values["api_token"] = token
    return values


def load_webhook_config(environ: Mapping[str, str] | None = None) -> WebhookConfig:
    """Load the webhook config from environment variables (os.environ by default)."""
    return WebhookConfig.from_mapping(_read_env(os.environ if environ is None else environ))
