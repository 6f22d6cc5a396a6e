"""
Webhook relay CLI: setup, preview, up, destroy, sign, deliver.
Run `webhook-relay setup` once; then `webhook-relay up` provisions the worker,
route, and DNS record from the environment (see github_webhook/config.py).
"""

import hashlib
import hmac
import json
import os
from pathlib import Path
import subprocess
import sys
from typing import Any

import httpx
import yaml

from github_webhook.config import DEFAULT_RESOURCE_PREFIX

CONFIG_DIR = ".webhook-relay"
CONFIG_FILENAME = "config.yaml"
DEFAULT_STACK_PREFIX = "dev"
SIGNATURE_HEADER = "x-hub-signature-256"
EVENT_HEADER = "x-github-event"


def _project_root() -> Path:
    """Current working directory; commands that need Pulumi.yaml check for it there."""
    return Path.cwd()


def _config_path() -> Path:
    return _project_root() / CONFIG_DIR / CONFIG_FILENAME


def _load_config() -> dict[str, Any] | None:
    path = _config_path()
    if not path.exists():
        return None
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else None


def _save_config(
    backend_url: str,
    stack_prefix: str = DEFAULT_STACK_PREFIX,
    secrets_provider: str | None = None,
) -> None:
    path = _config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    data: dict[str, str] = {"backend_url": backend_url, "stack_prefix": stack_prefix}
    if secrets_provider:
        data["secrets_provider"] = secrets_provider
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False)
    print(f"Configuration saved to {path}")


def _require_config() -> dict[str, Any]:
    config = _load_config()
    if not config or not config.get("backend_url"):
        print("Configuration missing or incomplete. Run: webhook-relay setup", file=sys.stderr)
        sys.exit(1)
    return config


def _run(cmd: list[str], env: dict[str, str] | None = None, check: bool = True) -> subprocess.CompletedProcess:
    full_env = os.environ.copy()
    if env:
        full_env.update(env)
    return subprocess.run(
        cmd,
        cwd=_project_root(),
        env=full_env,
        check=check,
    )


def _stack_name(config: dict[str, Any]) -> str:
    prefix = config.get("stack_prefix", DEFAULT_STACK_PREFIX)
    resource_prefix = os.environ.get("RESOURCE_PREFIX", "").strip() or DEFAULT_RESOURCE_PREFIX
    return f"{prefix}.{resource_prefix}"


def _select_stack(config: dict[str, Any], create: bool) -> dict[str, str]:
    """Select the stack (initialising it when create is set); return the pulumi env."""
    if not (_project_root() / "Pulumi.yaml").exists():
        print("Pulumi.yaml not found. Run this from the webhook relay repo root.", file=sys.stderr)
        sys.exit(1)
    stack = _stack_name(config)
    env = {"PULUMI_BACKEND_URL": config["backend_url"]}
    select = _run(["pulumi", "stack", "select", stack], env=env, check=False)
    if select.returncode == 0:
        return env
    if not create:
        print(f"No infrastructure found for stack {stack}.", file=sys.stderr)
        sys.exit(1)
    init = ["pulumi", "stack", "init", stack]
    if config.get("secrets_provider"):
        init += ["--secrets-provider", config["secrets_provider"]]
    _run(init, env=env)
    return env


# --- signing ---


def canonical_payload(payload: Any) -> bytes:
    """Serialise a payload the way the worker re-serialises it before verifying.

    Mirrors JSON.stringify: compact separators, key order kept, no ASCII escaping.
    """
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def compute_signature(body: bytes, secret: str) -> str:
    """Return the ``X-Hub-Signature-256`` header value for ``body``."""
    if not secret:
        raise ValueError("GitHub webhook secret is empty")
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


def _load_payload(path: str) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        print(f"File not found: {path}", file=sys.stderr)
        sys.exit(1)
    except json.JSONDecodeError as e:
        print(f"Payload is not valid JSON: {e}", file=sys.stderr)
        sys.exit(1)


def _require_secret() -> str:
    secret = os.environ.get("GITHUB_WEBHOOK_SECRET", "")
    if not secret:
        print("GITHUB_WEBHOOK_SECRET environment variable required", file=sys.stderr)
        sys.exit(1)
    return secret


# --- commands ---


def _cmd_setup() -> None:
    print("First-time setup. You will need:")
    print("  1) A Pulumi state backend URL (e.g. file://~/.pulumi or s3://bucket)")
    print("  2) Optionally a secrets provider (e.g. passphrase, awskms://...)")
    print()

    backend_url = os.environ.get("WEBHOOK_RELAY_BACKEND_URL", "").strip()
    if not backend_url:
        backend_url = input("Pulumi backend URL: ").strip()
    if not backend_url:
        print("Backend URL is required.", file=sys.stderr)
        sys.exit(1)

    stack_prefix = os.environ.get("WEBHOOK_RELAY_STACK_PREFIX", DEFAULT_STACK_PREFIX).strip() or DEFAULT_STACK_PREFIX
    secrets_provider = os.environ.get("WEBHOOK_RELAY_SECRETS_PROVIDER", "").strip() or None
    _save_config(backend_url, stack_prefix, secrets_provider)
    print("Setup complete. You can now use: webhook-relay preview, webhook-relay up, webhook-relay destroy")


def _cmd_preview() -> None:
    config = _require_config()
    env = _select_stack(config, create=True)
    _run(["pulumi", "preview"], env=env)


def _cmd_up() -> None:
    config = _require_config()
    env = _select_stack(config, create=True)
    print(f"Provisioning webhook relay stack '{_stack_name(config)}'...")
    _run(["pulumi", "up", "-y"], env=env)
    _run(["pulumi", "stack", "output", "worker_url"], env=env)


def _cmd_destroy() -> None:
    config = _require_config()
    env = _select_stack(config, create=False)
    stack = _stack_name(config)
    confirm = input(f"This will remove the worker, route, and DNS record of stack '{stack}'. Continue? [y/N]: ")
    if confirm.strip().lower() != "y":
        print("Cancelled.")
        sys.exit(0)
    _run(["pulumi", "destroy", "-y"], env=env)
    print(f"Stack '{stack}' destroyed.")


def _cmd_sign(payload_path: str) -> None:
    body = canonical_payload(_load_payload(payload_path))
    print(compute_signature(body, _require_secret()))


def _cmd_deliver(url: str, payload_path: str, event: str) -> None:
    body = canonical_payload(_load_payload(payload_path))
    headers = {
        "content-type": "application/json",
        EVENT_HEADER: event,
        SIGNATURE_HEADER: compute_signature(body, _require_secret()),
    }
    try:
        resp = httpx.post(url, content=body, headers=headers, timeout=10)
    except httpx.HTTPError as e:
        print(f"Delivery failed: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"{resp.status_code} {resp.text}")
    if not resp.is_success:
        sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    import argparse

    parser = argparse.ArgumentParser(
        description="Manage the GitHub webhook relay on Cloudflare Workers. Run 'webhook-relay setup' first."
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("setup", help="One-time setup: state backend and stack prefix")
    sub.add_parser("preview", help="Show what `up` would change")
    sub.add_parser("up", help="Provision the worker, route, and DNS record")
    sub.add_parser("destroy", help="Remove the worker, route, and DNS record")
    sign_p = sub.add_parser("sign", help="Print the signature header for a JSON payload")
    sign_p.add_argument("payload", help="Path to a JSON payload")
    deliver_p = sub.add_parser("deliver", help="POST a signed test delivery to the worker")
    deliver_p.add_argument("url", help="Worker URL (stack output worker_url)")
    deliver_p.add_argument("payload", help="Path to a JSON payload")
    deliver_p.add_argument("--event", default="ping", help="GitHub event name (default: ping)")
    args = parser.parse_args(argv)

    if args.command == "setup":
        _cmd_setup()
    elif args.command == "preview":
        _cmd_preview()
    elif args.command == "up":
        _cmd_up()
    elif args.command == "destroy":
        _cmd_destroy()
    elif args.command == "sign":
        _cmd_sign(args.payload)
    elif args.command == "deliver":
        _cmd_deliver(args.url, args.payload, args.event)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
