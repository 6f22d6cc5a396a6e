"""Pulumi mocks so components and outputs resolve without an engine."""

from pathlib import Path

import pulumi
import pytest

from github_webhook.config import WebhookConfig

TEST_ACCOUNT_ID = "test-cloudflare-account-id-123"
TEST_ZONE_ID = "test-zone-id-123"
TEST_WORKER_DOMAIN_URL = "workers.example.com"
TEST_WORKER_PATH = "/webhook/v1/fetch"

HANDLER_SCRIPT = """
async function handle(githubEvent, payload, env) {
    console.log("Test handler called");
    return { success: true };
}
"""


class WebhookMocks(pulumi.runtime.Mocks):
    """Echo inputs back as outputs; zone-scoped resources report the test zone."""

    def new_resource(self, args: pulumi.runtime.MockResourceArgs) -> tuple[str | None, dict]:
        outputs = dict(args.inputs)
        if args.typ in (
            "cloudflare:index/workersRoute:WorkersRoute",
            "cloudflare:index/dnsRecord:DnsRecord",
        ):
            outputs["zoneId"] = TEST_ZONE_ID
        return f"{args.name}_id", outputs

    def call(self, args: pulumi.runtime.MockCallArgs) -> dict:
        return {}


pulumi.runtime.set_mocks(WebhookMocks(), project="project", stack="stack", preview=False)


@pytest.fixture
def handler_path(tmp_path: Path) -> Path:
    """A handler fragment on disk."""
    path = tmp_path / "handler.js"
    path.write_text(HANDLER_SCRIPT, encoding="utf-8")
    return path


@pytest.fixture
def webhook_config(handler_path: Path) -> WebhookConfig:
    return WebhookConfig(
        account_id=TEST_ACCOUNT_ID,
        zone_id=TEST_ZONE_ID,
        handler_script_path=str(handler_path),
        github_webhook_secret="test-webhook-secret-123",
        worker_domain_url=TEST_WORKER_DOMAIN_URL,
        worker_path=TEST_WORKER_PATH,
    )
