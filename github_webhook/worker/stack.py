"""GitHub webhook stack: worker script, route, and DNS record under one component.

Creation order is script -> route -> DNS record. The route declares an explicit
dependency on the script because Cloudflare binds routes to existing script
names. Every child is parented to the component, so destroying the component
removes all three and their names share the component's naming scope.

Any failure aborts the run. Nothing is retried or rolled back here; Pulumi
keeps whatever was already created in state and the next `up` converges.
"""

from collections.abc import Sequence

import pulumi
import pulumi_cloudflare

from github_webhook.config import WebhookConfig
from github_webhook.naming import Namer
from github_webhook.networking.dns import create_dns_record
from github_webhook.networking.route import create_worker_route
from github_webhook.worker.artifact import compose_worker_script, read_handler_script
from github_webhook.worker.bindings import (
    WebhookEnvVar,
    build_bindings,
    ensure_unique_binding_names,
)

COMPONENT_TYPE = "custom:webhook:CloudflareWebhookStack"
MAIN_MODULE = "webhook.js"
MAX_NAME_LENGTH = 63


class WebhookStackError(RuntimeError):
    """A provisioning step failed; resource_kind tells which one."""

    def __init__(self, resource_kind: str, message: str) -> None:
        super().__init__(message)
        self.resource_kind = resource_kind


class CloudflareGithubWebhook(pulumi.ComponentResource):
    """Owner of the worker script, its route, and its DNS record."""

    worker: pulumi_cloudflare.WorkersScript
    route: pulumi_cloudflare.WorkersRoute
    dns_record: pulumi_cloudflare.DnsRecord
    worker_url: pulumi.Output[str]

    def __init__(
        self,
        name: str,
        config: WebhookConfig,
        opts: pulumi.ResourceOptions | None = None,
    ) -> None:
        super().__init__(COMPONENT_TYPE, name, None, opts)
        self.namer = Namer(name)
        self.domain_url = config.worker_domain_url
        self.worker_path = config.worker_path

    def resource_name(self, kind: str) -> str:
        return self.namer.new_resource_name("webhook", kind, MAX_NAME_LENGTH)

    @property
    def worker_script_id(self) -> pulumi.Output[str]:
        return self.worker.id


def create_webhook_stack(
    name: str,
    env_vars: Sequence[WebhookEnvVar],
    config: WebhookConfig,
    opts: pulumi.ResourceOptions | None = None,
) -> CloudflareGithubWebhook:
    """Provision the Cloudflare worker, route, and DNS record for a GitHub webhook.

    Raises:
        SystemExit: The handler script cannot be read (no resource is created).
        WebhookStackError: Registration, binding validation, or a resource
            constructor failed. resource_kind is one of "component",
            "bindings", "worker", "route", "dns".
    """
    try:
        component = CloudflareGithubWebhook(name, config, opts)
    except Exception as e:
        raise WebhookStackError("component", f"failed to register component resource: {e}") from e

    script = compose_worker_script(read_handler_script(config.handler_script_path))
    pulumi.log.info(
        f"Worker script for '{name}': {len(script.content)} chars, sha256 {script.sha256}"
    )

    try:
        ensure_unique_binding_names(env_vars)
    except ValueError as e:
        raise WebhookStackError("bindings", f"invalid worker bindings: {e}") from e
    bindings = build_bindings(env_vars)

    script_name = component.resource_name("worker")
    try:
        component.worker = pulumi_cloudflare.WorkersScript(
            script_name,
            account_id=config.account_id,
            script_name=script_name,
            main_module=MAIN_MODULE,
            content=script.content,
            content_sha256=script.sha256,
            observability=pulumi_cloudflare.WorkersScriptObservabilityArgs(enabled=False),
            bindings=bindings,
            opts=pulumi.ResourceOptions(parent=component),
        )
    except Exception as e:
        raise WebhookStackError("worker", f"failed to create cloudflare worker: {e}") from e

    try:
        component.route = create_worker_route(
            component.resource_name("route"),
            zone_id=config.zone_id,
            domain_url=component.domain_url,
            worker_path=component.worker_path,
            script_name=component.worker.script_name,
            opts=pulumi.ResourceOptions(parent=component, depends_on=[component.worker]),
        )
    except Exception as e:
        raise WebhookStackError("route", f"failed to create cloudflare workers route: {e}") from e

    try:
        component.dns_record = create_dns_record(
            component.resource_name("dns"),
            domain_url=component.domain_url,
            zone_id=component.route.zone_id,
            opts=pulumi.ResourceOptions(parent=component),
        )
    except Exception as e:
        raise WebhookStackError("dns", f"failed to create workers DNS record: {e}") from e

    # Built from the created record's name so the URL reflects what was provisioned
    component.worker_url = pulumi.Output.concat(
        "https://", component.dns_record.name, component.worker_path
    )
    component.register_outputs(
        {
            "worker_url": component.worker_url,
            "worker_script_id": component.worker_script_id,
        }
    )
    return component
