"""Cloudflare Workers route: URL pattern -> worker script."""

import pulumi
import pulumi_cloudflare


def route_pattern(domain_url: str, worker_path: str) -> str:
    """Pattern matching every request under the webhook path prefix."""
    return f"{domain_url}{worker_path}*"


def create_worker_route(
    resource_name: str,
    zone_id: str,
    domain_url: str,
    worker_path: str,
    script_name: pulumi.Input[str],
    opts: pulumi.ResourceOptions | None = None,
) -> pulumi_cloudflare.WorkersRoute:
    """Bind domain_url + worker_path* in the zone to the named worker script."""
    return pulumi_cloudflare.WorkersRoute(
        resource_name,
        zone_id=zone_id,
        pattern=route_pattern(domain_url, worker_path),
        script=script_name,
        opts=opts,
    )
