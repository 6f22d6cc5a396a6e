"""Cloudflare DNS record (proxied CNAME worker domain -> parent domain)."""

import pulumi
import pulumi_cloudflare

# Cloudflare's "automatic" TTL; only meaningful for proxied records
AUTOMATIC_TTL = 1


def root_domain(domain_url: str) -> str:
    """Strip the first label: workers.example.com -> example.com."""
    labels = domain_url.split(".")
    if len(labels) < 2 or not all(labels):
        raise ValueError(f"domain needs at least two labels: {domain_url!r}")
    return ".".join(labels[1:])


def create_dns_record(
    resource_name: str,
    domain_url: str,
    zone_id: pulumi.Input[str],
    opts: pulumi.ResourceOptions | None = None,
) -> pulumi_cloudflare.DnsRecord:
    """Create Cloudflare CNAME record: domain_url -> its parent domain (proxied).

    Proxying routes traffic through the edge so the worker route can intercept it.
    """
    return pulumi_cloudflare.DnsRecord(
        resource_name,
        zone_id=zone_id,
        name=domain_url,
        content=root_domain(domain_url),
        type="CNAME",
        ttl=AUTOMATIC_TTL,
        proxied=True,
        opts=opts,
    )
