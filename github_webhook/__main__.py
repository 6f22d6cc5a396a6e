"""
Webhook relay program: provisions a Cloudflare Worker that authenticates GitHub
webhook deliveries and hands them to a user-supplied handler, plus the route and
proxied DNS record that expose it at https://<WORKER_DOMAIN_URL><WORKER_PATH>.
"""
import os

import pulumi
import pulumi_cloudflare

from github_webhook.config import load_webhook_config
from github_webhook.worker.bindings import github_secret_binding, parse_extra_bindings
from github_webhook.worker.stack import create_webhook_stack

config = load_webhook_config()

env_vars = [github_secret_binding(config.github_webhook_secret)]
env_vars.extend(parse_extra_bindings(os.environ.get("WORKER_EXTRA_BINDINGS")))
for env_var in env_vars[1:]:
    pulumi.log.info(f"Binding '{env_var.name}' ({env_var.type.value}) will be passed to the worker")

# Without an explicit token the provider falls back to its own environment lookup
opts = None
if config.api_token:
    cf_provider = pulumi_cloudflare.Provider(
        "cf",
        api_token=config.api_token,
        opts=pulumi.ResourceOptions(additional_secret_outputs=["api_token"]),
    )
    opts = pulumi.ResourceOptions(providers=[cf_provider])

webhook = create_webhook_stack(config.resource_prefix, env_vars, config, opts)

# Outputs
pulumi.export("worker_url", webhook.worker_url)
pulumi.export("worker_script_id", webhook.worker_script_id)
