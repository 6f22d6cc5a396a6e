"""Deterministic, length-bounded resource names scoped to one logical stack name."""

import hashlib
import re

_HASH_LEN = 8
_BASE_HASH_LEN = 6
MIN_NAME_LENGTH = _HASH_LEN + 2


def _sanitize(name: str) -> str:
    """Lowercase and collapse anything outside [a-z0-9-] into single dashes."""
    return re.sub(r"[^a-z0-9-]+", "-", name.lower()).strip("-")


class Namer:
    """Derive resource names from a base name.

    The same (base, resource, kind, max_length) always yields the same name,
    so redeploys never rename resources. Names longer than max_length are cut
    and suffixed with a short hash of the full name, which keeps different
    kinds distinct even when their truncated prefixes are equal.
    """

    def __init__(self, base: str) -> None:
        scope = _sanitize(base)
        if not scope:
            raise ValueError(f"invalid base name: {base!r}")
        # bases that only match after sanitizing must not share child names
        if scope != base:
            base_digest = hashlib.sha256(base.encode("utf-8")).hexdigest()[:_BASE_HASH_LEN]
            scope = f"{scope}-{base_digest}"
        self.base = base
        self.scope = scope

    def new_resource_name(self, resource: str, kind: str, max_length: int) -> str:
        if max_length < MIN_NAME_LENGTH:
            raise ValueError(f"max_length must be at least {MIN_NAME_LENGTH}, got {max_length}")
        full = _sanitize("-".join(p for p in (self.scope, resource, kind) if p))
        if len(full) <= max_length:
            return full
        digest = hashlib.sha256(full.encode("utf-8")).hexdigest()[:_HASH_LEN]
        head = full[: max_length - _HASH_LEN - 1].rstrip("-")
        return f"{head}-{digest}"
