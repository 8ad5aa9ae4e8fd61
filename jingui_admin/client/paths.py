"""
Request path construction for the admin API.

Every caller-supplied identifier (vault id, item section, instance fid) is
percent-encoded as a single path segment, so a '/' or '?' inside a name can
never change which route the server dispatches to.
"""

from __future__ import annotations

from urllib.parse import quote, unquote

API_PREFIX = "/v1"

VAULTS = f"{API_PREFIX}/vaults"
INSTANCES = f"{API_PREFIX}/instances"
DEBUG_POLICY = f"{API_PREFIX}/debug-policy"


def encode_segment(value: str) -> str:
    """Percent-encode one path segment, including '/' and dot-only names."""
    if not value:
        raise ValueError("Path identifier must not be empty")
    encoded = quote(value, safe="")
    # "." and ".." would be collapsed by URL normalization
    if encoded in (".", ".."):
        encoded = encoded.replace(".", "%2E")
    return encoded


def split_path(path: str) -> list[str]:
    """Split an encoded path back into decoded segments."""
    return [unquote(part) for part in path.strip("/").split("/")]


def vault_path(vault_id: str) -> str:
    return f"{VAULTS}/{encode_segment(vault_id)}"


def items_path(vault_id: str) -> str:
    return f"{vault_path(vault_id)}/items"


def item_path(vault_id: str, section: str) -> str:
    return f"{items_path(vault_id)}/{encode_segment(section)}"


def vault_instances_path(vault_id: str) -> str:
    return f"{vault_path(vault_id)}/instances"


def vault_instance_path(vault_id: str, fid: str) -> str:
    return f"{vault_instances_path(vault_id)}/{encode_segment(fid)}"


def instance_path(fid: str) -> str:
    return f"{INSTANCES}/{encode_segment(fid)}"


def debug_policy_path(vault_id: str, fid: str) -> str:
    return f"{DEBUG_POLICY}/{encode_segment(vault_id)}/{encode_segment(fid)}"
