"""
Query key registry — hierarchical cache keys and the invalidation table.

Keys are ordered tuples of segments. A key is a parent of every key it is a
prefix of, so invalidating ("vault", "v1") also evicts everything scoped to
vault v1:

  ("vaults",)                               all vaults
  ("vault", id)                             vault scope (prefix only, never fetched)
  ("vault", id, "detail")                   one vault
  ("vault", id, "items")                    items of a vault
  ("vault", id, "item", section)            one item with its fields
  ("vault", id, "instances")                instances with access to a vault
  ("vault", id, "debug-policy", fid)        debug policy for (vault, instance)
  ("instances",)                            all instances
  ("instance", fid)                         one instance

Lists and details live under different roots ("vaults" vs "vault",
"instances" vs "instance"); evicting a list never evicts detail views.

Which keys a mutation makes stale is declared in INVALIDATION_TABLE, never
inferred from response payloads.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum


class _Wildcard:
    """Matches any single segment in an invalidation pattern."""

    _instance: _Wildcard | None = None

    def __new__(cls) -> _Wildcard:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ANY"


ANY = _Wildcard()


@dataclass(frozen=True)
class Param:
    """Placeholder segment filled from mutation parameters by QueryKey.resolve()."""

    name: str

    def __repr__(self) -> str:
        return f"{{{self.name}}}"


Segment = str | _Wildcard | Param


class QueryKey:
    """Immutable hierarchical cache key with explicit prefix comparison."""

    __slots__ = ("parts",)

    def __init__(self, *parts: Segment) -> None:
        if not parts:
            raise ValueError("QueryKey needs at least one segment")
        for part in parts:
            if not isinstance(part, (str, _Wildcard, Param)):
                raise TypeError(f"Invalid key segment: {part!r}")
        object.__setattr__(self, "parts", tuple(parts))

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("QueryKey is immutable")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QueryKey):
            return NotImplemented
        return self.parts == other.parts

    def __hash__(self) -> int:
        return hash(self.parts)

    def __len__(self) -> int:
        return len(self.parts)

    def __repr__(self) -> str:
        return f"QueryKey({', '.join(repr(p) for p in self.parts)})"

    def __str__(self) -> str:
        return "/".join("*" if p is ANY else str(p) for p in self.parts)

    @property
    def concrete(self) -> bool:
        """True when the key has no wildcard or placeholder segments."""
        return all(isinstance(p, str) for p in self.parts)

    def child(self, *parts: Segment) -> QueryKey:
        return QueryKey(*self.parts, *parts)

    def is_prefix_of(self, other: QueryKey) -> bool:
        """True if `other` equals this key or lies below it. ANY matches one segment."""
        if len(self.parts) > len(other.parts):
            return False
        return all(
            mine is ANY or mine == theirs
            for mine, theirs in zip(self.parts, other.parts)
        )

    def resolve(self, params: Mapping[str, str]) -> QueryKey:
        """Substitute Param segments from `params`. Wildcards are kept."""
        resolved: list[Segment] = []
        for part in self.parts:
            if isinstance(part, Param):
                if part.name not in params:
                    raise ValueError(f"Missing key parameter {part.name!r} for {self!r}")
                value = params[part.name]
                if not value:
                    raise ValueError(f"Empty key parameter {part.name!r} for {self!r}")
                resolved.append(value)
            else:
                resolved.append(part)
        return QueryKey(*resolved)


# ─── Keys ────────────────────────────────────────────────────────────────

ALL_VAULTS = QueryKey("vaults")
ALL_INSTANCES = QueryKey("instances")


def vault_scope(vault_id: Segment) -> QueryKey:
    return QueryKey("vault", vault_id)


def vault_detail(vault_id: Segment) -> QueryKey:
    return vault_scope(vault_id).child("detail")


def vault_items(vault_id: Segment) -> QueryKey:
    return vault_scope(vault_id).child("items")


def vault_item_detail(vault_id: Segment, section: Segment) -> QueryKey:
    return vault_scope(vault_id).child("item", section)


def instances_by_vault(vault_id: Segment) -> QueryKey:
    return vault_scope(vault_id).child("instances")


def debug_policy(vault_id: Segment, fid: Segment) -> QueryKey:
    return vault_scope(vault_id).child("debug-policy", fid)


def instance_detail(fid: Segment) -> QueryKey:
    return QueryKey("instance", fid)


# ─── Invalidation table ──────────────────────────────────────────────────


class MutationKind(StrEnum):
    CREATE_VAULT = "create_vault"
    UPDATE_VAULT = "update_vault"
    DELETE_VAULT = "delete_vault"
    DELETE_VAULT_CASCADE = "delete_vault_cascade"
    PUT_ITEM = "put_item"
    DELETE_ITEM = "delete_item"
    DELETE_ITEM_CASCADE = "delete_item_cascade"
    GRANT_ACCESS = "grant_access"
    REVOKE_ACCESS = "revoke_access"
    REGISTER_INSTANCE = "register_instance"
    UPDATE_INSTANCE = "update_instance"
    DELETE_INSTANCE = "delete_instance"
    UPDATE_DEBUG_POLICY = "update_debug_policy"


VAULT = Param("vault")
ITEM = Param("item")
FID = Param("fid")
BOUND_VAULT = Param("bound_vault")

_ITEM_KEYS = (vault_items(VAULT), vault_item_detail(VAULT, ITEM))
_INSTANCE_KEYS = (ALL_INSTANCES, instance_detail(FID), instances_by_vault(ANY))

# Each row must cover every view the mutation can change.
INVALIDATION_TABLE: dict[MutationKind, tuple[QueryKey, ...]] = {
    MutationKind.CREATE_VAULT: (ALL_VAULTS, vault_detail(VAULT)),
    MutationKind.UPDATE_VAULT: (ALL_VAULTS, vault_detail(VAULT)),
    MutationKind.DELETE_VAULT: (ALL_VAULTS, vault_scope(VAULT)),
    # cascade also drops items, access grants and debug policies of the vault
    MutationKind.DELETE_VAULT_CASCADE: (ALL_VAULTS, vault_scope(VAULT), ALL_INSTANCES),
    MutationKind.PUT_ITEM: _ITEM_KEYS,
    MutationKind.DELETE_ITEM: _ITEM_KEYS,
    # cascade deletes the instances bound to the item, which may hold grants on any vault
    MutationKind.DELETE_ITEM_CASCADE: (
        *_ITEM_KEYS,
        ALL_INSTANCES,
        instance_detail(ANY),
        instances_by_vault(ANY),
    ),
    MutationKind.GRANT_ACCESS: (instances_by_vault(VAULT),),
    MutationKind.REVOKE_ACCESS: (instances_by_vault(VAULT),),
    MutationKind.REGISTER_INSTANCE: (
        ALL_INSTANCES,
        instance_detail(FID),
        instances_by_vault(BOUND_VAULT),
    ),
    MutationKind.UPDATE_INSTANCE: _INSTANCE_KEYS,
    MutationKind.DELETE_INSTANCE: _INSTANCE_KEYS,
    MutationKind.UPDATE_DEBUG_POLICY: (debug_policy(VAULT, FID),),
}


def invalidation_for(kind: MutationKind | str, **params: str) -> tuple[QueryKey, ...]:
    """Resolve the invalidation patterns for one mutation against its parameters."""
    templates = INVALIDATION_TABLE[MutationKind(kind)]
    return tuple(template.resolve(params) for template in templates)
