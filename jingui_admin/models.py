"""Pydantic request/response models for the Jingui admin API."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class PolicySource(StrEnum):
    EXPLICIT = "explicit"
    DEFAULT = "default"


# ─── Vaults ──────────────────────────────────────────────────────────────


class Vault(BaseModel):
    id: str
    name: str
    created_at: datetime | None = None


class CreateVaultRequest(BaseModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)


class UpdateVaultRequest(BaseModel):
    name: str = Field(min_length=1)


# ─── Vault items ─────────────────────────────────────────────────────────


class VaultItem(BaseModel):
    """An item row as returned by the list endpoint (no field values)."""

    vault_id: str = Field(default="", validation_alias=AliasChoices("vault_id", "vault"))
    section: str = Field(validation_alias=AliasChoices("section", "item"))
    created_at: datetime | None = None
    updated_at: datetime | None = None


class VaultItemDetail(VaultItem):
    """A single item with its field map.

    Values may be empty strings when the viewer is not allowed to read them;
    the keys are still listed.
    """

    fields: dict[str, str] = {}


class PutItemRequest(BaseModel):
    fields: dict[str, str] = {}
    delete: list[str] = []


# ─── Instances ───────────────────────────────────────────────────────────


class Instance(BaseModel):
    fid: str
    public_key: str
    bound_vault: str = ""
    bound_attestation_app_id: str = ""
    bound_item: str = ""
    label: str = ""
    created_at: datetime | None = None
    last_used_at: datetime | None = None


class InstanceRequest(BaseModel):
    public_key: str = Field(min_length=1)
    bound_vault: str = Field(min_length=1)
    bound_attestation_app_id: str = Field(min_length=1)
    bound_item: str = Field(min_length=1)
    label: str = ""


class InstanceUpdateRequest(BaseModel):
    bound_attestation_app_id: str = Field(min_length=1)
    label: str = ""


# ─── Debug policy ────────────────────────────────────────────────────────


class DebugPolicy(BaseModel):
    """Per (vault, instance) switch for plaintext reads.

    The server reports a missing record as allow_read=True with source="default".
    """

    vault_id: str = Field(validation_alias=AliasChoices("vault_id", "vault"))
    fid: str = Field(validation_alias=AliasChoices("fid", "item"))
    allow_read: bool = Field(validation_alias=AliasChoices("allow_read", "allow_read_debug"))
    source: PolicySource = PolicySource.EXPLICIT
    updated_at: datetime | None = None


class DebugPolicyRequest(BaseModel):
    """PUT body. The server binds only allow_read_debug; a missing key means false."""

    allow_read_debug: bool


# ─── Generic ─────────────────────────────────────────────────────────────


class StatusResponse(BaseModel):
    """Acknowledgement body of write endpoints, e.g. {"status": "created", "id": "v1"}."""

    model_config = ConfigDict(extra="allow")

    status: str = ""
    id: str | None = None
    fid: str | None = None
    vault: str | None = None
    section: str | None = None
    allow_read: bool | None = Field(
        default=None, validation_alias=AliasChoices("allow_read", "allow_read_debug")
    )
