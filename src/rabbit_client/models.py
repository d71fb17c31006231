"""
Rabbit API models.

Typed records decoded from (and, for User, encoded into) Rabbit API
payloads. Unknown fields in responses are ignored so that newer servers do
not break older clients.
"""

from __future__ import annotations
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RabbitModel(BaseModel):
    """Common configuration for all API records."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# =============================================================================
# Enums
# =============================================================================

class ImpersonationState(str, Enum):
    """Filter for listing impersonation tokens."""

    ALL = "all"
    ACTIVE = "active"
    INACTIVE = "inactive"


class Scope(str, Enum):
    """Scopes that can be granted to an impersonation token."""

    API = "api"
    READ_USER = "read_user"
    READ_API = "read_api"
    READ_REPOSITORY = "read_repository"
    WRITE_REPOSITORY = "write_repository"
    READ_REGISTRY = "read_registry"
    SUDO = "sudo"


# =============================================================================
# Records
# =============================================================================

class CustomAttribute(RabbitModel):
    """A key/value pair attached to a user by an administrator."""

    key: str
    value: str


class Identity(RabbitModel):
    """An external identity (LDAP, SAML, ...) linked to a user."""

    provider: Optional[str] = None
    extern_uid: Optional[str] = None


class User(RabbitModel):
    """
    A user account.

    Most fields are optional because the server omits admin-only fields for
    regular callers, and because the same model is used to describe a user
    to create or update.
    """

    id: Optional[int] = None
    username: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    state: Optional[str] = None
    avatar_url: Optional[str] = None
    web_url: Optional[str] = None
    created_at: Optional[datetime] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    public_email: Optional[str] = None
    skype: Optional[str] = None
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    website_url: Optional[str] = None
    organization: Optional[str] = None
    last_sign_in_at: Optional[datetime] = None
    current_sign_in_at: Optional[datetime] = None
    confirmed_at: Optional[datetime] = None
    last_activity_on: Optional[date] = None
    theme_id: Optional[int] = None
    color_scheme_id: Optional[int] = None
    projects_limit: Optional[int] = None
    identities: List[Identity] = Field(default_factory=list)
    can_create_group: Optional[bool] = None
    can_create_project: Optional[bool] = None
    two_factor_enabled: Optional[bool] = None
    external: Optional[bool] = None
    private_profile: Optional[bool] = None
    is_admin: Optional[bool] = None
    extern_uid: Optional[str] = None
    provider: Optional[str] = None
    skip_confirmation: Optional[bool] = None
    shared_runners_minutes_limit: Optional[int] = None
    custom_attributes: List[CustomAttribute] = Field(default_factory=list)

    def __str__(self) -> str:
        return f"<User {self.id}: {self.username}>"


class SshKey(RabbitModel):
    """A public SSH key registered for a user."""

    id: Optional[int] = None
    title: Optional[str] = None
    key: Optional[str] = None
    created_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    # Filled in by the client when keys are fetched for a specific user
    user_id: Optional[int] = None


class ImpersonationToken(RabbitModel):
    """A token that lets an administrator act as a user."""

    id: Optional[int] = None
    name: Optional[str] = None
    active: Optional[bool] = None
    token: Optional[str] = None
    scopes: List[Scope] = Field(default_factory=list)
    revoked: Optional[bool] = None
    created_at: Optional[datetime] = None
    expires_at: Optional[date] = None
    impersonation: Optional[bool] = None
    user_id: Optional[int] = None


class Email(RabbitModel):
    """A secondary email address of a user."""

    id: Optional[int] = None
    email: Optional[str] = None
    confirmed_at: Optional[datetime] = None


class Version(RabbitModel):
    """Server version information."""

    version: Optional[str] = None
    revision: Optional[str] = None


__all__ = [
    "RabbitModel",
    "ImpersonationState",
    "Scope",
    "CustomAttribute",
    "Identity",
    "User",
    "SshKey",
    "ImpersonationToken",
    "Email",
    "Version",
]
