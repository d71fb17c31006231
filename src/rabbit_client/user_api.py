"""
Users API.

Wraps the ``users`` and ``user`` endpoints: listing and searching users,
account lifecycle, SSH keys, impersonation tokens, custom attributes and
emails.
"""

from __future__ import annotations
import logging
import os
import warnings
from datetime import date, datetime
from http import HTTPStatus
from typing import Iterator, List, Optional, Sequence, Union

from .client.executor import RequestExecutor
from .client.pager import Pager
from .models import (
    CustomAttribute,
    Email,
    ImpersonationState,
    ImpersonationToken,
    Scope,
    SshKey,
    User,
)
from .runtime.errors import InvalidArgumentError
from .runtime.form import ApiForm
from .runtime.result import Result
from .runtime.url import url_encode
from .runtime.validation import is_valid_email, require

logger = logging.getLogger(__name__)

UserRef = Union[int, str, User]


class UserApi:
    """
    Access to the users API.

    Example:
        ```python
        api = RabbitApi("https://rabbit.example.com", "my-token")
        for user in api.users.get_active_users_pager(50):
            print(user.username)
        ```
    """

    def __init__(self, executor: RequestExecutor, host_url: str = ""):
        """
        Initialize the users API.

        Args:
            executor: Shared request executor
            host_url: Server URL, used for diagnostics only
        """
        self._executor = executor
        self._host_url = host_url
        self._custom_attributes_enabled = False

    # =========================================================================
    # Custom attribute inclusion
    # =========================================================================

    def enable_custom_attributes(self) -> None:
        """Include custom attributes in user responses."""
        self._custom_attributes_enabled = True

    def disable_custom_attributes(self) -> None:
        """Stop including custom attributes in user responses."""
        self._custom_attributes_enabled = False

    @property
    def custom_attributes_enabled(self) -> bool:
        return self._custom_attributes_enabled

    def _form(self) -> ApiForm:
        form = ApiForm()
        if self._custom_attributes_enabled:
            form.with_param("with_custom_attributes", True)
        return form

    def _per_page(self, items_per_page: Optional[int]) -> int:
        return self._executor.default_per_page if items_per_page is None else items_per_page

    def _list_page(self, form: ApiForm, page: int, per_page: int) -> List[User]:
        params = self._executor.page_params(page, per_page)
        for name, value in params.as_params():
            form.with_param(name, value)
        response = self._executor.get(HTTPStatus.OK, form, "users")
        return self._executor.read_entities(response, User)

    # =========================================================================
    # Listing
    # =========================================================================

    def get_users(self) -> List[User]:
        """
        Get all users.

        WARNING: on a large instance this walks every page of the users
        collection and may take a very long time; prefer get_users_pager().

        Returns:
            All users, in server order
        """
        if self._host_url.startswith("https://gitlab.com"):
            logger.warning("Fetching all users from %s may take many minutes to complete, "
                           "use get_users_pager() instead.", self._host_url)
        return self.get_users_pager().all()

    def get_users_page(self, page: int, per_page: int) -> List[User]:
        """Get a single page of users."""
        return self._list_page(self._form(), page, per_page)

    def get_users_pager(self, items_per_page: Optional[int] = None) -> Pager[User]:
        """Get a Pager over all users."""
        return Pager(self._executor, User, self._per_page(items_per_page), self._form(), "users")

    def users_stream(self) -> Iterator[User]:
        """Lazily iterate over all users."""
        return self.get_users_pager().stream()

    def get_active_users(self) -> List[User]:
        """Get all active users."""
        return self.get_active_users_pager().all()

    def get_active_users_page(self, page: int, per_page: int) -> List[User]:
        """Get a single page of active users."""
        return self._list_page(self._form().with_param("active", True), page, per_page)

    def get_active_users_pager(self, items_per_page: Optional[int] = None) -> Pager[User]:
        """Get a Pager over active users."""
        form = self._form().with_param("active", True)
        return Pager(self._executor, User, self._per_page(items_per_page), form, "users")

    def active_users_stream(self) -> Iterator[User]:
        """Lazily iterate over active users."""
        return self.get_active_users_pager().stream()

    def get_blocked_users(self) -> List[User]:
        """Get all blocked users."""
        return self.get_blocked_users_pager().all()

    def get_blocked_users_page(self, page: int, per_page: int) -> List[User]:
        """Get a single page of blocked users."""
        return self._list_page(self._form().with_param("blocked", True), page, per_page)

    def get_blocked_users_pager(self, items_per_page: Optional[int] = None) -> Pager[User]:
        """Get a Pager over blocked users."""
        form = self._form().with_param("blocked", True)
        return Pager(self._executor, User, self._per_page(items_per_page), form, "users")

    def blocked_users_stream(self) -> Iterator[User]:
        """Lazily iterate over blocked users."""
        return self.get_blocked_users_pager().stream()

    def find_users(self, email_or_username: str) -> List[User]:
        """
        Search users by email or username.

        Args:
            email_or_username: The email or username to search for

        Returns:
            The matching users
        """
        return self.find_users_pager(email_or_username).all()

    def find_users_page(self, email_or_username: str, page: int, per_page: int) -> List[User]:
        """Get a single page of users matching a search."""
        form = self._form().with_param("search", email_or_username, required=True)
        return self._list_page(form, page, per_page)

    def find_users_pager(self, email_or_username: str, items_per_page: Optional[int] = None) -> Pager[User]:
        """Get a Pager over users matching a search."""
        form = self._form().with_param("search", email_or_username, required=True)
        return Pager(self._executor, User, self._per_page(items_per_page), form, "users")

    def find_users_stream(self, email_or_username: str) -> Iterator[User]:
        """Lazily iterate over users matching a search."""
        return self.find_users_pager(email_or_username).stream()

    # =========================================================================
    # Single user lookups
    # =========================================================================

    def get_user(self, user_id: int) -> Optional[User]:
        """
        Get a single user by ID.

        Args:
            user_id: The ID of the user

        Returns:
            The user

        Raises:
            RabbitApiError: If the user does not exist or the request fails
        """
        user_id = self._executor.resolve_user(user_id)
        form = ApiForm().with_param("with_custom_attributes", self._custom_attributes_enabled)
        response = self._executor.get(HTTPStatus.OK, form, "users", user_id)
        return self._executor.read_entity(response, User)

    def get_optional_user(self, user_id: int) -> Result[User]:
        """Get a single user by ID as a Result instead of raising."""
        return Result.capture(self.get_user, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        """
        Look up a user by exact username.

        Returns:
            The user, or None when no user has that username
        """
        form = (self._form()
                .with_param("username", username, required=True)
                .with_param("page", 1)
                .with_param("per_page", 1))
        response = self._executor.get(HTTPStatus.OK, form, "users")
        users = self._executor.read_entities(response, User)
        return users[0] if users else None

    def get_optional_user_by_username(self, username: str) -> Result[User]:
        """Look up a user by username as a Result instead of raising."""
        return Result.capture(self.get_user_by_username, username)

    def get_user_by_email(self, email: str) -> Optional[User]:
        """
        Look up a user by public email address.

        Raises:
            InvalidArgumentError: If email is not a valid email address
        """
        if not is_valid_email(email):
            raise InvalidArgumentError("email is not valid")

        users = self.find_users_page(email, 1, 1)
        return users[0] if users else None

    def get_optional_user_by_email(self, email: str) -> Result[User]:
        """Look up a user by email as a Result instead of raising."""
        return Result.capture(self.get_user_by_email, email)

    def get_user_by_external_uid(self, provider: str, external_uid: str) -> Optional[User]:
        """
        Look up a user by the identifier of an external identity provider.

        Args:
            provider: Name of the external provider (e.g. ``ldapmain``)
            external_uid: Identifier of the user at that provider

        Returns:
            The user, or None when there is no match
        """
        form = (self._form()
                .with_param("provider", provider, required=True)
                .with_param("extern_uid", external_uid, required=True)
                .with_param("page", 1)
                .with_param("per_page", 1))
        response = self._executor.get(HTTPStatus.OK, form, "users")
        users = self._executor.read_entities(response, User)
        return users[0] if users else None

    def get_optional_user_by_external_uid(self, provider: str, external_uid: str) -> Result[User]:
        """Look up a user by external identity as a Result instead of raising."""
        return Result.capture(self.get_user_by_external_uid, provider, external_uid)

    def get_current_user(self) -> Optional[User]:
        """Get the user the auth token belongs to."""
        response = self._executor.get(HTTPStatus.OK, None, "user")
        return self._executor.read_entity(response, User)

    # =========================================================================
    # Account lifecycle
    # =========================================================================

    def block_user(self, user_id: int) -> None:
        """Block a user. Available only for admins."""
        if user_id is None:
            raise InvalidArgumentError("user_id cannot be None")
        self._executor.post(HTTPStatus.CREATED, None, "users", self._executor.resolve_user(user_id), "block")

    def unblock_user(self, user_id: int) -> None:
        """Unblock a user. Available only for admins."""
        if user_id is None:
            raise InvalidArgumentError("user_id cannot be None")
        self._executor.post(HTTPStatus.CREATED, None, "users", self._executor.resolve_user(user_id), "unblock")

    def create_user(self, user: User, password: Optional[str] = None, projects_limit: Optional[int] = None,
                    reset_password: Optional[bool] = None) -> Optional[User]:
        """
        Create a new user. Available only for admins.

        Either a password must be given or reset_password must be True.
        email, username and name are required on the user.

        Args:
            user: The user to create
            password: Initial password
            projects_limit: Maximum number of projects, overrides user.projects_limit
            reset_password: Send the user a password reset link instead

        Returns:
            The created user
        """
        form = self.user_to_form(user, projects_limit, password, reset_password, create=True)
        response = self._executor.post(HTTPStatus.CREATED, form, "users")
        return self._executor.read_entity(response, User)

    def update_user(self, user: User, password: Optional[str] = None) -> Optional[User]:
        """
        Modify an existing user. Only fields that are set are sent.

        Args:
            user: The user with the new values; its id is required
            password: New password, if changing it

        Returns:
            The modified user
        """
        form = self.user_to_form(user, None, password, None, create=False)
        response = self._executor.put(HTTPStatus.OK, form, "users", self._require_user_id(user))
        return self._executor.read_entity(response, User)

    def modify_user(self, user: User, password: Optional[str] = None,
                    projects_limit: Optional[int] = None) -> Optional[User]:
        """Deprecated, use update_user()."""
        warnings.warn("modify_user() is deprecated, use update_user()", DeprecationWarning, stacklevel=2)
        form = self.user_to_form(user, projects_limit, password, None, create=False)
        response = self._executor.put(HTTPStatus.OK, form, "users", self._require_user_id(user))
        return self._executor.read_entity(response, User)

    def delete_user(self, user: UserRef, hard_delete: Optional[bool] = None) -> None:
        """
        Delete a user. Available only for admins.

        Args:
            user: ID, username or User to delete
            hard_delete: Also delete contributions that would otherwise be
                moved to the ghost user
        """
        form = ApiForm().with_param("hard_delete", hard_delete)
        self._executor.delete(HTTPStatus.NO_CONTENT, form, "users", self._executor.resolve_user(user))

    def set_user_avatar(self, user: UserRef, avatar_path: Union[str, os.PathLike]) -> Optional[User]:
        """Upload an avatar image for a user."""
        response = self._executor.put_upload(HTTPStatus.OK, "avatar", avatar_path,
                                             "users", self._executor.resolve_user(user))
        return self._executor.read_entity(response, User)

    @staticmethod
    def _require_user_id(user: User) -> int:
        if user is None or user.id is None:
            raise InvalidArgumentError("user.id cannot be None")
        return user.id

    @staticmethod
    def user_to_form(user: User, projects_limit: Optional[int], password: Optional[str],
                     reset_password: Optional[bool], create: bool) -> ApiForm:
        """
        Build the form for creating or updating a user.

        Raises:
            InvalidArgumentError: On create, if neither password nor
                reset_password is given, or a required field is missing
        """
        if user is None:
            raise InvalidArgumentError("user cannot be None")

        if create and (password is None or not str(password).strip()) and not reset_password:
            raise InvalidArgumentError("either password or reset_password must be set")

        if projects_limit is None:
            projects_limit = user.projects_limit
        skip_confirmation_field = "skip_confirmation" if create else "skip_reconfirmation"

        return (ApiForm()
                .with_param("email", user.email, create)
                .with_param("password", password)
                .with_param("reset_password", reset_password)
                .with_param("username", user.username, create)
                .with_param("name", user.name, create)
                .with_param("skype", user.skype)
                .with_param("linkedin", user.linkedin)
                .with_param("twitter", user.twitter)
                .with_param("website_url", user.website_url)
                .with_param("organization", user.organization)
                .with_param("projects_limit", projects_limit)
                .with_param("extern_uid", user.extern_uid)
                .with_param("provider", user.provider)
                .with_param("bio", user.bio)
                .with_param("location", user.location)
                .with_param("admin", user.is_admin)
                .with_param("can_create_group", user.can_create_group)
                .with_param(skip_confirmation_field, user.skip_confirmation)
                .with_param("external", user.external)
                .with_param("shared_runners_minutes_limit", user.shared_runners_minutes_limit))

    # =========================================================================
    # SSH keys
    # =========================================================================

    def get_ssh_keys(self, user_id: Optional[int] = None) -> List[SshKey]:
        """
        Get SSH keys of the current user, or of the given user (admin only).

        Keys fetched for a specific user have their user_id set.
        """
        if user_id is None:
            response = self._executor.get(HTTPStatus.OK, self._executor.per_page_params(), "user", "keys")
            return self._executor.read_entities(response, SshKey)

        user_id = self._executor.resolve_user(user_id)
        response = self._executor.get(HTTPStatus.OK, self._executor.per_page_params(), "users", user_id, "keys")
        keys = self._executor.read_entities(response, SshKey)
        if isinstance(user_id, int):
            for key in keys:
                key.user_id = user_id
        return keys

    def get_ssh_key(self, key_id: int) -> Optional[SshKey]:
        """Get a single SSH key of the current user."""
        if key_id is None:
            raise InvalidArgumentError("key_id cannot be None")
        response = self._executor.get(HTTPStatus.OK, None, "user", "keys", key_id)
        return self._executor.read_entity(response, SshKey)

    def get_optional_ssh_key(self, key_id: int) -> Result[SshKey]:
        """Get a single SSH key as a Result instead of raising."""
        return Result.capture(self.get_ssh_key, key_id)

    def add_ssh_key(self, title: str, key: str, user_id: Optional[int] = None) -> Optional[SshKey]:
        """
        Add an SSH key to the current user, or to the given user (admin only).

        Args:
            title: Title of the key
            key: The public key
            user_id: Owner of the key, the current user if None

        Returns:
            The created key
        """
        form = ApiForm().with_param("title", title).with_param("key", key)
        if user_id is None:
            response = self._executor.post(HTTPStatus.CREATED, form, "user", "keys")
            return self._executor.read_entity(response, SshKey)

        user_id = self._executor.resolve_user(user_id)
        response = self._executor.post(HTTPStatus.CREATED, form, "users", user_id, "keys")
        ssh_key = self._executor.read_entity(response, SshKey)
        if ssh_key is not None and isinstance(user_id, int):
            ssh_key.user_id = user_id
        return ssh_key

    def delete_ssh_key(self, key_id: int, user: Optional[UserRef] = None) -> None:
        """Delete an SSH key of the current user, or of the given user (admin only)."""
        if key_id is None:
            raise InvalidArgumentError("key_id cannot be None")

        if user is None:
            self._executor.delete(HTTPStatus.NO_CONTENT, None, "user", "keys", key_id)
        else:
            self._executor.delete(HTTPStatus.NO_CONTENT, None, "users", self._executor.resolve_user(user),
                                  "keys", key_id)

    # =========================================================================
    # Impersonation tokens
    # =========================================================================

    def get_impersonation_tokens(self, user: UserRef,
                                 state: Optional[ImpersonationState] = None) -> List[ImpersonationToken]:
        """
        Get impersonation tokens of a user. Available only for admins.

        Args:
            user: ID, username or User
            state: Filter by state, all tokens if None
        """
        form = (ApiForm()
                .with_param("state", state)
                .with_param("per_page", self._executor.default_per_page))
        response = self._executor.get(HTTPStatus.OK, form, "users", self._executor.resolve_user(user),
                                      "impersonation_tokens")
        return self._executor.read_entities(response, ImpersonationToken)

    def get_impersonation_token(self, user: UserRef, token_id: int) -> Optional[ImpersonationToken]:
        """Get a single impersonation token of a user. Available only for admins."""
        if token_id is None:
            raise InvalidArgumentError("token_id cannot be None")
        response = self._executor.get(HTTPStatus.OK, None, "users", self._executor.resolve_user(user),
                                      "impersonation_tokens", token_id)
        return self._executor.read_entity(response, ImpersonationToken)

    def get_optional_impersonation_token(self, user: UserRef, token_id: int) -> Result[ImpersonationToken]:
        """Get a single impersonation token as a Result instead of raising."""
        return Result.capture(self.get_impersonation_token, user, token_id)

    def create_impersonation_token(self, user: UserRef, name: str,
                                   expires_at: Optional[Union[date, datetime]],
                                   scopes: Sequence[Scope]) -> Optional[ImpersonationToken]:
        """
        Create an impersonation token. Available only for admins.

        Args:
            user: ID, username or User
            name: Name of the token
            expires_at: Expiry date, never expires if None
            scopes: Scopes granted to the token, at least one

        Returns:
            The created token, including its secret value
        """
        if not scopes:
            raise InvalidArgumentError("scopes cannot be None or empty")

        if isinstance(expires_at, datetime):
            expires_at = expires_at.date()

        form = (ApiForm()
                .with_param("name", name, required=True)
                .with_param("expires_at", expires_at)
                .with_param("scopes", list(scopes)))
        response = self._executor.post(HTTPStatus.CREATED, form, "users", self._executor.resolve_user(user),
                                       "impersonation_tokens")
        return self._executor.read_entity(response, ImpersonationToken)

    def revoke_impersonation_token(self, user: UserRef, token_id: int) -> None:
        """Revoke an impersonation token. Available only for admins."""
        if token_id is None:
            raise InvalidArgumentError("token_id cannot be None")
        self._executor.delete(HTTPStatus.NO_CONTENT, None, "users", self._executor.resolve_user(user),
                              "impersonation_tokens", token_id)

    # =========================================================================
    # Custom attributes
    # =========================================================================

    def create_custom_attribute(self, user: UserRef, key_or_attribute: Union[str, CustomAttribute],
                                value: Optional[str] = None) -> Optional[CustomAttribute]:
        """
        Set a custom attribute on a user. Available only for admins.

        Args:
            user: ID, username or User
            key_or_attribute: The attribute key, or a CustomAttribute
            value: The attribute value, when a key is given

        Returns:
            The stored attribute
        """
        if key_or_attribute is None:
            raise InvalidArgumentError("custom attribute cannot be None")
        if isinstance(key_or_attribute, CustomAttribute):
            key, value = key_or_attribute.key, key_or_attribute.value
        else:
            key = key_or_attribute

        require(key, "key")
        require(value, "value")

        form = ApiForm().with_param("value", value)
        response = self._executor.put(HTTPStatus.OK, form, "users", self._executor.resolve_user(user),
                                      "custom_attributes", url_encode(key))
        return self._executor.read_entity(response, CustomAttribute)

    def change_custom_attribute(self, user: UserRef, key_or_attribute: Union[str, CustomAttribute],
                                value: Optional[str] = None) -> Optional[CustomAttribute]:
        """Change a custom attribute; setting and changing are the same call."""
        return self.create_custom_attribute(user, key_or_attribute, value)

    def delete_custom_attribute(self, user: UserRef, key_or_attribute: Union[str, CustomAttribute]) -> None:
        """Delete a custom attribute of a user. Available only for admins."""
        if key_or_attribute is None:
            raise InvalidArgumentError("custom attribute cannot be None")
        key = key_or_attribute.key if isinstance(key_or_attribute, CustomAttribute) else key_or_attribute
        require(key, "key")

        self._executor.delete(HTTPStatus.OK, None, "users", self._executor.resolve_user(user),
                              "custom_attributes", url_encode(key))

    # =========================================================================
    # Emails
    # =========================================================================

    def get_emails(self, user: Optional[UserRef] = None) -> List[Email]:
        """Get emails of the current user, or of the given user (admin only)."""
        if user is None:
            response = self._executor.get(HTTPStatus.OK, None, "user", "emails")
        else:
            response = self._executor.get(HTTPStatus.OK, None, "users", self._executor.resolve_user(user), "emails")
        return self._executor.read_entities(response, Email)

    def get_email(self, email_id: int) -> Optional[Email]:
        """Get a single email of the current user."""
        if email_id is None:
            raise InvalidArgumentError("email_id cannot be None")
        response = self._executor.get(HTTPStatus.OK, None, "user", "emails", email_id)
        return self._executor.read_entity(response, Email)

    def add_email(self, email: str, user: Optional[UserRef] = None,
                  skip_confirmation: Optional[bool] = None) -> Optional[Email]:
        """
        Add an email to the current user, or to the given user (admin only).

        Args:
            email: The email address
            user: Owner of the email, the current user if None
            skip_confirmation: Mark the email as confirmed (admin only)

        Returns:
            The created email
        """
        form = ApiForm().with_param("email", email, required=True)
        if user is None:
            response = self._executor.post(HTTPStatus.CREATED, form, "user", "emails")
        else:
            form.with_param("skip_confirmation", skip_confirmation)
            response = self._executor.post(HTTPStatus.CREATED, form, "users",
                                           self._executor.resolve_user(user), "emails")
        return self._executor.read_entity(response, Email)

    def delete_email(self, email_id: int, user: Optional[UserRef] = None) -> None:
        """Delete an email of the current user, or of the given user (admin only)."""
        if email_id is None:
            raise InvalidArgumentError("email_id cannot be None")

        if user is None:
            self._executor.delete(HTTPStatus.NO_CONTENT, None, "user", "emails", email_id)
        else:
            self._executor.delete(HTTPStatus.NO_CONTENT, None, "users", self._executor.resolve_user(user),
                                  "emails", email_id)


__all__ = ["UserApi"]
