"""IdentityClient - Talks to the external identity provider."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from coopreg.identity.exceptions import (
    AuthenticationError,
    IdentityRequestError,
    IdentityServiceError,
    IdentityTimeoutError,
    RoleLookupError,
)
from coopreg.identity.models import Role
from coopreg.logging import get_logger

if TYPE_CHECKING:
    from coopreg.config import IdentityConfig

logger = get_logger("identity")


class IdentityClient:
    """Client for the identity provider's REST API.

    Looks up and changes user roles, and proxies account registration and
    password reset requests. Every call sends the application's API key.
    """

    def __init__(self, config: IdentityConfig) -> None:
        """Initialize the identity client.

        Args:
            config: Provider base URL, API key, app id and timeout
        """
        self.base_url = config.base_url.rstrip("/")
        self.api_key = config.api_key
        self.app_id = config.app_id
        self.timeout = config.timeout
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                headers={
                    "x-api-key": self.api_key,
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def _request(
        self,
        method: str,
        path: str,
        token: str | None = None,
        payload: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send a request to the provider.

        Raises:
            IdentityServiceError: If the provider is not configured or unreachable
            IdentityTimeoutError: If the provider does not answer in time
        """
        if not self.base_url:
            raise IdentityServiceError("Identity provider is not configured")

        headers = {"Authorization": f"Bearer {token}"} if token else None
        url = f"{self.base_url}{path}"
        try:
            return self.client.request(method, url, json=payload, params=params, headers=headers)
        except httpx.TimeoutException as e:
            logger.warning("Identity provider timed out: %s %s", method, path)
            raise IdentityTimeoutError("Identity service timed out") from e
        except httpx.HTTPError as e:
            logger.error("Identity provider unreachable: %s %s (%s)", method, path, e)
            raise IdentityServiceError("Identity service unavailable") from e

    @staticmethod
    def _error_message(response: httpx.Response, default: str) -> str:
        try:
            body = response.json()
        except ValueError:
            return default
        if isinstance(body, dict):
            message = body.get("error") or body.get("message")
            if message:
                return str(message)
        return default

    def get_role(self, user_id: str, token: str) -> Role:
        """Look up a user's role.

        Args:
            user_id: Identity provider user id
            token: The caller's bearer token

        Returns:
            The user's role tier

        Raises:
            AuthenticationError: If the provider does not accept the token
            RoleLookupError: If the provider refuses the lookup
        """
        response = self._request("GET", f"/api/user/{user_id}/role", token=token)
        if response.status_code == httpx.codes.UNAUTHORIZED:
            logger.warning("Rejected session token for %s", user_id)
            raise AuthenticationError("Invalid or expired session")
        if not response.is_success:
            logger.warning("Role lookup for %s failed: %d", user_id, response.status_code)
            raise RoleLookupError("Failed to verify role")

        body = response.json()
        user = body.get("user") if isinstance(body, dict) else None
        role = user.get("role") if isinstance(user, dict) else None
        return Role.from_label(role)

    def set_role(self, user_id: str, role: Role, token: str) -> dict[str, Any]:
        """Change a user's role at the provider.

        Raises:
            IdentityRequestError: If the provider rejects the change
        """
        response = self._request(
            "PATCH",
            f"/api/user/{user_id}/role",
            token=token,
            payload={"role": role.label, "appId": self.app_id},
        )
        if not response.is_success:
            raise IdentityRequestError(
                self._error_message(response, "Failed to update user role"),
                response.status_code,
            )
        logger.info("Role of %s changed to %s", user_id, role.label)
        return dict(response.json())

    def list_users(
        self, token: str, page: int = 1, limit: int = 50, role: Role | None = None
    ) -> dict[str, Any]:
        """List the application's users at the provider, one page at a time.

        Returns:
            Mapping with "users" (a list of provider user records) and
            "pagination" (the provider's paging info, or None)

        Raises:
            IdentityRequestError: If the provider refuses the listing
        """
        params: dict[str, Any] = {"page": page, "limit": limit, "appId": self.app_id}
        if role is not None:
            params["role"] = role.label
        response = self._request("GET", "/api/users", token=token, params=params)
        if not response.is_success:
            logger.warning("User listing failed: %d", response.status_code)
            raise IdentityRequestError(
                self._error_message(response, "Failed to fetch users from auth service"),
                response.status_code,
            )

        body = response.json()
        if not isinstance(body, dict):
            return {"users": [], "pagination": None}
        users = body.get("users")
        return {
            "users": users if isinstance(users, list) else [],
            "pagination": body.get("pagination"),
        }

    def _proxy(self, path: str, payload: dict[str, Any], default_error: str) -> dict[str, Any]:
        response = self._request("POST", path, payload={**payload, "appId": self.app_id})
        if not response.is_success:
            raise IdentityRequestError(
                self._error_message(response, default_error), response.status_code
            )
        try:
            return dict(response.json())
        except ValueError:
            return {}

    def register(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Create an account at the provider."""
        return self._proxy("/api/auth/register", payload, "Registration failed")

    def forgot_password(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Start a password reset at the provider."""
        return self._proxy("/api/auth/forgot-password", payload, "Password reset request failed")

    def reset_password(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Complete a password reset at the provider."""
        return self._proxy("/api/auth/reset-password", payload, "Password reset failed")
