"""Unit tests for IdentityClient."""

from unittest.mock import MagicMock

import httpx
import pytest

from coopreg.config import IdentityConfig
from coopreg.identity import (
    AuthenticationError,
    IdentityClient,
    IdentityRequestError,
    IdentityServiceError,
    IdentityTimeoutError,
    Role,
    RoleLookupError,
)


@pytest.fixture
def mock_client() -> MagicMock:
    """Create a mock HTTP client."""
    return MagicMock()


@pytest.fixture
def identity(mock_client: MagicMock) -> IdentityClient:
    """Create an IdentityClient with a mocked HTTP client."""
    client = IdentityClient(
        IdentityConfig(base_url="https://auth.example.org/", api_key="key-1", app_id="coop")
    )
    client._client = mock_client
    return client


def _mock_response(status_code: int = 200, body: object = None) -> MagicMock:
    """Create a mock provider response."""
    response = MagicMock()
    response.status_code = status_code
    response.is_success = 200 <= status_code < 300
    response.json.return_value = body if body is not None else {}
    return response


@pytest.mark.unit
class TestGetRole:
    """Tests for get_role."""

    def test_returns_role(self, identity: IdentityClient, mock_client: MagicMock) -> None:
        mock_client.request.return_value = _mock_response(body={"user": {"role": "moderator"}})

        role = identity.get_role("user-1", "tok")

        assert role == Role.MODERATOR
        mock_client.request.assert_called_once_with(
            "GET",
            "https://auth.example.org/api/user/user-1/role",
            json=None,
            params=None,
            headers={"Authorization": "Bearer tok"},
        )

    def test_missing_role_is_user(self, identity: IdentityClient, mock_client: MagicMock) -> None:
        mock_client.request.return_value = _mock_response(body={"user": {}})

        assert identity.get_role("user-1", "tok") == Role.USER

    def test_rejected_token(self, identity: IdentityClient, mock_client: MagicMock) -> None:
        mock_client.request.return_value = _mock_response(status_code=401)

        with pytest.raises(AuthenticationError):
            identity.get_role("user-1", "tok")

    def test_refused_lookup(self, identity: IdentityClient, mock_client: MagicMock) -> None:
        mock_client.request.return_value = _mock_response(status_code=403)

        with pytest.raises(RoleLookupError):
            identity.get_role("user-1", "tok")

    def test_timeout(self, identity: IdentityClient, mock_client: MagicMock) -> None:
        mock_client.request.side_effect = httpx.TimeoutException("slow")

        with pytest.raises(IdentityTimeoutError):
            identity.get_role("user-1", "tok")

    def test_unreachable(self, identity: IdentityClient, mock_client: MagicMock) -> None:
        mock_client.request.side_effect = httpx.ConnectError("refused")

        with pytest.raises(IdentityServiceError):
            identity.get_role("user-1", "tok")

    def test_unconfigured(self) -> None:
        client = IdentityClient(IdentityConfig())
        client._client = MagicMock()

        with pytest.raises(IdentityServiceError, match="not configured"):
            client.get_role("user-1", "tok")
        client._client.request.assert_not_called()


@pytest.mark.unit
class TestSetRole:
    """Tests for set_role."""

    def test_sends_label_and_app_id(
        self, identity: IdentityClient, mock_client: MagicMock
    ) -> None:
        mock_client.request.return_value = _mock_response(body={"success": True})

        result = identity.set_role("user-2", Role.ADMIN, "tok")

        assert result == {"success": True}
        _, kwargs = mock_client.request.call_args
        assert kwargs["json"] == {"role": "admin", "appId": "coop"}

    def test_rejected_change(self, identity: IdentityClient, mock_client: MagicMock) -> None:
        mock_client.request.return_value = _mock_response(
            status_code=403, body={"error": "Insufficient permissions"}
        )

        with pytest.raises(IdentityRequestError) as exc_info:
            identity.set_role("user-2", Role.ADMIN, "tok")

        assert exc_info.value.status_code == 403
        assert "Insufficient permissions" in str(exc_info.value)


@pytest.mark.unit
class TestListUsers:
    """Tests for list_users."""

    def test_pages_and_filters_by_role(
        self, identity: IdentityClient, mock_client: MagicMock
    ) -> None:
        mock_client.request.return_value = _mock_response(
            body={"users": [{"id": "u-1", "role": "member"}], "pagination": {"page": 2}}
        )

        result = identity.list_users("tok", page=2, limit=10, role=Role.MEMBER)

        assert result == {"users": [{"id": "u-1", "role": "member"}], "pagination": {"page": 2}}
        args, kwargs = mock_client.request.call_args
        assert args == ("GET", "https://auth.example.org/api/users")
        assert kwargs["params"] == {"page": 2, "limit": 10, "appId": "coop", "role": "member"}
        assert kwargs["headers"] == {"Authorization": "Bearer tok"}

    def test_missing_fields_default(
        self, identity: IdentityClient, mock_client: MagicMock
    ) -> None:
        mock_client.request.return_value = _mock_response(body={})

        assert identity.list_users("tok") == {"users": [], "pagination": None}

    def test_refused_listing(self, identity: IdentityClient, mock_client: MagicMock) -> None:
        mock_client.request.return_value = _mock_response(status_code=403, body={})

        with pytest.raises(IdentityRequestError, match="Failed to fetch users") as exc_info:
            identity.list_users("tok")

        assert exc_info.value.status_code == 403


@pytest.mark.unit
class TestAccountProxy:
    """Tests for register and password reset proxying."""

    def test_register_adds_app_id(self, identity: IdentityClient, mock_client: MagicMock) -> None:
        mock_client.request.return_value = _mock_response(status_code=201, body={"id": "u-9"})

        result = identity.register({"email": "a@b.c", "password": "secret"})

        assert result == {"id": "u-9"}
        args, kwargs = mock_client.request.call_args
        assert args == ("POST", "https://auth.example.org/api/auth/register")
        assert kwargs["json"]["appId"] == "coop"
        assert kwargs["headers"] is None

    def test_forgot_password_error_message(
        self, identity: IdentityClient, mock_client: MagicMock
    ) -> None:
        mock_client.request.return_value = _mock_response(
            status_code=400, body={"message": "Unknown email"}
        )

        with pytest.raises(IdentityRequestError, match="Unknown email"):
            identity.forgot_password({"email": "x@y.z"})

    def test_reset_password_default_message(
        self, identity: IdentityClient, mock_client: MagicMock
    ) -> None:
        response = _mock_response(status_code=500)
        response.json.side_effect = ValueError("no body")
        mock_client.request.return_value = response

        with pytest.raises(IdentityRequestError, match="Password reset failed"):
            identity.reset_password({"token": "t", "password": "p"})
