"""Account endpoints proxied to the identity provider."""

from typing import Any

from fastapi import APIRouter, status

from coopreg.api.dependencies import IdentityDep
from coopreg.api.models import AccountRegister, APIResponse, ForgotPassword, ResetPassword

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=APIResponse[dict[str, Any]],
    status_code=status.HTTP_201_CREATED,
)
def register_account(body: AccountRegister, identity: IdentityDep) -> APIResponse[dict[str, Any]]:
    """Create an account at the identity provider."""
    result = identity.register(
        {
            "email": body.email,
            "password": body.password,
            "confirmPassword": body.confirm_password,
            "firstName": body.first_name,
            "lastName": body.last_name,
        }
    )
    return APIResponse(data=result)


@router.post("/forgot-password", response_model=APIResponse[dict[str, Any]])
def forgot_password(body: ForgotPassword, identity: IdentityDep) -> APIResponse[dict[str, Any]]:
    """Send a password reset email."""
    return APIResponse(data=identity.forgot_password({"email": body.email}))


@router.post("/reset-password", response_model=APIResponse[dict[str, Any]])
def reset_password(body: ResetPassword, identity: IdentityDep) -> APIResponse[dict[str, Any]]:
    """Set a new password with a reset token."""
    result = identity.reset_password(
        {
            "token": body.token,
            "password": body.password,
            "confirmPassword": body.confirm_password,
        }
    )
    return APIResponse(data=result)
