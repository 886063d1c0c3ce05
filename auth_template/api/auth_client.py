"""
Authentication API client.

Async bindings for the ``/auth`` endpoints. Session cookies are handled by
the ``ApiClient``; nothing here touches tokens.
"""

from auth_template.api.http_client import ApiClient, REFRESH_PATH, LOG_IN_PATH, parse_json
from auth_template.api.schemas import (
    AuthUser,
    ChangePasswordRequest,
    ConfirmEmailChangeRequest,
    ConfirmEmailRequest,
    CurrentUserResponse,
    ForgotPasswordRequest,
    LogInRequest,
    LogInResponse,
    MessageResponse,
    RequestEmailChangeRequest,
    SetPasswordRequest,
    SignUpRequest,
    SignUpResponse,
    VerifyForgotPasswordRequest,
)
from auth_template.utils.logger import get_logger

logger = get_logger(__name__)

CURRENT_USER_PATH = "/auth/me"
LOG_OUT_PATH = "/auth/log-out"


async def _post_message(client: ApiClient, path: str, payload=None) -> MessageResponse:
    response = await client.post(
        path,
        json=payload.model_dump() if payload is not None else None,
    )
    return MessageResponse.model_validate(parse_json(response))


async def sign_up(
    *,
    client: ApiClient,
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    confirm: str,
) -> SignUpResponse:
    """
    Register a new account.

    Returns:
        SignUpResponse: Message and new user id.

    Raises:
        ValidationFailedError: Field-level rejection (e.g. password mismatch).
        ApiError: Any other failure, e.g. email already registered.
    """
    logger.info("Attempting user signup", extra={"email": email})

    payload = SignUpRequest(
        first_name=first_name,
        last_name=last_name,
        email=email,
        password=password,
        confirm=confirm,
    )
    response = await client.post("/auth/sign-up", json=payload.model_dump())
    return SignUpResponse.model_validate(parse_json(response))


async def confirm_email(*, client: ApiClient, email: str, auth_code: str) -> MessageResponse:
    """Confirm an email address with the emailed code."""
    logger.info("Confirming email", extra={"email": email})
    return await _post_message(
        client,
        "/auth/confirm-email",
        ConfirmEmailRequest(email=email, auth_code=auth_code),
    )


async def log_in(
    *,
    client: ApiClient,
    email: str,
    password: str,
    remember_me: bool = False,
) -> LogInResponse:
    """
    Authenticate and receive session cookies.

    A 401 here is never retried.

    Raises:
        UnauthorizedError: Invalid credentials.
        ApiError: Any other failure, e.g. email not confirmed (403).
    """
    logger.info("Attempting user login", extra={"email": email})

    payload = LogInRequest(email=email, password=password, remember_me=remember_me)
    response = await client.post(LOG_IN_PATH, json=payload.model_dump())
    return LogInResponse.model_validate(parse_json(response))


async def log_out(*, client: ApiClient) -> MessageResponse:
    """Revoke the session and clear its cookies."""
    logger.info("Attempting user logout")
    return await _post_message(client, LOG_OUT_PATH)


async def refresh_session(*, client: ApiClient) -> None:
    """Rotate session cookies through the client's coalesced refresh."""
    logger.debug("Refreshing session", extra={"path": REFRESH_PATH})
    await client.refresh_access()


async def get_current_user(*, client: ApiClient) -> AuthUser:
    """
    Fetch the authenticated user.

    Raises:
        UnauthorizedError: No valid session.
    """
    response = await client.get(CURRENT_USER_PATH)
    return CurrentUserResponse.model_validate(parse_json(response)).user


async def forgot_password(*, client: ApiClient, email: str) -> MessageResponse:
    """Request a password-reset code."""
    logger.info("Requesting password reset", extra={"email": email})
    return await _post_message(
        client, "/auth/forgot-password", ForgotPasswordRequest(email=email)
    )


async def verify_forgot_password(
    *, client: ApiClient, email: str, auth_code: str
) -> MessageResponse:
    """Exchange a password-reset code for a short-lived reset session."""
    return await _post_message(
        client,
        "/auth/verify-forgot-password",
        VerifyForgotPasswordRequest(email=email, auth_code=auth_code),
    )


async def set_password(*, client: ApiClient, password: str, confirm: str) -> MessageResponse:
    """Set a new password inside a verified reset session."""
    return await _post_message(
        client,
        "/auth/set-password",
        SetPasswordRequest(password=password, confirm=confirm),
    )


async def change_password(
    *,
    client: ApiClient,
    current_password: str,
    new_password: str,
    confirm: str,
) -> MessageResponse:
    """Change the password of the logged-in user."""
    logger.info("Changing password")
    return await _post_message(
        client,
        "/auth/change-password",
        ChangePasswordRequest(
            current_password=current_password,
            new_password=new_password,
            confirm=confirm,
        ),
    )


async def request_email_change(*, client: ApiClient, new_email: str) -> MessageResponse:
    """Send a confirmation code to a new email address."""
    logger.info("Requesting email change")
    return await _post_message(
        client,
        "/auth/request-email-change",
        RequestEmailChangeRequest(new_email=new_email),
    )


async def confirm_email_change(
    *, client: ApiClient, new_email: str, auth_code: str
) -> MessageResponse:
    """Apply a pending email change."""
    return await _post_message(
        client,
        "/auth/confirm-email-change",
        ConfirmEmailChangeRequest(new_email=new_email, auth_code=auth_code),
    )
