"""Signup, signin, signout and the password-reset flow.

Every successful signup/signin/reset issues exactly one session token and
hands it to the credential transport; signout always clears it.
"""
import logging
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import auth, crud, models
from .config import Settings, get_settings
from .errors import (
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from .mail import Mailer, MailMessage, render_reset_email
from .permissions import CallerContext, Permission, permission_set, require_any_permission
from .transport import CredentialTransport

logger = logging.getLogger(__name__)

RESET_SUBJECT = "Your Password Reset Token"
RESET_CONFIRMATION = "You will receive an email with instructions to reset your password."


def _start_session(transport: CredentialTransport, user: models.User) -> None:
    token = auth.create_session_token(user.id)
    transport.set_credential(token, http_only=True, max_age=auth.COOKIE_MAX_AGE)


def signup(db: Session, transport: CredentialTransport, email: str, password: str, name: str = "") -> models.User:
    if not email or not password:
        raise ValidationError("email and password are required")
    email = email.lower()
    try:
        user = crud.create_user(
            db,
            name=name,
            email=email,
            password_hash=auth.hash_password(password),
            permissions=[Permission.USER.value],
        )
    except IntegrityError as e:
        db.rollback()
        raise ValidationError(f"An account already exists for {email}") from e
    _start_session(transport, user)
    logger.info("user %s signed up", user.id)
    return user


def signin(db: Session, transport: CredentialTransport, email: str, password: str) -> models.User:
    user = crud.get_user_by_email(db, email.lower())
    if not user:
        raise NotFoundError("user", email)
    if not auth.verify_password(password, user.password_hash):
        logger.info("rejected signin for user %s", user.id)
        raise InvalidCredentialsError()
    _start_session(transport, user)
    logger.info("user %s signed in", user.id)
    return user


def signout(transport: CredentialTransport) -> dict:
    transport.clear_credential()
    return {"message": "Goodbye!"}


def request_password_reset(
    db: Session, mailer: Mailer, email: str, settings: Optional[Settings] = None
) -> dict:
    settings = settings or get_settings()
    user = crud.get_user_by_email(db, email.lower())
    if not user:
        raise NotFoundError("user", email)

    reset_token, reset_token_expiry = auth.generate_reset_token()
    crud.update_user(db, user, reset_token=reset_token, reset_token_expiry=reset_token_expiry)
    logger.info("password reset requested for user %s", user.id)

    message = MailMessage(
        sender=settings.mail_from,
        to=user.email,
        subject=RESET_SUBJECT,
        html=render_reset_email(settings.frontend_url, reset_token),
    )
    try:
        mailer.send(message)
    except Exception:
        # Delivery failures are not reported to the caller
        logger.warning("reset email for user %s could not be sent", user.id, exc_info=True)

    return {"message": RESET_CONFIRMATION}


def reset_password(
    db: Session,
    transport: CredentialTransport,
    reset_token: str,
    password: str,
    confirm_password: str,
) -> models.User:
    if password != confirm_password:
        raise ValidationError("Password and confirmation didn't match!")

    user = crud.find_user_by_reset_token(db, reset_token, expiry_gte=auth.reset_token_cutoff_ms())
    if not user:
        raise InvalidOrExpiredTokenError()

    user = crud.update_user(
        db,
        user,
        password_hash=auth.hash_password(password),
        reset_token=None,
        reset_token_expiry=None,
    )
    _start_session(transport, user)
    logger.info("password reset completed for user %s", user.id)
    return user


def update_permissions(
    db: Session, caller: CallerContext, user_id: int, permissions: Iterable[str]
) -> models.User:
    if not caller.authenticated:
        raise UnauthenticatedError()
    current = crud.get_user(db, caller.user_id)
    if not current:
        raise NotFoundError("user", caller.user_id)
    require_any_permission(current, [Permission.ADMIN, Permission.PERMISSIONUPDATE])

    try:
        granted = permission_set(permissions)
    except ValueError as e:
        raise ValidationError(str(e)) from e
    if not granted:
        raise ValidationError("A user must keep at least one permission")

    target = crud.get_user(db, user_id)
    if not target:
        raise NotFoundError("user", user_id)
    updated = crud.update_user(db, target, permissions=sorted(p.value for p in granted))
    logger.info("user %s set permissions of user %s to %s", current.id, target.id, updated.permissions)
    return updated
