"""Account flows on top of the credential store and session issuer.

Every operation that takes a session credential validates it first and lets
``SessionExpiredError``/``SessionMalformedError`` propagate as-is.
"""
import logging

from authsim.auth.errors import CurrentPasswordIncorrectError, UserNotFoundError
from authsim.auth.passwords import password_matches
from authsim.auth.session_token import issue_token, validate_token
from authsim.models.user import User
from authsim.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)

MUTABLE_PROFILE_FIELDS = ("name", "email")


def register(store: CredentialStore, name: str, email: str, password: str) -> tuple[User, str]:
    user = store.create(name, email, password)
    logger.info("Registered user %s (id=%s)", user.email, user.id)
    return user, issue_token(user)


def login(store: CredentialStore, email: str, password: str) -> tuple[User, str]:
    user = store.verify(email, password)
    logger.info("User %s signed in", user.email)
    return user, issue_token(user)


def get_current_user(store: CredentialStore, token: str | None) -> User:
    claims = validate_token(token)
    user = store.get_by_id(claims.user_id)
    if user is None:
        raise UserNotFoundError()
    return user


def update_profile(store: CredentialStore, token: str | None, fields: dict) -> User:
    user = get_current_user(store, token)
    allowed = {
        key: value
        for key, value in fields.items()
        if key in MUTABLE_PROFILE_FIELDS and value is not None
    }
    return store.update_fields(user, allowed)


def change_password(store: CredentialStore, token: str | None, old_password: str, new_password: str) -> None:
    user = get_current_user(store, token)
    if not password_matches(old_password, user.hashed_password):
        raise CurrentPasswordIncorrectError()
    store.set_password(user, new_password)
    logger.info("Password changed for user id=%s", user.id)
