import logging
from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from authsim.auth.errors import EmailExistsError, InvalidCredentialsError, WeakPasswordError
from authsim.auth.passwords import encode_password, password_matches
from authsim.core import config
from authsim.models.user import Role, User

logger = logging.getLogger(__name__)


def check_password_policy(password: str, label: str = "Password") -> None:
    if len(password or "") < config.MIN_PASSWORD_LENGTH:
        raise WeakPasswordError(f"{label} must be at least {config.MIN_PASSWORD_LENGTH} characters")


class CredentialStore:
    """User records behind an explicit database session."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email).first()

    def get_by_id(self, user_id: int) -> User | None:
        return self.db.query(User).filter(User.id == user_id).first()

    def create(self, name: str, email: str, password: str, role: Role = Role.USER) -> User:
        # Duplicate email wins over a weak password.
        if self.find_by_email(email):
            raise EmailExistsError()
        check_password_policy(password)

        user = User(
            name=name,
            email=email,
            hashed_password=encode_password(password),
            role=Role(role).value,
            created_at=date.today().isoformat(),
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise EmailExistsError() from exc
        self.db.refresh(user)
        return user

    def verify(self, email: str, password: str) -> User:
        user = self.find_by_email(email)
        if user is None or not password_matches(password, user.hashed_password):
            logger.warning("Rejected sign-in attempt for %s", email)
            raise InvalidCredentialsError()
        return user

    def set_password(self, user: User, new_password: str) -> None:
        check_password_policy(new_password, label="New password")
        user.hashed_password = encode_password(new_password)
        self.db.commit()

    def update_fields(self, user: User, fields: dict) -> User:
        new_email = fields.get("email")
        if new_email is not None and new_email != user.email:
            holder = self.find_by_email(new_email)
            if holder is not None and holder.id != user.id:
                raise EmailExistsError()

        for field_name, value in fields.items():
            setattr(user, field_name, value)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise EmailExistsError() from exc
        self.db.refresh(user)
        return user
