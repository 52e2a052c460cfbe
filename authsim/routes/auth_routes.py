from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, field_validator

from authsim.auth.dependencies import get_credential_store, get_session_token, simulate_latency
from authsim.models.user import User
from authsim.services import accounts
from authsim.services.credential_store import CredentialStore

router = APIRouter(tags=['auth'], dependencies=[Depends(simulate_latency)])


def _require_encodable(value: str, label: str) -> str:
    # lone surrogates are valid JSON but cannot be stored or encoded
    try:
        value.encode('utf-8')
    except UnicodeEncodeError as exc:
        raise ValueError(f'{label} contains invalid characters.') from exc
    return value


def _normalize_email(value: str) -> str:
    normalized = _require_encodable(value, 'Email').strip().lower()
    if not normalized:
        raise ValueError('Email is required.')
    return normalized


def _normalize_name(value: str) -> str:
    normalized = _require_encodable(value, 'Name').strip()
    if not normalized:
        raise ValueError('Name is required.')
    return normalized


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _normalize_name(value)

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _normalize_email(value)

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        return _require_encodable(value, 'Password')


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _normalize_email(value)

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        return _require_encodable(value, 'Password')


class UpdateProfileRequest(BaseModel):
    name: str | None = None
    email: str | None = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str | None) -> str | None:
        return None if value is None else _normalize_name(value)

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str | None) -> str | None:
        return None if value is None else _normalize_email(value)


class ChangePasswordRequest(BaseModel):
    old_password: str = Field(alias='oldPassword')
    new_password: str = Field(alias='newPassword')

    @field_validator('old_password', 'new_password')
    @classmethod
    def validate_passwords(cls, value: str) -> str:
        return _require_encodable(value, 'Password')

    class Config:
        populate_by_name = True


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    created_at: str

    class Config:
        from_attributes = True


def _user_payload(user: User) -> dict:
    return UserResponse.model_validate(user).model_dump()


def _session_payload(user: User, token: str) -> dict:
    return {'success': True, 'data': {'user': _user_payload(user), 'token': token}}


@router.post('/register', status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, store: CredentialStore = Depends(get_credential_store)):
    user, token = accounts.register(store, data.name, data.email, data.password)
    return _session_payload(user, token)


@router.post('/login')
def login(data: LoginRequest, store: CredentialStore = Depends(get_credential_store)):
    user, token = accounts.login(store, data.email, data.password)
    return _session_payload(user, token)


@router.post('/logout')
def logout():
    # Credentials are stateless; the client discards its copy.
    return {'success': True, 'data': {'message': 'Logged out successfully'}}


@router.get('/me')
def me(
    token: str | None = Depends(get_session_token),
    store: CredentialStore = Depends(get_credential_store),
):
    user = accounts.get_current_user(store, token)
    return {'success': True, 'data': {'user': _user_payload(user)}}


@router.patch('/me')
def update_me(
    data: UpdateProfileRequest,
    token: str | None = Depends(get_session_token),
    store: CredentialStore = Depends(get_credential_store),
):
    user = accounts.update_profile(store, token, data.model_dump(exclude_none=True))
    return {'success': True, 'data': {'user': _user_payload(user)}}


@router.post('/me/password')
def change_password(
    data: ChangePasswordRequest,
    token: str | None = Depends(get_session_token),
    store: CredentialStore = Depends(get_credential_store),
):
    accounts.change_password(store, token, data.old_password, data.new_password)
    return {'success': True, 'data': {'message': 'Password updated successfully'}}
