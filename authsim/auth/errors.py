"""Error taxonomy for account and session operations.

Every error is a terminal validation outcome. The HTTP layer renders them as
``{"success": false, "error": message, "code": code}`` with ``status_code``.
"""


class AuthError(Exception):
    code = "AuthError"
    status_code = 400
    default_message = "Authentication error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class EmailExistsError(AuthError):
    code = "EmailExists"
    status_code = 409
    default_message = "Email already exists"


class WeakPasswordError(AuthError):
    code = "WeakPassword"
    status_code = 400
    default_message = "Password is too short"


class InvalidCredentialsError(AuthError):
    # Shared by unknown email and wrong password so accounts cannot be enumerated.
    code = "InvalidCredentials"
    status_code = 401
    default_message = "Invalid email or password"


class SessionExpiredError(AuthError):
    code = "Expired"
    status_code = 401
    default_message = "Token expired"


class SessionMalformedError(AuthError):
    code = "Malformed"
    status_code = 401
    default_message = "Invalid token"


class CurrentPasswordIncorrectError(AuthError):
    code = "CurrentPasswordIncorrect"
    status_code = 400
    default_message = "Current password is incorrect"


class UserNotFoundError(AuthError):
    code = "UserNotFound"
    status_code = 404
    default_message = "User not found"
