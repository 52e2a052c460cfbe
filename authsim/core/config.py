import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


APP_ENV = os.getenv("APP_ENV", "development")

# "encoded" is the base64 JSON demo credential; "signed" is an HS256 JWT.
SESSION_TOKEN_MODE = os.getenv("SESSION_TOKEN_MODE", "encoded").strip().lower()
SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY", "change-me")
SESSION_ALGORITHM = os.getenv("SESSION_ALGORITHM", "HS256")
SESSION_EXPIRES_MINUTES = int(os.getenv("SESSION_EXPIRES_MINUTES", "60"))

MIN_PASSWORD_LENGTH = int(os.getenv("MIN_PASSWORD_LENGTH", "6"))

SIMULATED_LATENCY_MS = int(os.getenv("SIMULATED_LATENCY_MS", "0"))

SEED_DEMO_USERS = _get_bool(os.getenv("SEED_DEMO_USERS"), default=True)

CORS_ALLOWED_ORIGINS = _get_list(
    os.getenv("CORS_ALLOWED_ORIGINS"),
    ["http://localhost:3000", "http://localhost:5173"],
)


def validate_runtime_config() -> None:
    if SESSION_TOKEN_MODE not in {"encoded", "signed"}:
        raise RuntimeError(f"Unknown SESSION_TOKEN_MODE: {SESSION_TOKEN_MODE!r}")
    if APP_ENV.lower() == "production":
        if SESSION_TOKEN_MODE == "encoded":
            raise RuntimeError("SESSION_TOKEN_MODE=encoded must not be used in production.")
        if SESSION_SECRET_KEY == "change-me":
            raise RuntimeError("SESSION_SECRET_KEY must be set in production.")
