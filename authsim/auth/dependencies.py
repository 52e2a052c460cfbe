import time

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from authsim.core import config
from authsim.database import SessionLocal
from authsim.services.credential_store import CredentialStore

# Missing credentials are reported as a malformed session, not by FastAPI.
security = HTTPBearer(auto_error=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_credential_store(db=Depends(get_db)) -> CredentialStore:
    return CredentialStore(db)


def get_session_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str | None:
    if credentials is None:
        return None
    return credentials.credentials


def simulate_latency() -> None:
    if config.SIMULATED_LATENCY_MS > 0:
        time.sleep(config.SIMULATED_LATENCY_MS / 1000)
