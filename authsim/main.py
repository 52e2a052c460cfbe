import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from authsim.auth.errors import AuthError
from authsim.core import config
from authsim.database import engine, ensure_demo_users
from authsim.models import user
from authsim.routes import auth_routes

app = FastAPI(title='authsim')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        user.Base.metadata.create_all(bind=engine)
        if config.SEED_DEMO_USERS:
            ensure_demo_users()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL.')


@app.exception_handler(AuthError)
async def handle_auth_error(request: Request, exc: AuthError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={'success': False, 'error': exc.message, 'code': exc.code},
    )


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    # The offending input is not echoed back; it may not be encodable.
    errors = exc.errors()
    message = errors[0]['msg'] if errors else 'Invalid request.'
    return JSONResponse(
        status_code=422,
        content={'success': False, 'error': message, 'code': 'ValidationError'},
    )


@app.exception_handler(SQLAlchemyError)
async def handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error('Database error while handling %s: %s', request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content={'success': False, 'error': 'Database unavailable. Verify DATABASE_URL.', 'code': 'DatabaseUnavailable'},
    )


@app.get('/')
def root():
    return {'status': 'Auth Demo API Running'}


app.include_router(auth_routes.router)
