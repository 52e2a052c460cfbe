
import base64
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from authsim.auth import dependencies
from authsim.auth.dependencies import get_db
from authsim.auth.errors import EmailExistsError
from authsim.auth.session_token import validate_token
from authsim.main import app
from authsim.routes import auth_routes
from authsim.routes.auth_routes import ChangePasswordRequest, RegisterRequest


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _register(client, name='Ann', email='ann@x.com', password='secret1'):
    return client.post('/register', json={'name': name, 'email': email, 'password': password})


def _auth(token: str) -> dict:
    return {'Authorization': f'Bearer {token}'}


def test_register_request_normalizes_fields() -> None:
    request = RegisterRequest(name='  Ann ', email=' ANN@X.COM ', password='secret1')

    assert request.name == 'Ann'
    assert request.email == 'ann@x.com'


@pytest.mark.parametrize(('name', 'email'), [('   ', 'ann@x.com'), ('Ann', '  ')])
def test_register_request_rejects_blank_fields(name: str, email: str) -> None:
    with pytest.raises(ValidationError):
        RegisterRequest(name=name, email=email, password='secret1')


def test_change_password_request_accepts_camel_case_and_snake_case() -> None:
    camel = ChangePasswordRequest.model_validate({'oldPassword': 'a', 'newPassword': 'b'})
    snake = ChangePasswordRequest.model_validate({'old_password': 'a', 'new_password': 'b'})

    assert (camel.old_password, camel.new_password) == ('a', 'b')
    assert (snake.old_password, snake.new_password) == ('a', 'b')


def test_register_route_function_raises_typed_error(store) -> None:
    auth_routes.register(RegisterRequest(name='Ann', email='ann@x.com', password='secret1'), store=store)

    with pytest.raises(EmailExistsError):
        auth_routes.register(RegisterRequest(name='Ann', email='ann@x.com', password='secret1'), store=store)


def test_root_reports_status(client) -> None:
    response = client.get('/')

    assert response.status_code == 200
    assert response.json() == {'status': 'Auth Demo API Running'}


def test_register_returns_user_without_password_and_valid_token(client) -> None:
    response = _register(client)

    body = response.json()
    assert response.status_code == 201
    assert body['success'] is True
    assert body['data']['user']['email'] == 'ann@x.com'
    assert body['data']['user']['role'] == 'user'
    assert 'hashed_password' not in body['data']['user']
    assert 'password' not in body['data']['user']
    assert validate_token(body['data']['token']).user_id == body['data']['user']['id']


def test_register_duplicate_email_returns_conflict(client) -> None:
    _register(client)

    response = _register(client, email='ANN@x.com', password='x')

    assert response.status_code == 409
    assert response.json() == {'success': False, 'error': 'Email already exists', 'code': 'EmailExists'}


def test_register_weak_password_returns_bad_request(client) -> None:
    response = _register(client, password='abc')

    assert response.status_code == 400
    assert response.json()['code'] == 'WeakPassword'


def test_register_blank_name_is_validation_error(client) -> None:
    response = _register(client, name='  ')

    assert response.status_code == 422
    assert response.json() == {'success': False, 'error': 'Value error, Name is required.', 'code': 'ValidationError'}


def test_login_errors_are_indistinguishable(client) -> None:
    _register(client)

    wrong_password = client.post('/login', json={'email': 'ann@x.com', 'password': 'wrong'})
    unknown_email = client.post('/login', json={'email': 'nobody@x.com', 'password': 'secret1'})

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {
        'success': False,
        'error': 'Invalid email or password',
        'code': 'InvalidCredentials',
    }


def test_login_returns_same_user_as_registration(client) -> None:
    registered = _register(client).json()['data']['user']

    response = client.post('/login', json={'email': 'ann@x.com', 'password': 'secret1'})

    assert response.status_code == 200
    assert response.json()['data']['user']['id'] == registered['id']


def test_me_returns_current_user(client) -> None:
    token = _register(client).json()['data']['token']

    response = client.get('/me', headers=_auth(token))

    assert response.status_code == 200
    assert response.json()['data']['user']['name'] == 'Ann'


@pytest.mark.parametrize('headers', [{}, {'Authorization': 'Bearer not-a-token'}])
def test_me_rejects_missing_or_malformed_credential(client, headers: dict) -> None:
    response = client.get('/me', headers=headers)

    assert response.status_code == 401
    assert response.json() == {'success': False, 'error': 'Invalid token', 'code': 'Malformed'}


def test_update_me_keeps_role_and_id(client) -> None:
    registered = _register(client).json()['data']
    token = registered['token']

    response = client.patch('/me', headers=_auth(token), json={'name': 'Ann B.', 'role': 'admin', 'id': 99})

    user = response.json()['data']['user']
    assert response.status_code == 200
    assert user['name'] == 'Ann B.'
    assert user['role'] == 'user'
    assert user['id'] == registered['user']['id']


def test_update_me_rejects_taken_email(client) -> None:
    _register(client, name='Bob', email='bob@x.com')
    token = _register(client).json()['data']['token']

    response = client.patch('/me', headers=_auth(token), json={'email': 'BOB@x.com'})

    assert response.status_code == 409
    assert response.json()['code'] == 'EmailExists'


def test_change_password_flow(client) -> None:
    token = _register(client).json()['data']['token']

    wrong = client.post(
        '/me/password',
        headers=_auth(token),
        json={'oldPassword': 'nope', 'newPassword': 'secret2'},
    )
    changed = client.post(
        '/me/password',
        headers=_auth(token),
        json={'oldPassword': 'secret1', 'newPassword': 'secret2'},
    )

    assert wrong.status_code == 400
    assert wrong.json()['code'] == 'CurrentPasswordIncorrect'
    assert changed.status_code == 200
    assert changed.json() == {'success': True, 'data': {'message': 'Password updated successfully'}}
    assert client.post('/login', json={'email': 'ann@x.com', 'password': 'secret2'}).status_code == 200
    assert client.post('/login', json={'email': 'ann@x.com', 'password': 'secret1'}).status_code == 401


def test_logout_acknowledges(client) -> None:
    response = client.post('/logout')

    assert response.status_code == 200
    assert response.json()['success'] is True


def test_routes_apply_configured_latency(client, monkeypatch: pytest.MonkeyPatch) -> None:
    delays = []
    monkeypatch.setattr('authsim.core.config.SIMULATED_LATENCY_MS', 250)
    monkeypatch.setattr(dependencies, 'time', SimpleNamespace(sleep=delays.append))

    client.post('/logout')

    assert delays == [0.25]


def _post_raw_json(client, path: str, body: bytes, headers: dict | None = None):
    # Lone surrogates only survive as JSON escapes, so the body is sent verbatim.
    return client.post(path, content=body, headers={'Content-Type': 'application/json', **(headers or {})})


@pytest.mark.parametrize(
    'body',
    [
        b'{"name": "Ann", "email": "ann@x.com", "password": "\\ud800secret"}',
        b'{"name": "\\udfffAnn", "email": "ann@x.com", "password": "secret1"}',
        b'{"name": "Ann", "email": "\\ud800ann@x.com", "password": "secret1"}',
    ],
)
def test_register_rejects_unencodable_text(client, body: bytes) -> None:
    response = _post_raw_json(client, '/register', body)

    assert response.status_code == 422
    assert response.json()['success'] is False
    assert response.json()['code'] == 'ValidationError'


def test_login_rejects_unencodable_password(client) -> None:
    _register(client)

    response = _post_raw_json(client, '/login', b'{"email": "ann@x.com", "password": "\\ud800secret"}')

    assert response.status_code == 422
    assert response.json()['code'] == 'ValidationError'


def test_change_password_rejects_unencodable_password(client) -> None:
    token = _register(client).json()['data']['token']

    response = _post_raw_json(
        client,
        '/me/password',
        b'{"oldPassword": "secret1", "newPassword": "\\ud800secret"}',
        headers=_auth(token),
    )

    assert response.status_code == 422
    assert client.post('/login', json={'email': 'ann@x.com', 'password': 'secret1'}).status_code == 200


def test_me_rejects_deeply_nested_credential(client) -> None:
    token = base64.b64encode(b'[' * 20000).decode('ascii')

    response = client.get('/me', headers=_auth(token))

    assert response.status_code == 401
    assert response.json()['code'] == 'Malformed'
