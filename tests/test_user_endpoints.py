try:
    from . import _bootstrap  # noqa: F401
    from ._fakes import FakeAuthClient, InMemoryTableClient
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401
    from _fakes import FakeAuthClient, InMemoryTableClient  # type: ignore

import httpx
import pytest

from arq6.main import app
from arq6.middleware import limiter
from arq6.services import UserAccountService, UserStore

pytestmark = pytest.mark.anyio("asyncio")

STRONG_PASSWORD = "Segura@123"


@pytest.fixture()
def backend():
    from arq6 import dependencies

    auth = FakeAuthClient()
    tables = InMemoryTableClient()

    app.dependency_overrides.clear()
    app.dependency_overrides.update(
        {
            dependencies.get_supabase_auth_client: lambda: auth,
            dependencies.get_account_service: lambda: UserAccountService(
                auth_client=auth, user_store=UserStore(tables)
            ),
        }
    )
    limiter.reset()

    yield auth, tables

    app.dependency_overrides.clear()


@pytest.fixture()
async def client(backend):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://testserver",
    ) as test_client:
        yield test_client


def _seed_user(auth: FakeAuthClient, tables: InMemoryTableClient, email="ana@example.com"):
    user_id = auth.add_account(email, STRONG_PASSWORD)
    tables.seed(
        "users",
        id=user_id,
        email=email,
        nome="Ana",
        empresa="ACME",
        created_at="2025-01-01T00:00:00+00:00",
    )
    return user_id


async def test_register_creates_identity_and_profile(backend, client):
    auth, tables = backend

    response = await client.post(
        "/api/users/register",
        json={
            "email": "novo@example.com",
            "password": STRONG_PASSWORD,
            "nome": "Novo Usuário",
            "empresa": "",
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["data"]["user"]["email"] == "novo@example.com"
    assert body["data"]["user"]["nome"] == "Novo Usuário"
    assert "password" not in body["data"]["user"]
    assert [row["email"] for row in tables.tables["users"]] == ["novo@example.com"]
    assert tables.tables["users"][0]["id"] == auth.accounts["novo@example.com"]["id"]


async def test_register_rejects_invalid_payload_with_details(client):
    response = await client.post(
        "/api/users/register",
        json={"email": "not-an-email", "password": "fraca", "nome": "A"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Dados de registro inválidos"
    fields = {detail["field"]: detail["message"] for detail in body["details"]}
    assert set(fields) == {"email", "password", "nome"}
    assert fields["password"] == "Senha deve ter pelo menos 8 caracteres"


async def test_register_rejects_password_without_special_character(client):
    response = await client.post(
        "/api/users/register",
        json={"email": "a@example.com", "password": "Senha1234", "nome": "Ana"},
    )

    assert response.status_code == 400
    details = response.json()["details"]
    assert details[0]["field"] == "password"
    assert "caractere especial" in details[0]["message"]


async def test_register_reports_missing_fields(client):
    response = await client.post("/api/users/register", json={})

    assert response.status_code == 400
    messages = {detail["field"]: detail["message"] for detail in response.json()["details"]}
    assert messages["email"] == "Email é obrigatório"
    assert messages["password"] == "Senha é obrigatória"
    assert messages["nome"] == "Nome é obrigatório"


async def test_register_rejects_duplicate_email(backend, client):
    auth, tables = backend
    _seed_user(auth, tables, email="dup@example.com")

    response = await client.post(
        "/api/users/register",
        json={"email": "dup@example.com", "password": STRONG_PASSWORD, "nome": "Dup"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Usuário já existe"


async def test_register_rolls_back_identity_when_profile_insert_fails(backend, client):
    auth, tables = backend
    tables.fail_inserts_for.add("users")

    response = await client.post(
        "/api/users/register",
        json={"email": "x@example.com", "password": STRONG_PASSWORD, "nome": "Xavier"},
    )

    assert response.status_code == 500
    assert response.json()["success"] is False
    assert len(auth.deleted_users) == 1
    assert "x@example.com" not in auth.accounts


async def test_login_returns_profile_and_session(backend, client):
    auth, tables = backend
    user_id = _seed_user(auth, tables)

    response = await client.post(
        "/api/users/login",
        json={"email": "ana@example.com", "password": STRONG_PASSWORD},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"]["id"] == user_id
    assert data["session"]["access_token"] == FakeAuthClient.token_for(user_id)
    assert data["session"]["refresh_token"] == f"refresh-{user_id}"
    assert isinstance(data["session"]["expires_at"], int)


async def test_login_with_unknown_credentials_is_unauthorized(backend, client):
    auth, tables = backend
    _seed_user(auth, tables)

    response = await client.post(
        "/api/users/login",
        json={"email": "ana@example.com", "password": "Errada@123"},
    )

    assert response.status_code == 401
    body = response.json()
    assert body["error"] == "Credenciais inválidas"
    assert "data" not in body
    assert "access_token" not in response.text


async def test_login_validation_uses_login_title(client):
    response = await client.post("/api/users/login", json={"email": "ana@example.com"})

    assert response.status_code == 400
    assert response.json()["error"] == "Dados de login inválidos"


async def test_malformed_json_body_is_rejected(client):
    response = await client.post(
        "/api/users/login",
        content=b'{"email": ',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "JSON inválido"


async def test_profile_requires_authorization_header(client):
    response = await client.get("/api/users/profile")

    assert response.status_code == 401
    assert response.json()["error"] == "Token de autorização necessário"


@pytest.mark.parametrize(
    ("header", "expected_error"),
    [
        ("Basic abc", "Token inválido"),
        ("Bearer", "Token inválido"),
        ("Bearer not-a-real-token", "Token inválido ou expirado"),
    ],
)
async def test_profile_rejects_bad_tokens(client, header, expected_error):
    response = await client.get("/api/users/profile", headers={"Authorization": header})

    assert response.status_code == 401
    assert response.json()["error"] == expected_error


async def test_profile_get_and_update(backend, client):
    auth, tables = backend
    user_id = _seed_user(auth, tables)
    headers = {"Authorization": f"Bearer {FakeAuthClient.token_for(user_id)}"}

    response = await client.get("/api/users/profile", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["user"]["nome"] == "Ana"

    response = await client.put(
        "/api/users/profile", headers=headers, json={"nome": "Ana Paula"}
    )
    assert response.status_code == 200
    user = response.json()["data"]["user"]
    assert user["nome"] == "Ana Paula"
    assert user["empresa"] == "ACME"
    assert tables.tables["users"][0]["updated_at"]


async def test_profile_update_validates_lengths(backend, client):
    auth, tables = backend
    user_id = _seed_user(auth, tables)

    response = await client.put(
        "/api/users/profile",
        headers={"Authorization": f"Bearer {FakeAuthClient.token_for(user_id)}"},
        json={"empresa": "x" * 101},
    )

    assert response.status_code == 400
    assert response.json()["details"] == [
        {"field": "empresa", "message": "Empresa deve ter no máximo 100 caracteres"}
    ]



async def test_profile_update_rejects_null_name(backend, client):
    auth, tables = backend
    user_id = _seed_user(auth, tables)

    response = await client.put(
        "/api/users/profile",
        headers={"Authorization": f"Bearer {FakeAuthClient.token_for(user_id)}"},
        json={"nome": None, "empresa": "Nova Empresa"},
    )

    assert response.status_code == 400
    assert response.json()["details"] == [
        {"field": "nome", "message": "Nome não pode ser vazio"}
    ]
    assert tables.tables["users"][0]["nome"] == "Ana"
    assert tables.tables["users"][0]["empresa"] == "ACME"


async def test_refresh_token(backend, client):
    auth, tables = backend
    user_id = _seed_user(auth, tables)

    response = await client.post(
        "/api/users/refresh-token", json={"refresh_token": f"refresh-{user_id}"}
    )
    assert response.status_code == 200
    assert response.json()["data"]["session"]["access_token"] == FakeAuthClient.token_for(
        user_id
    )

    response = await client.post("/api/users/refresh-token", json={"refresh_token": "bogus"})
    assert response.status_code == 401
    assert response.json()["error"] == "Refresh token inválido"


async def test_logout_with_and_without_token(backend, client):
    auth, _ = backend

    response = await client.post("/api/users/logout")
    assert response.status_code == 200
    assert auth.signed_out == []

    response = await client.post(
        "/api/users/logout", headers={"Authorization": "Bearer some-token"}
    )
    assert response.status_code == 200
    assert auth.signed_out == ["some-token"]
