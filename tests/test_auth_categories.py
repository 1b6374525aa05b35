import uuid

from sqlalchemy import select

from conftest import PASSWORD
from spendwise.crud.category import DEFAULT_CATEGORIES
from spendwise.models.category import Category


async def test_signup_seeds_default_categories(client):
    response = await client.post(
        "/api/v1/auth/signup",
        json={"email": "carol@spendwise.io", "password": PASSWORD, "name": "Carol"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "User created successfully"
    assert body["user"]["email"] == "carol@spendwise.io"
    assert body["user"]["name"] == "Carol"
    assert "hashed_password" not in body["user"]

    response = await client.post(
        "/api/v1/auth/jwt/login",
        data={"username": "carol@spendwise.io", "password": PASSWORD},
    )
    headers = {"Authorization": f"Bearer {response.json()['access_token']}"}
    categories = (await client.get("/api/v1/categories", headers=headers)).json()

    assert {c["name"] for c in categories} == {c["name"] for c in DEFAULT_CATEGORIES}
    assert all(c["isDefault"] for c in categories)


async def test_signup_duplicate_email_is_rejected(client, auth_headers):
    response = await client.post(
        "/api/v1/auth/signup",
        json={"email": "alice@spendwise.io", "password": PASSWORD, "name": "Alice"},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "User with this email already exists"


async def test_signup_weak_password_is_rejected(client):
    response = await client.post(
        "/api/v1/auth/signup",
        json={"email": "dave@spendwise.io", "password": "alllowercase1", "name": "Dave"},
    )

    assert response.status_code == 400
    assert "uppercase" in response.json()["detail"]


async def test_signup_short_name_reports_field_error(client):
    response = await client.post(
        "/api/v1/auth/signup",
        json={"email": "erin@spendwise.io", "password": PASSWORD, "name": "E"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["detail"] == "Validation failed"
    assert [e["field"] for e in body["errors"]] == ["name"]


async def test_me_returns_profile(client, auth_headers):
    response = await client.get("/api/v1/users/me", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["email"] == "alice@spendwise.io"


async def test_token_is_accepted_from_cookie(client, auth_headers):
    token = auth_headers["Authorization"].split(" ", 1)[1]

    response = await client.get("/api/v1/users/me", headers={"Cookie": f"access_token={token}"})

    assert response.status_code == 200


async def test_protected_routes_require_authentication(client):
    for path in (
        "/api/v1/categories",
        "/api/v1/expenses",
        f"/api/v1/expenses/{uuid.uuid4()}",
        "/api/v1/analytics/monthly-trends",
        "/api/v1/analytics/category-breakdown",
    ):
        response = await client.get(path)
        assert response.status_code == 401, path

    response = await client.get("/api/v1/categories", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


async def test_categories_are_isolated_per_user(client, auth_headers, other_headers):
    created = await client.post(
        "/api/v1/categories",
        json={"name": "Pets", "color": "#123abc", "icon": "🐶"},
        headers=other_headers,
    )
    assert created.status_code == 201
    assert created.json()["isDefault"] is False

    alice = (await client.get("/api/v1/categories", headers=auth_headers)).json()
    bob = (await client.get("/api/v1/categories", headers=other_headers)).json()

    assert "Pets" not in {c["name"] for c in alice}
    assert "Pets" in {c["name"] for c in bob}
    # Each user sees only their own seeded defaults
    assert len(alice) == len(DEFAULT_CATEGORIES)
    assert len(bob) == len(DEFAULT_CATEGORIES) + 1


async def test_categories_order_defaults_first_then_name(client, auth_headers, db_session):
    db_session.add(Category(name="Zzz Shared", is_default=True, user_id=None))
    db_session.add(Category(name="Aaa Shared", is_default=True, user_id=None))
    await db_session.commit()
    await client.post("/api/v1/categories", json={"name": "Aardvarks"}, headers=auth_headers)

    categories = (await client.get("/api/v1/categories", headers=auth_headers)).json()
    names = [c["name"] for c in categories]

    defaults = [c["name"] for c in categories if c["isDefault"]]
    assert defaults == sorted(defaults)
    assert "Aaa Shared" in defaults and "Zzz Shared" in defaults
    assert names[-1] == "Aardvarks"


async def test_category_color_must_be_hex(client, auth_headers):
    response = await client.post(
        "/api/v1/categories",
        json={"name": "Bad", "color": "red"},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "color"


async def test_seeding_is_idempotent(client, auth_headers, db_session):
    from spendwise.crud.category import seed_default_categories_for_user

    me = (await client.get("/api/v1/users/me", headers=auth_headers)).json()
    created = await seed_default_categories_for_user(uuid.UUID(me["id"]), db_session)

    assert created == []
    result = await db_session.execute(select(Category).where(Category.user_id == uuid.UUID(me["id"])))
    assert len(result.scalars().all()) == len(DEFAULT_CATEGORIES)


async def test_login_with_wrong_password_is_rejected(client, auth_headers):
    response = await client.post(
        "/api/v1/auth/jwt/login",
        data={"username": "alice@spendwise.io", "password": "Wrong1234"},
    )

    assert response.status_code == 400
    assert response.json() == {"detail": "LOGIN_BAD_CREDENTIALS"}


async def test_health_endpoints(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"

    response = await client.get("/")
    assert response.status_code == 200
    assert "version" in response.json()
