import uuid

import httpx
import pytest
from sqlalchemy import func, select

from conftest import first_category_id
from spendwise.main import app
from spendwise.models.expense import Expense


def expense_payload(category_id, **overrides):
    payload = {
        "amount": 42.5,
        "categoryId": category_id,
        "expenseDate": "2024-03-05T10:00:00Z",
        "description": "Groceries",
        "location": "Market",
        "tags": ["food"],
    }
    payload.update(overrides)
    return payload


async def create(client, headers, **overrides):
    category_id = overrides.pop("category_id", None) or await first_category_id(client, headers)
    response = await client.post("/api/v1/expenses", json=expense_payload(category_id, **overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def count_expenses(db_session):
    return (await db_session.execute(select(func.count()).select_from(Expense))).scalar_one()


async def test_create_expense_returns_record_with_category_and_receipts(client, auth_headers):
    category_id = await first_category_id(client, auth_headers)

    response = await client.post("/api/v1/expenses", json=expense_payload(category_id), headers=auth_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["amount"] == 42.5
    assert body["categoryId"] == category_id
    assert body["category"]["id"] == category_id
    assert body["receipts"] == []
    assert body["tags"] == ["food"]
    # Offsets are folded into naive UTC
    assert body["expenseDate"].startswith("2024-03-05T10:00:00")


async def test_create_expense_rejects_non_positive_amount(client, auth_headers, db_session):
    category_id = await first_category_id(client, auth_headers)

    for amount in (0, -5):
        response = await client.post(
            "/api/v1/expenses",
            json=expense_payload(category_id, amount=amount),
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert [e["field"] for e in response.json()["errors"]] == ["amount"]

    assert await count_expenses(db_session) == 0


async def test_create_expense_reports_every_invalid_field(client, auth_headers):
    response = await client.post(
        "/api/v1/expenses",
        json={
            "amount": 1000000,
            "categoryId": "not-a-uuid",
            "expenseDate": "yesterday",
            "description": "x" * 501,
            "location": "y" * 201,
            "tags": [f"t{i}" for i in range(11)],
        },
        headers=auth_headers,
    )

    assert response.status_code == 400
    fields = {e["field"] for e in response.json()["errors"]}
    assert fields == {"amount", "categoryId", "expenseDate", "description", "location", "tags"}


async def test_create_expense_accepts_upper_bound_amount(client, auth_headers):
    body = await create(client, auth_headers, amount=999999.99)

    assert body["amount"] == 999999.99


async def test_list_expenses_newest_first(client, auth_headers):
    await create(client, auth_headers, expenseDate="2024-01-01T00:00:00Z")
    await create(client, auth_headers, expenseDate="2024-03-01T00:00:00Z")
    await create(client, auth_headers, expenseDate="2024-02-01T00:00:00Z")

    response = await client.get("/api/v1/expenses", headers=auth_headers)

    dates = [e["expenseDate"][:10] for e in response.json()]
    assert dates == ["2024-03-01", "2024-02-01", "2024-01-01"]


async def test_list_expenses_filters(client, auth_headers):
    food = await first_category_id(client, auth_headers, "Food & Dining")
    travel = await first_category_id(client, auth_headers, "Transportation")
    await create(client, auth_headers, category_id=food, amount=10, expenseDate="2024-01-10T12:00:00Z", tags=["lunch"])
    await create(client, auth_headers, category_id=travel, amount=55, expenseDate="2024-02-10T12:00:00Z", tags=["taxi", "work"])
    await create(client, auth_headers, category_id=food, amount=120, expenseDate="2024-03-10T12:00:00Z", tags=[])

    async def amounts(**params):
        response = await client.get("/api/v1/expenses", params=params, headers=auth_headers)
        assert response.status_code == 200
        return sorted(e["amount"] for e in response.json())

    assert await amounts(startDate="2024-02-01T00:00:00", endDate="2024-03-31T23:59:59") == [55, 120]
    assert await amounts(categoryId=food) == [10, 120]
    assert await amounts(minAmount="50", maxAmount="100") == [55]
    assert await amounts(tags=["work", "lunch"]) == [10, 55]
    # A range with only one bound is ignored
    assert await amounts(startDate="2024-03-01T00:00:00") == [10, 55, 120]
    assert await amounts(minAmount="100") == [10, 55, 120]


async def test_list_expenses_only_returns_own_records(client, auth_headers, other_headers):
    await create(client, auth_headers)

    response = await client.get("/api/v1/expenses", headers=other_headers)

    assert response.json() == []


async def test_get_expense_of_another_user_is_not_found(client, auth_headers, other_headers):
    expense = await create(client, auth_headers)

    own = await client.get(f"/api/v1/expenses/{expense['id']}", headers=auth_headers)
    foreign = await client.get(f"/api/v1/expenses/{expense['id']}", headers=other_headers)
    missing = await client.get(f"/api/v1/expenses/{uuid.uuid4()}", headers=auth_headers)

    assert own.status_code == 200
    assert foreign.status_code == 404
    assert missing.status_code == 404
    assert foreign.json() == missing.json()


async def test_update_expense_applies_only_given_fields(client, auth_headers):
    expense = await create(client, auth_headers)

    response = await client.put(
        f"/api/v1/expenses/{expense['id']}",
        json={"amount": 12.34, "tags": ["a", "b"]},
        headers=auth_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["amount"] == 12.34
    assert body["tags"] == ["a", "b"]
    assert body["description"] == "Groceries"
    assert body["location"] == "Market"
    assert body["categoryId"] == expense["categoryId"]


async def test_update_expense_can_clear_optional_text(client, auth_headers):
    expense = await create(client, auth_headers)

    response = await client.put(
        f"/api/v1/expenses/{expense['id']}",
        json={"description": None},
        headers=auth_headers,
    )

    assert response.json()["description"] is None


async def test_update_expense_revalidates_amount(client, auth_headers):
    expense = await create(client, auth_headers)

    negative = await client.put(f"/api/v1/expenses/{expense['id']}", json={"amount": -1}, headers=auth_headers)
    null = await client.put(f"/api/v1/expenses/{expense['id']}", json={"amount": None}, headers=auth_headers)

    assert negative.status_code == 400
    assert null.status_code == 400
    unchanged = await client.get(f"/api/v1/expenses/{expense['id']}", headers=auth_headers)
    assert unchanged.json()["amount"] == 42.5


async def test_update_expense_of_another_user_is_not_found(client, auth_headers, other_headers):
    expense = await create(client, auth_headers)

    response = await client.put(
        f"/api/v1/expenses/{expense['id']}",
        json={"amount": 1},
        headers=other_headers,
    )

    assert response.status_code == 404
    unchanged = await client.get(f"/api/v1/expenses/{expense['id']}", headers=auth_headers)
    assert unchanged.json()["amount"] == 42.5


async def test_delete_expense(client, auth_headers, db_session):
    expense = await create(client, auth_headers)

    response = await client.delete(f"/api/v1/expenses/{expense['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"message": "Expense deleted successfully"}
    assert (await client.get(f"/api/v1/expenses/{expense['id']}", headers=auth_headers)).status_code == 404
    assert await count_expenses(db_session) == 0


async def test_delete_expense_of_another_user_is_not_found(client, auth_headers, other_headers, db_session):
    expense = await create(client, auth_headers)

    response = await client.delete(f"/api/v1/expenses/{expense['id']}", headers=other_headers)

    assert response.status_code == 404
    assert await count_expenses(db_session) == 1


async def test_malformed_json_without_token_is_unauthenticated(client):
    response = await client.post(
        "/api/v1/expenses",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 401
    assert response.json() == {"detail": "Not authenticated"}


async def test_malformed_json_with_token_reports_body(client, auth_headers):
    response = await client.post(
        "/api/v1/expenses",
        content=b"{not json",
        headers={"Content-Type": "application/json", **auth_headers},
    )

    assert response.status_code == 400
    assert [e["field"] for e in response.json()["errors"]] == ["body"]


@pytest.fixture
async def lenient_client(storage):
    # Unhandled errors come back as the 500 response instead of being re-raised
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def test_create_with_unknown_category_is_generic_failure(lenient_client, auth_headers, db_session):
    response = await lenient_client.post(
        "/api/v1/expenses",
        json=expense_payload(str(uuid.uuid4())),
        headers=auth_headers,
    )

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    assert await count_expenses(db_session) == 0

    # The failed request leaves nothing behind for the next one
    created = await create(lenient_client, auth_headers)
    assert created["amount"] == 42.5


async def test_update_with_unknown_category_is_generic_failure(lenient_client, auth_headers):
    created = await create(lenient_client, auth_headers)

    response = await lenient_client.put(
        f"/api/v1/expenses/{created['id']}",
        json={"categoryId": str(uuid.uuid4()), "amount": 99},
        headers=auth_headers,
    )

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}

    current = (await lenient_client.get(f"/api/v1/expenses/{created['id']}", headers=auth_headers)).json()
    assert current["categoryId"] == created["categoryId"]
    assert current["amount"] == 42.5
