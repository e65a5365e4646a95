"""
Restaurant CRM Backend - Customer API Tests
============================================

What:  End-to-end tests through the ASGI app against a throwaway SQLite
       database, authenticated as the provisioned admin account.

What we test:
    ✅ Full CRUD, visit recording, filtering and sorting
    ✅ 404 / 409 / 400 bodies for the documented error scenarios
    ✅ Framework errors (unknown route, bad path parameter) share the body shape
    ✅ Unexpected failures become a 500 without leaking their message
"""

import pytest
from fastapi import FastAPI

from restaurant_crm.exceptions import InvalidStateError
from restaurant_crm.main import create_app

ERROR_KEYS = {"timestamp", "status", "error", "message", "path", "exceptionType"}


async def create(client, payload, **overrides):
    response = await client.post("/api/customers", json={**payload, **overrides})
    assert response.status_code == 201, response.text
    return response.json()


class TestCustomerCrud:
    """Happy paths for every customer operation."""

    @pytest.mark.asyncio
    async def test_create_and_fetch(self, client, customer_payload):
        response = await client.post("/api/customers", json=customer_payload)

        assert response.status_code == 201
        body = response.json()
        assert body["id"] > 0
        assert body["visitCount"] == 0
        assert body["michelinStatus"] == "SUSPICIOUS"
        assert response.headers["Location"] == f"/api/customers/{body['id']}"

        fetched = await client.get(f"/api/customers/{body['id']}")
        assert fetched.status_code == 200
        assert fetched.json() == body

    @pytest.mark.asyncio
    async def test_defaults_apply_when_optional_fields_omitted(self, client):
        body = await create(
            client, {"name": "Emile", "phone": "555-0110", "email": "emile@example.com"}
        )
        assert body["michelinStatus"] == "REGULAR"
        assert body["visitCount"] == 0
        assert body["allergies"] is None
        assert body["notes"] is None

    @pytest.mark.asyncio
    async def test_snake_case_body_is_accepted(self, client):
        body = await create(
            client,
            {
                "name": "Horst",
                "phone": "555-0111",
                "email": "horst@example.com",
                "michelin_status": "INSPECTOR",
                "visit_count": 4,
            },
        )
        assert body["michelinStatus"] == "INSPECTOR"
        assert body["visitCount"] == 4

    @pytest.mark.asyncio
    async def test_update_replaces_fields(self, client, customer_payload):
        created = await create(client, customer_payload)
        update = {**customer_payload, "notes": None, "michelinStatus": "INSPECTOR"}

        response = await client.put(f"/api/customers/{created['id']}", json=update)

        assert response.status_code == 200
        assert response.json()["michelinStatus"] == "INSPECTOR"
        assert response.json()["notes"] is None

    @pytest.mark.asyncio
    async def test_record_visit_increments_counter(self, client, customer_payload):
        created = await create(client, customer_payload, visitCount=2)

        await client.post(f"/api/customers/{created['id']}/visits")
        response = await client.post(f"/api/customers/{created['id']}/visits")

        assert response.status_code == 200
        assert response.json()["visitCount"] == 4

    @pytest.mark.asyncio
    async def test_delete_then_not_found(self, client, customer_payload):
        created = await create(client, customer_payload)

        response = await client.delete(f"/api/customers/{created['id']}")
        assert response.status_code == 204
        assert response.content == b""

        again = await client.get(f"/api/customers/{created['id']}")
        assert again.status_code == 404


class TestCustomerListing:

    @pytest.fixture
    def guests(self):
        return [
            {"name": "Colette", "phone": "555-0201", "email": "colette@example.com", "visitCount": 9},
            {"name": "Anton", "phone": "555-0202", "email": "anton@example.com", "visitCount": 1,
             "michelinStatus": "INSPECTOR"},
            {"name": "Skinner", "phone": "555-0203", "email": "skinner@example.com", "visitCount": 5,
             "michelinStatus": "SUSPICIOUS"},
        ]

    @pytest.mark.asyncio
    async def test_list_returns_page_and_total(self, client, guests):
        for guest in guests:
            await create(client, guest)

        response = await client.get("/api/customers", params={"limit": 2})

        assert response.status_code == 200
        body = response.json()
        assert [c["name"] for c in body["customers"]] == ["Colette", "Anton"]
        assert body["totalCount"] == 3
        assert (body["limit"], body["offset"]) == (2, 0)
        assert response.headers["X-Total-Count"] == "3"

    @pytest.mark.asyncio
    async def test_sort_by_visits_descending(self, client, guests):
        for guest in guests:
            await create(client, guest)

        response = await client.get("/api/customers", params={"sort": "-visits"})

        assert [c["visitCount"] for c in response.json()["customers"]] == [9, 5, 1]

    @pytest.mark.asyncio
    async def test_filter_by_michelin_status(self, client, guests):
        for guest in guests:
            await create(client, guest)

        response = await client.get("/api/customers", params={"michelinStatus": "INSPECTOR"})

        body = response.json()
        assert [c["name"] for c in body["customers"]] == ["Anton"]
        assert body["totalCount"] == 1

    @pytest.mark.asyncio
    async def test_unsupported_sort_is_bad_request(self, client):
        response = await client.get("/api/customers", params={"sort": "email"})

        assert response.status_code == 400
        body = response.json()
        assert body["exceptionType"] == "InvalidArgumentError"
        assert body["message"].startswith("Unsupported sort 'email'")
        assert "validationErrors" not in body


class TestErrorResponses:
    """The documented error bodies, end to end."""

    @pytest.mark.asyncio
    async def test_unknown_customer_is_catalog_not_found(self, client):
        response = await client.get("/api/customers/999")

        assert response.status_code == 404
        body = response.json()
        assert set(body) == ERROR_KEYS
        assert body["status"] == 404
        assert body["error"] == "Not Found"
        assert body["message"] == "Customer not found"
        assert body["path"] == "/api/customers/999"
        assert body["exceptionType"] == "ResourceNotFoundError"

    @pytest.mark.asyncio
    async def test_duplicate_email_is_conflict(self, client, customer_payload):
        await create(client, customer_payload)

        response = await client.post(
            "/api/customers", json={**customer_payload, "phone": "555-0999"}
        )

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "Conflict"
        assert body["message"] == "Email already exists"
        assert body["exceptionType"] == "IntegrityError"

    @pytest.mark.asyncio
    async def test_duplicate_phone_is_conflict(self, client, customer_payload):
        await create(client, customer_payload)

        response = await client.post(
            "/api/customers", json={**customer_payload, "email": "someone.else@example.com"}
        )

        assert response.status_code == 409
        assert response.json()["message"] == "Phone number already exists"

    @pytest.mark.asyncio
    async def test_duplicate_on_update_is_conflict(self, client, customer_payload):
        await create(client, customer_payload)
        other = await create(
            client, customer_payload, phone="555-0300", email="other@example.com"
        )

        response = await client.put(
            f"/api/customers/{other['id']}",
            json={**customer_payload, "phone": "555-0300"},
        )

        assert response.status_code == 409
        assert response.json()["message"] == "Email already exists"

    @pytest.mark.asyncio
    async def test_failed_create_leaves_nothing_behind(self, client, customer_payload):
        await create(client, customer_payload)
        await client.post("/api/customers", json={**customer_payload, "phone": "555-0999"})

        response = await client.get("/api/customers")
        assert response.json()["totalCount"] == 1

    @pytest.mark.asyncio
    async def test_blank_name_and_long_notes_list_both_fields(self, client, customer_payload):
        response = await client.post(
            "/api/customers",
            json={**customer_payload, "name": "   ", "notes": "x" * 1001},
        )

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Bad Request"
        assert body["message"] == "Validation failed"
        assert set(body["validationErrors"]) == {"name", "notes"}
        assert body["validationErrors"]["name"] == "Name is required"

    @pytest.mark.asyncio
    async def test_invalid_email_and_negative_visits(self, client, customer_payload):
        response = await client.post(
            "/api/customers",
            json={**customer_payload, "email": "not-an-email", "visitCount": -1},
        )

        assert response.status_code == 400
        assert set(response.json()["validationErrors"]) == {"email", "visitCount"}

    @pytest.mark.asyncio
    async def test_missing_body_uses_rule_identifier(self, client):
        response = await client.post("/api/customers")

        assert response.status_code == 400
        assert response.json()["validationErrors"] == {"missing": "Field required"}

    @pytest.mark.asyncio
    async def test_non_integer_id_is_validation_error(self, client):
        response = await client.get("/api/customers/abc")

        assert response.status_code == 400
        assert set(response.json()["validationErrors"]) == {"customer_id"}

    @pytest.mark.asyncio
    async def test_update_unknown_customer(self, client, customer_payload):
        response = await client.put("/api/customers/4242", json=customer_payload)

        assert response.status_code == 404
        assert response.json()["message"] == "Customer not found"

    @pytest.mark.asyncio
    async def test_unknown_route_keeps_error_shape(self, client):
        response = await client.get("/api/not-a-thing")

        assert response.status_code == 404
        body = response.json()
        assert set(body) == ERROR_KEYS
        assert body["exceptionType"] == "HTTPException"
        assert body["message"] == "Not Found"

    @pytest.mark.asyncio
    async def test_wrong_method_is_405(self, client):
        response = await client.patch("/api/customers/1")

        assert response.status_code == 405
        assert response.json()["error"] == "Method Not Allowed"
        assert "allow" in response.headers


class TestUnexpectedFailures:
    """Routes added to a fresh app to raise failures the API itself never does."""

    @pytest.fixture
    def failing_app(self, database) -> FastAPI:
        app = create_app()

        async def boom():
            raise RuntimeError("db password is hunter2")

        async def locked():
            raise InvalidStateError("Customer record is locked for export")

        app.add_api_route("/api/boom", boom)
        app.add_api_route("/api/locked", locked)
        return app

    @pytest.mark.asyncio
    async def test_unclassified_failure_is_generic_500(self, failing_app, client_for, admin_auth):
        async with client_for(failing_app, admin_auth) as c:
            response = await c.get("/api/boom")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Internal Server Error"
        assert body["message"] == "An internal server error occurred"
        assert body["exceptionType"] == "RuntimeError"
        assert "hunter2" not in response.text

    @pytest.mark.asyncio
    async def test_500_carries_request_id(self, failing_app, client_for, admin_auth):
        async with client_for(failing_app, admin_auth) as c:
            response = await c.get("/api/boom", headers={"X-Request-ID": "trace-500"})

        assert response.status_code == 500
        assert response.headers["X-Request-ID"] == "trace-500"

    @pytest.mark.asyncio
    async def test_handled_error_has_single_request_id(self, client):
        response = await client.get("/api/customers/999", headers={"X-Request-ID": "trace-404"})

        assert response.status_code == 404
        assert response.headers.get_list("X-Request-ID") == ["trace-404"]

    @pytest.mark.asyncio
    async def test_invalid_state_is_conflict(self, failing_app, client_for, admin_auth):
        async with client_for(failing_app, admin_auth) as c:
            response = await c.get("/api/locked")

        assert response.status_code == 409
        assert response.json()["message"] == "Customer record is locked for export"
