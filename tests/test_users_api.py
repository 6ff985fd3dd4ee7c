"""User management routes."""

import pytest

from conftest import TEST_PASSWORD

NEW_USER = {
    "name": "Takahashi",
    "email": "Takahashi@Example.com",
    "password": "longenough1",
    "department": "Sales 2",
    "role": "SALES",
}


class TestListUsers:
    async def test_manager_lists_newest_first(self, client, auth_headers, manager, sales, other_sales):
        response = await client.get("/api/users", headers=auth_headers(manager))

        assert response.status_code == 200
        data = response.json()["data"]
        assert [u["id"] for u in data["users"]] == [other_sales.id, sales.id, manager.id]
        assert data["pagination"]["total"] == 3
        assert "passwordHash" not in data["users"][0]

    async def test_role_filter(self, client, auth_headers, manager, sales):
        response = await client.get("/api/users", params={"role": "MANAGER"}, headers=auth_headers(manager))
        assert [u["id"] for u in response.json()["data"]["users"]] == [manager.id]

    async def test_sales_is_forbidden(self, client, auth_headers, sales):
        response = await client.get("/api/users", headers=auth_headers(sales))

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"


class TestGetUser:
    async def test_self(self, client, auth_headers, sales):
        response = await client.get(f"/api/users/{sales.id}", headers=auth_headers(sales))

        assert response.status_code == 200
        assert response.json()["data"]["email"] == "sato@example.com"

    async def test_other_user_is_forbidden(self, client, auth_headers, sales, other_sales):
        response = await client.get(f"/api/users/{other_sales.id}", headers=auth_headers(sales))
        assert response.status_code == 403

    async def test_manager_reads_anyone(self, client, auth_headers, manager, sales):
        response = await client.get(f"/api/users/{sales.id}", headers=auth_headers(manager))
        assert response.status_code == 200

    async def test_missing(self, client, auth_headers, manager):
        response = await client.get("/api/users/999", headers=auth_headers(manager))
        assert response.status_code == 404

    async def test_non_integer_id(self, client, auth_headers, manager):
        response = await client.get("/api/users/abc", headers=auth_headers(manager))

        assert response.status_code == 400
        assert response.json()["error"]["details"][0]["field"] == "user_id"


class TestCreateUser:
    async def test_manager_creates_user_who_can_log_in(self, client, auth_headers, manager):
        response = await client.post("/api/users", json=NEW_USER, headers=auth_headers(manager))

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["email"] == "takahashi@example.com"
        assert data["role"] == "SALES"
        assert data["department"] == "Sales 2"

        login = await client.post(
            "/api/auth/login", json={"email": "takahashi@example.com", "password": "longenough1"}
        )
        assert login.status_code == 200

    async def test_duplicate_email(self, client, auth_headers, manager, sales):
        response = await client.post(
            "/api/users", json={**NEW_USER, "email": "SATO@example.com"}, headers=auth_headers(manager)
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "DUPLICATE_ENTRY"

    async def test_all_violations_reported(self, client, auth_headers, manager):
        response = await client.post(
            "/api/users",
            json={"name": "", "email": "nope", "password": "short", "role": "ADMIN"},
            headers=auth_headers(manager),
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert {d["field"] for d in error["details"]} == {"name", "email", "password", "role"}

    async def test_sales_cannot_create(self, client, auth_headers, sales):
        response = await client.post("/api/users", json=NEW_USER, headers=auth_headers(sales))
        assert response.status_code == 403


class TestUpdateUser:
    async def test_manager_updates(self, client, auth_headers, manager, sales):
        response = await client.put(
            f"/api/users/{sales.id}",
            json={"department": "Key Accounts", "role": "MANAGER"},
            headers=auth_headers(manager),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["department"] == "Key Accounts"
        assert data["role"] == "MANAGER"
        assert data["name"] == "Sato"

    async def test_email_reuse_is_duplicate(self, client, auth_headers, manager, sales, other_sales):
        response = await client.put(
            f"/api/users/{sales.id}", json={"email": "suzuki@example.com"}, headers=auth_headers(manager)
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "DUPLICATE_ENTRY"

    async def test_keeping_own_email_is_fine(self, client, auth_headers, manager, sales):
        response = await client.put(
            f"/api/users/{sales.id}", json={"email": "sato@example.com"}, headers=auth_headers(manager)
        )
        assert response.status_code == 200

    @pytest.mark.parametrize("field", ["name", "email", "role"])
    async def test_null_required_field_is_rejected(self, client, auth_headers, manager, sales, field):
        response = await client.put(
            f"/api/users/{sales.id}", json={field: None}, headers=auth_headers(manager)
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"] == [{"field": field, "message": "Field cannot be null"}]

    async def test_null_department_clears_it(self, client, auth_headers, manager, sales):
        response = await client.put(
            f"/api/users/{sales.id}", json={"department": None}, headers=auth_headers(manager)
        )

        assert response.status_code == 200
        assert response.json()["data"]["department"] is None

    async def test_sales_cannot_update_even_self(self, client, auth_headers, sales):
        response = await client.put(
            f"/api/users/{sales.id}", json={"role": "MANAGER"}, headers=auth_headers(sales)
        )
        assert response.status_code == 403


class TestDeleteUser:
    async def test_manager_deletes_user_and_their_reports(
        self, client, auth_headers, manager, sales, customer, create_report
    ):
        report = await create_report(sales, customer.id)

        response = await client.delete(f"/api/users/{sales.id}", headers=auth_headers(manager))

        assert response.status_code == 200
        assert (await client.get(f"/api/users/{sales.id}", headers=auth_headers(manager))).status_code == 404
        assert (await client.get(f"/api/reports/{report['id']}", headers=auth_headers(manager))).status_code == 404

    async def test_cannot_delete_self(self, client, auth_headers, manager):
        response = await client.delete(f"/api/users/{manager.id}", headers=auth_headers(manager))

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    async def test_sales_cannot_delete(self, client, auth_headers, sales, other_sales):
        response = await client.delete(f"/api/users/{other_sales.id}", headers=auth_headers(sales))
        assert response.status_code == 403


class TestChangePassword:
    async def test_self_changes_password(self, client, auth_headers, sales):
        response = await client.put(
            f"/api/users/{sales.id}/password",
            json={"current_password": TEST_PASSWORD, "new_password": "brand-new-pass"},
            headers=auth_headers(sales),
        )

        assert response.status_code == 200

        old = await client.post("/api/auth/login", json={"email": sales.email, "password": TEST_PASSWORD})
        new = await client.post("/api/auth/login", json={"email": sales.email, "password": "brand-new-pass"})
        assert old.status_code == 401
        assert new.status_code == 200

    async def test_wrong_current_password(self, client, auth_headers, sales):
        response = await client.put(
            f"/api/users/{sales.id}/password",
            json={"current_password": "not-it", "new_password": "brand-new-pass"},
            headers=auth_headers(sales),
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    async def test_short_new_password(self, client, auth_headers, sales):
        response = await client.put(
            f"/api/users/{sales.id}/password",
            json={"current_password": TEST_PASSWORD, "new_password": "short"},
            headers=auth_headers(sales),
        )

        assert response.status_code == 400
        assert [d["field"] for d in response.json()["error"]["details"]] == ["new_password"]

    async def test_other_sales_is_forbidden(self, client, auth_headers, sales, other_sales):
        response = await client.put(
            f"/api/users/{other_sales.id}/password",
            json={"current_password": TEST_PASSWORD, "new_password": "brand-new-pass"},
            headers=auth_headers(sales),
        )
        assert response.status_code == 403

    async def test_manager_changes_someone_elses(self, client, auth_headers, manager, sales):
        response = await client.put(
            f"/api/users/{sales.id}/password",
            json={"current_password": TEST_PASSWORD, "new_password": "brand-new-pass"},
            headers=auth_headers(manager),
        )
        assert response.status_code == 200
