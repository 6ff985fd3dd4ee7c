"""Report comment routes."""

import pytest_asyncio


@pytest_asyncio.fixture
async def report(sales, customer, create_report):
    return await create_report(sales, customer.id)


async def post_comment(client, headers, report_id, content="Please follow up", target_type="PROBLEM"):
    return await client.post(
        f"/api/reports/{report_id}/comments",
        json={"target_type": target_type, "content": content},
        headers=headers,
    )


class TestCreateComment:
    async def test_manager_comments(self, client, auth_headers, manager, report):
        response = await post_comment(client, auth_headers(manager), report["id"])

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["targetType"] == "PROBLEM"
        assert data["content"] == "Please follow up"
        assert data["user"] == {"id": manager.id, "name": "Manager"}
        assert "createdAt" in data

    async def test_sales_may_comment_too(self, client, auth_headers, other_sales, report):
        response = await post_comment(client, auth_headers(other_sales), report["id"], target_type="PLAN")
        assert response.status_code == 201

    async def test_invalid_target_and_empty_content(self, client, auth_headers, manager, report):
        response = await post_comment(client, auth_headers(manager), report["id"], content="  ", target_type="OTHER")

        assert response.status_code == 400
        assert {d["field"] for d in response.json()["error"]["details"]} == {"target_type", "content"}

    async def test_unknown_report(self, client, auth_headers, manager):
        response = await post_comment(client, auth_headers(manager), 999)
        assert response.status_code == 404

    async def test_deleted_author_is_unauthorized(self, client, auth_headers, manager, other_sales, report):
        headers = auth_headers(other_sales)
        deleted = await client.delete(f"/api/users/{other_sales.id}", headers=auth_headers(manager))
        assert deleted.status_code == 200

        response = await post_comment(client, headers, report["id"])

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"
        listed = await client.get(f"/api/reports/{report['id']}/comments", headers=auth_headers(manager))
        assert listed.json()["data"]["comments"] == []


class TestListComments:
    async def test_oldest_first_and_shown_on_report(self, client, auth_headers, manager, sales, report):
        await post_comment(client, auth_headers(manager), report["id"], content="first")
        await post_comment(client, auth_headers(sales), report["id"], content="second", target_type="PLAN")

        response = await client.get(f"/api/reports/{report['id']}/comments", headers=auth_headers(sales))

        assert response.status_code == 200
        assert [c["content"] for c in response.json()["data"]["comments"]] == ["first", "second"]

        detail = await client.get(f"/api/reports/{report['id']}", headers=auth_headers(sales))
        assert [c["content"] for c in detail.json()["data"]["comments"]] == ["first", "second"]

    async def test_unknown_report(self, client, auth_headers, sales):
        response = await client.get("/api/reports/999/comments", headers=auth_headers(sales))
        assert response.status_code == 404


class TestDeleteComment:
    async def test_author_deletes(self, client, auth_headers, manager, report):
        comment = (await post_comment(client, auth_headers(manager), report["id"])).json()["data"]

        response = await client.delete(
            f"/api/reports/{report['id']}/comments/{comment['id']}", headers=auth_headers(manager)
        )

        assert response.status_code == 200
        listing = await client.get(f"/api/reports/{report['id']}/comments", headers=auth_headers(manager))
        assert listing.json()["data"]["comments"] == []

    async def test_non_author_is_forbidden(self, client, auth_headers, sales, other_sales, report):
        comment = (await post_comment(client, auth_headers(other_sales), report["id"])).json()["data"]

        # Owning the report does not grant control over other people's comments
        response = await client.delete(
            f"/api/reports/{report['id']}/comments/{comment['id']}", headers=auth_headers(sales)
        )

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "You do not have permission to modify this comment"

    async def test_manager_deletes_any_comment(self, client, auth_headers, manager, other_sales, report):
        comment = (await post_comment(client, auth_headers(other_sales), report["id"])).json()["data"]

        response = await client.delete(
            f"/api/reports/{report['id']}/comments/{comment['id']}", headers=auth_headers(manager)
        )
        assert response.status_code == 200

    async def test_comment_of_another_report_is_not_found(
        self, client, auth_headers, manager, other_sales, customer, create_report, report
    ):
        other_report = await create_report(other_sales, customer.id)
        comment = (await post_comment(client, auth_headers(manager), other_report["id"])).json()["data"]

        response = await client.delete(
            f"/api/reports/{report['id']}/comments/{comment['id']}", headers=auth_headers(manager)
        )

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Comment not found"
