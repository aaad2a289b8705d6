"""
FreePaste — HTTP API Tests
============================

What:  End-to-end tests through the FastAPI app, middleware and exception
       handlers, backed by a real SQLite file.
How:   httpx AsyncClient over ASGITransport (see conftest.test_client).

What we test:
    ✅ Create → view JSON → raw text, links built from the request host
    ✅ owner_token cookie attributes
    ✅ is_owner token precedence and never-failing behavior
    ✅ Edit: 400 / 403 / 404 / success
    ✅ Profile listing and missing-token 400
    ✅ Page routes reject malformed ids
    ✅ Storage failures surface as generic 500s
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from freepaste.exceptions import DuplicatePasteIdError, StorageError
from freepaste.main import create_app


async def create(client, content="hello", title=None):
    """POST /api/new and return the JSON body."""
    payload = {"content": content}
    if title is not None:
        payload["title"] = title
    response = await client.post("/api/new", json=payload)
    assert response.status_code == 200
    return response.json()


class TestCreateAndRead:
    """Tests for POST /api/new, GET /api/get/{id} and GET /raw/{id}."""

    @pytest.mark.asyncio
    async def test_create_then_raw(self, test_client):
        """A new paste is served back verbatim as plain text, with links built from the request host."""
        body = await create(test_client, "hello")

        assert len(body["id"]) == 10
        assert len(body["token"]) == 64
        assert body["url"] == f"http://test/{body['id']}"
        assert body["raw"] == f"http://test/raw/{body['id']}"

        raw = await test_client.get(f"/raw/{body['id']}")
        assert raw.status_code == 200
        assert raw.text == "hello"
        assert raw.headers["content-type"].startswith("text/plain")

    @pytest.mark.asyncio
    async def test_get_json_hides_token(self, test_client):
        """The JSON view never includes the owner token."""
        body = await create(test_client, "some text", title="My paste")

        response = await test_client.get(f"/api/get/{body['id']}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == body["id"]
        assert data["title"] == "My paste"
        assert data["content"] == "some text"
        assert "created_at" in data
        assert "owner_token" not in data and "token" not in data

    @pytest.mark.asyncio
    async def test_missing_title_defaults(self, test_client):
        """A paste created without a title is 'Untitled'."""
        body = await create(test_client, "x")
        data = (await test_client.get(f"/api/get/{body['id']}")).json()
        assert data["title"] == "Untitled"

    @pytest.mark.asyncio
    async def test_sets_owner_cookie(self, test_client):
        """Creation sets a script-readable, lax, 10-year owner_token cookie."""
        response = await test_client.post("/api/new", json={"content": "hello"})

        cookie = response.headers["set-cookie"]
        assert f"owner_token={response.json()['token']}" in cookie
        assert "Path=/" in cookie
        assert "samesite=lax" in cookie.lower()
        assert "Max-Age=315360000" in cookie
        assert "httponly" not in cookie.lower()
        assert "secure" not in cookie.lower()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{"content": ""}, {"content": "   \n"}, {"title": "t"}, None])
    async def test_empty_content_rejected(self, test_client, payload):
        """Missing or blank content should return 400."""
        response = await test_client.post("/api/new", json=payload)
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_oversized_content_rejected(self, test_client):
        """One byte over 5 MiB should return 400."""
        response = await test_client.post("/api/new", json={"content": "a" * (5_242_880 + 1)})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_malformed_json_rejected(self, test_client):
        """A body that is not JSON should return 400, not 422."""
        response = await test_client.post(
            "/api/new",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_paste_404(self, test_client):
        """Unknown ids should return 404 in the standard error shape."""
        assert (await test_client.get("/api/get/missing000")).status_code == 404
        response = await test_client.get("/raw/missing000")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"


class TestIsOwner:
    """Tests for POST /api/is_owner/{id}, which never fails."""

    @pytest.mark.asyncio
    async def test_body_token(self, test_client):
        """A token in the body is honored without a cookie."""
        body = await create(test_client)
        test_client.cookies.clear()

        response = await test_client.post(
            f"/api/is_owner/{body['id']}", json={"token": body["token"]}
        )

        assert response.status_code == 200
        assert response.json() == {"owner": True}

    @pytest.mark.asyncio
    async def test_cookie_token(self, test_client):
        """The owner_token cookie set at creation is honored."""
        body = await create(test_client)
        # Cookie from /api/new is still in the client jar
        response = await test_client.post(f"/api/is_owner/{body['id']}")
        assert response.json() == {"owner": True}

    @pytest.mark.asyncio
    async def test_header_token(self, test_client):
        """The x-owner-token header is honored."""
        body = await create(test_client)
        test_client.cookies.clear()

        response = await test_client.post(
            f"/api/is_owner/{body['id']}", headers={"x-owner-token": body["token"]}
        )

        assert response.json() == {"owner": True}

    @pytest.mark.asyncio
    async def test_body_takes_precedence_over_cookie(self, test_client):
        """A body token wins over the cookie, even when wrong."""
        body = await create(test_client)

        response = await test_client.post(
            f"/api/is_owner/{body['id']}", json={"token": "b" * 64}
        )

        assert response.json() == {"owner": False}

    @pytest.mark.asyncio
    async def test_no_token_unknown_paste_or_garbage_body(self, test_client):
        """Missing token, unknown paste and non-JSON bodies all answer false."""
        body = await create(test_client)
        test_client.cookies.clear()

        assert (await test_client.post(f"/api/is_owner/{body['id']}")).json() == {"owner": False}
        assert (await test_client.post("/api/is_owner/missing000", json={"token": "x"})).json() == {
            "owner": False
        }
        garbage = await test_client.post(
            f"/api/is_owner/{body['id']}",
            content=b"not json at all",
            headers={"content-type": "application/json"},
        )
        assert garbage.status_code == 200
        assert garbage.json() == {"owner": False}

    @pytest.mark.asyncio
    async def test_deeply_nested_body(self, test_client):
        """JSON too deeply nested to decode answers false, not 500."""
        body = await create(test_client)
        test_client.cookies.clear()

        response = await test_client.post(
            f"/api/is_owner/{body['id']}",
            content=b"[" * 100_000,
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 200
        assert response.json() == {"owner": False}


class TestEdit:
    """Tests for POST /api/edit/{id}."""

    @pytest.mark.asyncio
    async def test_owner_edit(self, test_client):
        """The owner can replace title and content."""
        body = await create(test_client, "before", title="old")
        test_client.cookies.clear()

        response = await test_client.post(
            f"/api/edit/{body['id']}",
            json={"title": "new", "content": "after", "token": body["token"]},
        )

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        raw = await test_client.get(f"/raw/{body['id']}")
        assert raw.text == "after"
        data = (await test_client.get(f"/api/get/{body['id']}")).json()
        assert data["title"] == "new"

    @pytest.mark.asyncio
    async def test_edit_with_cookie(self, test_client):
        """The cookie alone authorizes an edit."""
        body = await create(test_client, "before")
        response = await test_client.post(f"/api/edit/{body['id']}", json={"content": "after"})
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_missing_token_403(self, test_client):
        """No token should return 403 'Token required'."""
        body = await create(test_client)
        test_client.cookies.clear()

        response = await test_client.post(f"/api/edit/{body['id']}", json={"content": "x"})

        assert response.status_code == 403
        assert response.json()["message"] == "Token required"

    @pytest.mark.asyncio
    async def test_wrong_token_403(self, test_client):
        """A wrong token should return 403 and leave the paste untouched."""
        body = await create(test_client, "original")
        test_client.cookies.clear()

        response = await test_client.post(
            f"/api/edit/{body['id']}", json={"content": "hijack", "token": "b" * 64}
        )

        assert response.status_code == 403
        assert (await test_client.get(f"/raw/{body['id']}")).text == "original"

    @pytest.mark.asyncio
    async def test_unknown_paste_404(self, test_client):
        """Editing an unknown id should return 404."""
        response = await test_client.post(
            "/api/edit/missing000", json={"content": "x", "token": "a" * 64}
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_empty_content_400(self, test_client):
        """Blank content should return 400 even for the owner."""
        body = await create(test_client)
        response = await test_client.post(
            f"/api/edit/{body['id']}", json={"content": "", "token": body["token"]}
        )
        assert response.status_code == 400


class TestProfile:
    """Tests for POST /api/profile."""

    @pytest.mark.asyncio
    async def test_lists_own_pastes_newest_first(self, test_client):
        """Only the token's own pastes are listed, as id/title/created_at."""
        first = await create(test_client, "one", title="first")
        test_client.cookies.clear()
        await create(test_client, "other owner")
        test_client.cookies.clear()

        response = await test_client.post("/api/profile", json={"token": first["token"]})

        assert response.status_code == 200
        results = response.json()["results"]
        assert [r["id"] for r in results] == [first["id"]]
        assert set(results[0]) == {"id", "title", "created_at"}

    @pytest.mark.asyncio
    async def test_cookie_fallback(self, test_client):
        """The cookie is used when the body has no token."""
        body = await create(test_client)
        response = await test_client.post("/api/profile")
        assert [r["id"] for r in response.json()["results"]] == [body["id"]]

    @pytest.mark.asyncio
    async def test_missing_token_400(self, test_client):
        """No token at all should return 400 'Token required'."""
        test_client.cookies.clear()
        response = await test_client.post("/api/profile", json={})
        assert response.status_code == 400
        assert response.json()["message"] == "Token required"

    @pytest.mark.asyncio
    async def test_unknown_token_empty(self, test_client):
        """A token that created nothing lists an empty result."""
        test_client.cookies.clear()
        response = await test_client.post("/api/profile", json={"token": "c" * 64})
        assert response.json() == {"results": []}


class TestPagesAndHealth:
    """Tests for the HTML pages, static assets, /health and request ids."""

    @pytest.mark.asyncio
    async def test_index_page(self, test_client):
        """GET / serves the create page."""
        response = await test_client.get("/")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")

    @pytest.mark.asyncio
    async def test_view_page_for_valid_id(self, test_client):
        """Any well-formed id serves the view page."""
        response = await test_client.get("/aZ3kP0qLm9")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")

    @pytest.mark.asyncio
    async def test_view_page_for_created_paste(self, test_client):
        """Ids minted by /api/new are accepted by the view page."""
        body = await create(test_client)
        response = await test_client.get(f"/{body['id']}")
        assert response.status_code == 200

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "path", ["/short", "/aZ3kP0qLm9x", "/bad-id-000", "/aZ3kP0qLm9%0A", "/aZ3kP0qLm9%0D%0A"]
    )
    async def test_view_page_rejects_malformed_id(self, test_client, path):
        """Malformed ids, including trailing newlines, should return 400."""
        response = await test_client.get(path)
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid ID"

    @pytest.mark.asyncio
    async def test_static_assets(self, test_client):
        """Scripts are served under /static."""
        assert (await test_client.get("/static/app.js")).status_code == 200

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        """Health reports the SQL backend as healthy."""
        response = await test_client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["storage_backend"] == "sql"

    @pytest.mark.asyncio
    async def test_request_id_header(self, test_client):
        """Well-formed client request ids are echoed; others are replaced."""
        response = await test_client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"

        generated = await test_client.get("/health", headers={"X-Request-ID": "bad id!"})
        assert len(generated.headers["X-Request-ID"]) == 8


class TestStorageFailures:
    """Tests for storage failures surfacing through the HTTP layer."""

    @pytest_asyncio.fixture
    async def failing_client(self, mock_repository):
        """App wired to the mocked repository."""
        app = create_app(repository=mock_repository)
        async with app.router.lifespan_context(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                yield client

    @pytest.mark.asyncio
    async def test_storage_error_is_generic_500(self, failing_client, mock_repository):
        """Storage errors return a generic 500 without internal details."""
        mock_repository.insert.side_effect = StorageError(context={"dsn": "secret"})

        response = await failing_client.post("/api/new", json={"content": "x"})

        assert response.status_code == 500
        assert "secret" not in response.text
        assert response.json()["error"] == "server_error"

    @pytest.mark.asyncio
    async def test_id_exhaustion_500(self, failing_client, mock_repository):
        """Five id collisions return 500."""
        mock_repository.insert.side_effect = DuplicatePasteIdError("taken00001")

        response = await failing_client.post("/api/new", json={"content": "x"})

        assert response.status_code == 500
        assert mock_repository.insert.await_count == 5

    @pytest.mark.asyncio
    async def test_health_unreachable_503(self, failing_client, mock_repository):
        """An unreachable store makes /health return 503."""
        mock_repository.ping.return_value = False
        response = await failing_client.get("/health")
        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"
