"""
API Tests for the member registry endpoints
"""
import re

import pytest

from credensuite.services.badge_renderer import badge_renderer

from conftest import FakePlaywright, member_payload

MEMBER_ID_RE = re.compile(r"^ORG-\d{4}-\d{3,}$")


async def create(client, **overrides):
    response = await client.post("/api/v1/members", json=member_payload(**overrides))
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateMember:

    @pytest.mark.asyncio
    async def test_create_returns_camel_case(self, client):
        response = await client.post(
            "/api/v1/members",
            json=member_payload(fullName="Jane Doe", bloodGroup="B+"),
        )

        assert response.status_code == 201
        data = response.json()
        assert MEMBER_ID_RE.match(data["memberId"])
        assert data["fullName"] == "Jane Doe"
        assert data["bloodGroup"] == "B+"
        assert data["isActive"] is True
        assert "createdAt" in data and "updatedAt" in data

    @pytest.mark.asyncio
    async def test_ids_are_sequential(self, client):
        first = await create(client)
        second = await create(client)

        assert int(second["memberId"].rsplit("-", 1)[1]) == int(first["memberId"].rsplit("-", 1)[1]) + 1

    @pytest.mark.asyncio
    async def test_missing_fields_reported_together(self, client):
        response = await client.post("/api/v1/members", json={"designation": "chief"})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert set(error["details"]["fields"]) == {"fullName", "designation", "joiningDate", "contactNumber"}

    @pytest.mark.asyncio
    async def test_client_member_id_rejected(self, client):
        response = await client.post("/api/v1/members", json=member_payload(memberId="ORG-1999-001"))

        assert response.status_code == 400
        assert response.json()["error"]["details"]["fields"] == ["memberId"]


class TestReadUpdateDelete:

    @pytest.mark.asyncio
    async def test_get_unknown_member(self, client):
        response = await client.get("/api/v1/members/does-not-exist")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "MEMBER_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_patch_merges_fields(self, client):
        created = await create(client, fullName="Jane Doe")

        response = await client.patch(
            f"/api/v1/members/{created['id']}",
            json={"contactNumber": "555-0199", "designation": "coordinator"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["fullName"] == "Jane Doe"
        assert data["contactNumber"] == "555-0199"
        assert data["designation"] == "coordinator"
        assert data["memberId"] == created["memberId"]

    @pytest.mark.asyncio
    async def test_patch_cannot_clear_required_field(self, client):
        created = await create(client)

        response = await client.patch(f"/api/v1/members/{created['id']}", json={"fullName": None})

        assert response.status_code == 400
        assert response.json()["error"]["details"]["fields"] == ["fullName"]

    @pytest.mark.asyncio
    async def test_toggle_active_twice(self, client):
        created = await create(client)
        url = f"/api/v1/members/{created['id']}/toggle-active"

        first = await client.post(url)
        second = await client.post(url)

        assert first.json()["isActive"] is False
        assert second.json()["isActive"] is True

    @pytest.mark.asyncio
    async def test_delete_then_not_found(self, client):
        created = await create(client)

        response = await client.delete(f"/api/v1/members/{created['id']}")
        assert response.status_code == 204

        response = await client.get(f"/api/v1/members/{created['id']}")
        assert response.status_code == 404


class TestListMembers:

    @pytest.mark.asyncio
    async def test_newest_first(self, client):
        first = await create(client)
        second = await create(client)

        response = await client.get("/api/v1/members")

        assert response.status_code == 200
        ids = [m["memberId"] for m in response.json()]
        assert ids == [second["memberId"], first["memberId"]]

    @pytest.mark.asyncio
    async def test_free_text_search(self, client):
        await create(client, fullName="Alice Walker")
        await create(client, fullName="Bob Stone")

        response = await client.get("/api/v1/members", params={"search": "walk"})

        assert [m["fullName"] for m in response.json()] == ["Alice Walker"]

    @pytest.mark.asyncio
    async def test_status_filter(self, client):
        active = await create(client)
        await create(client, isActive=False)

        response = await client.get("/api/v1/members", params={"status": "active"})

        assert [m["id"] for m in response.json()] == [active["id"]]

    @pytest.mark.asyncio
    async def test_two_search_modes_rejected(self, client):
        response = await client.get("/api/v1/members", params={"search": "a", "phone": "555"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_csv_export(self, client):
        created = await create(client, fullName="Jane Doe")

        response = await client.get("/api/v1/members/export.csv")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment" in response.headers["content-disposition"]
        lines = response.text.strip().splitlines()
        assert lines[0].startswith("Member ID,Full Name")
        assert lines[1].startswith(f"{created['memberId']},Jane Doe")

    @pytest.mark.asyncio
    async def test_csv_keeps_international_phone_numbers(self, client):
        await create(client, fullName="Jane Doe", contactNumber="+15551234567")

        response = await client.get("/api/v1/members/export.csv")

        assert ",+15551234567," in response.text
        assert "'+15551234567" not in response.text


class TestDirectoryExport:

    @pytest.mark.asyncio
    async def test_directory_pdf(self, client, monkeypatch):
        fake = FakePlaywright()
        monkeypatch.setattr(badge_renderer, "playwright_factory", fake)
        first = await create(client, fullName="Alice Walker", designation="volunteer")
        second = await create(client, fullName="Carlos Mendez", designation="manager")

        response = await client.get("/api/v1/members/export.pdf")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert re.match(
            r'attachment; filename="members-directory-\d{4}-\d{2}-\d{2}\.pdf"',
            response.headers["content-disposition"],
        )
        assert response.content.startswith(b"%PDF")
        assert response.content.count(b"/Type /Page") == 1
        assert fake.page.pdf_kwargs["format"] == "A4"
        assert fake.browser.closed and fake.page.closed

        html = fake.page.html
        assert "MEMBERS DIRECTORY" in html
        assert "Total Members: 2" in html
        assert "Hope Foundation NGO" in html
        assert "Applied Filters" not in html
        # Newest first, like the list endpoint
        assert html.index(second["memberId"]) < html.index(first["memberId"])

    @pytest.mark.asyncio
    async def test_directory_uses_list_filters(self, client, monkeypatch):
        fake = FakePlaywright()
        monkeypatch.setattr(badge_renderer, "playwright_factory", fake)
        await create(client, fullName="Alice Walker", designation="volunteer")
        await create(client, fullName="Carlos Walker", designation="manager", isActive=False)
        await create(client, fullName="Dana Smith", designation="volunteer")

        response = await client.get(
            "/api/v1/members/export.pdf", params={"search": "walker", "status": "active"}
        )

        assert response.status_code == 200
        html = fake.page.html
        assert "Alice Walker" in html
        assert "Carlos Walker" not in html
        assert "Dana Smith" not in html
        assert "Total Members: 1" in html
        assert "Applied Filters:" in html
        assert "Search: &quot;walker&quot;" in html
        assert "Status: Active" in html

    @pytest.mark.asyncio
    async def test_directory_rejects_two_search_modes(self, client, monkeypatch):
        fake = FakePlaywright()
        monkeypatch.setattr(badge_renderer, "playwright_factory", fake)

        response = await client.get("/api/v1/members/export.pdf", params={"search": "a", "phone": "555"})

        assert response.status_code == 400
        assert fake.entered is False

    @pytest.mark.asyncio
    async def test_directory_render_failure_is_generic(self, client, monkeypatch):
        monkeypatch.setattr(badge_renderer, "playwright_factory", FakePlaywright(fail_on="pdf"))

        response = await client.get("/api/v1/members/export.pdf")

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "DIRECTORY_RENDER_FAILED"
        assert error["message"] == "Failed to generate members directory"
        assert "Target page" not in response.text


class TestIdCard:

    @pytest.mark.asyncio
    async def test_pdf_download(self, client, monkeypatch):
        fake = FakePlaywright()
        monkeypatch.setattr(badge_renderer, "playwright_factory", fake)
        created = await create(client, fullName="Jane Doe")

        response = await client.get(
            f"/api/v1/members/{created['id']}/id-card.pdf",
            headers={"X-Actor-Email": "Admin@Example.org"},
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == (
            f'attachment; filename="id-card-{created["memberId"]}.pdf"'
        )
        assert response.content.startswith(b"%PDF")
        assert response.content.count(b"/Type /Page") == 2
        assert fake.browser.closed and fake.page.closed

        feed = (await client.get("/api/v1/activity")).json()
        assert feed[0]["type"] == "card_downloaded"
        assert feed[0]["subjectId"] == created["memberId"]
        assert feed[0]["actor"] == "admin@example.org"

    @pytest.mark.asyncio
    async def test_pdf_render_failure_is_generic(self, client, monkeypatch):
        monkeypatch.setattr(badge_renderer, "playwright_factory", FakePlaywright(fail_on="launch"))
        created = await create(client)

        response = await client.get(f"/api/v1/members/{created['id']}/id-card.pdf")

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "BADGE_RENDER_FAILED"
        assert error["message"] == "Failed to generate ID card"
        assert "Executable" not in response.text

    @pytest.mark.asyncio
    async def test_pdf_unknown_member(self, client, monkeypatch):
        fake = FakePlaywright()
        monkeypatch.setattr(badge_renderer, "playwright_factory", fake)

        response = await client.get("/api/v1/members/missing/id-card.pdf")

        assert response.status_code == 404
        assert fake.entered is False

    @pytest.mark.asyncio
    async def test_html_preview(self, client):
        created = await create(client, fullName="Jane Doe")

        response = await client.get(f"/api/v1/members/{created['id']}/id-card.html")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Jane Doe" in response.text
        assert created["memberId"] in response.text
        assert response.headers["content-security-policy"] == "frame-ancestors 'self'"
