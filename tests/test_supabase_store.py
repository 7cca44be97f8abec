"""Tests for the Supabase (PostgREST) record store."""

from __future__ import annotations

import json

import httpx
import pytest

from portal.application.exceptions import UpstreamError
from portal.infrastructure.supabase.supabase_store import SupabaseRecordStore


def _store(handler) -> SupabaseRecordStore:
    return SupabaseRecordStore(
        "https://db.example.supabase.co/",
        "service-key",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.asyncio
async def test_select_projects():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        seen["apikey"] = request.headers["apikey"]
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(
            200,
            json=[{"id": 1, "name": "Site", "status": "design", "progress": 10, "user_id": "u1"}],
        )

    projects = await _store(handler).fetch_projects("u1")

    assert seen == {
        "path": "/rest/v1/projects",
        "params": {"select": "*", "user_id": "eq.u1", "order": "start_date.desc"},
        "apikey": "service-key",
        "auth": "Bearer service-key",
    }
    assert projects[0].id == "1"
    assert projects[0].progress == 10


@pytest.mark.asyncio
async def test_missing_project_is_none():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[])

    assert await _store(handler).fetch_project_by_id("404") is None


@pytest.mark.asyncio
async def test_insert_asks_for_representation():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["prefer"] = request.headers.get("Prefer")
        body = json.loads(request.content)
        seen["body"] = body
        return httpx.Response(201, json=[{**body, "id": "cr-1"}])

    change = await _store(handler).create_change_request(
        user_id="u1",
        project_id="p1",
        title="Fix footer",
        description="Broken link",
        category="bug",
        priority="high",
    )

    assert seen["method"] == "POST"
    assert seen["prefer"] == "return=representation"
    assert seen["body"]["status"] == "submitted"
    assert change.id == "cr-1"
    assert change.priority == "high"


@pytest.mark.asyncio
async def test_delete_reports_whether_a_row_went_away():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["id"] == "eq.m1":
            return httpx.Response(200, json=[{"id": "m1"}])
        return httpx.Response(200, json=[])

    store = _store(handler)

    assert await store.remove_team_member("u1", "m1") is True
    assert await store.remove_team_member("u1", "m2") is False


@pytest.mark.asyncio
async def test_error_response_raises_database_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"message": "column does not exist"})

    with pytest.raises(UpstreamError) as exc_info:
        await _store(handler).fetch_profile("u1")

    assert exc_info.value.error == "Database error"
    assert exc_info.value.message == "column does not exist"


def test_requires_credentials():
    with pytest.raises(ValueError):
        SupabaseRecordStore("", "key")


@pytest.mark.asyncio
async def test_role_only_update_leaves_permissions_out_of_patch():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=[{"id": "m1", "role": "viewer", "permissions": ["view_projects"]}])

    member = await _store(handler).update_member_permissions("u1", "m1", role="viewer", permissions=None)

    assert seen == {"method": "PATCH", "body": {"role": "viewer"}}
    assert member.permissions == ("view_projects",)


@pytest.mark.asyncio
async def test_update_with_nothing_to_change_reads_the_member():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        return httpx.Response(200, json=[{"id": "m1", "role": "member", "permissions": ["view_projects"]}])

    member = await _store(handler).update_member_permissions("u1", "m1", role=None, permissions=None)

    assert seen["method"] == "GET"
    assert member.role == "member"
