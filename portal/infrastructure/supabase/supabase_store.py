from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx

from portal.application.exceptions import UpstreamError
from portal.application.ports.record_store import RecordStorePort
from portal.domain.entities.records import (
    AccountProfile,
    ChangeRequest,
    Project,
    ProjectDetail,
    Subscription,
    TeamMember,
    TimelinePhase,
    UserInvite,
)


class SupabaseRecordStore(RecordStorePort):
    """Record store backed by the Supabase PostgREST API using the service-role key."""

    def __init__(
        self,
        url: str,
        service_key: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        if not url or not service_key:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_KEY are required for the Supabase store")
        self._rest_url = f"{url.rstrip('/')}/rest/v1"
        self._headers = {
            "apikey": service_key,
            "Authorization": f"Bearer {service_key}",
            "Content-Type": "application/json",
        }
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._logger = logging.getLogger(__name__)

    async def fetch_projects(self, user_id: str) -> list[Project]:
        rows = await self._select("projects", {"user_id": f"eq.{user_id}", "order": "start_date.desc"})
        return [_project(row) for row in rows]

    async def fetch_project_by_id(self, project_id: str) -> ProjectDetail | None:
        rows = await self._select("projects", {"id": f"eq.{project_id}", "limit": "1"})
        if not rows:
            return None
        row = rows[0]
        return ProjectDetail(
            project=_project(row),
            timeline=tuple(
                TimelinePhase(
                    phase=str(item.get("phase", "")),
                    completed=bool(item.get("completed")),
                    date=item.get("date"),
                )
                for item in (row.get("timeline") or [])
                if isinstance(item, dict)
            ),
            domain=row.get("domain"),
            ssl_status=row.get("ssl_status"),
            uptime=row.get("uptime"),
            page_load_time=row.get("page_load_time"),
            hosting_region=row.get("hosting_region"),
        )

    async def list_change_requests(self, user_id: str) -> list[ChangeRequest]:
        rows = await self._select("change_requests", {"user_id": f"eq.{user_id}", "order": "created_at.desc"})
        return [_change_request(row) for row in rows]

    async def create_change_request(
        self,
        user_id: str,
        project_id: str,
        title: str,
        description: str,
        category: str,
        priority: str,
    ) -> ChangeRequest:
        now = datetime.now(timezone.utc).isoformat()
        rows = await self._write(
            "POST",
            "change_requests",
            json={
                "user_id": user_id,
                "project_id": project_id,
                "title": title,
                "description": description,
                "category": category,
                "priority": priority,
                "status": "submitted",
                "created_at": now,
                "updated_at": now,
            },
        )
        return _change_request(rows[0])

    async def fetch_profile(self, user_id: str) -> AccountProfile | None:
        rows = await self._select("accounts", {"id": f"eq.{user_id}", "limit": "1"})
        return _profile(rows[0]) if rows else None

    async def update_profile(
        self,
        user_id: str,
        name: str | None = None,
        email: str | None = None,
        company: str | None = None,
    ) -> AccountProfile | None:
        changes = {key: value for key, value in (("name", name), ("email", email), ("company", company)) if value}
        if not changes:
            return await self.fetch_profile(user_id)
        rows = await self._write("PATCH", "accounts", params={"id": f"eq.{user_id}"}, json=changes)
        return _profile(rows[0]) if rows else None

    async def fetch_subscription(self, user_id: str) -> Subscription | None:
        rows = await self._select("subscriptions", {"user_id": f"eq.{user_id}", "limit": "1"})
        if not rows:
            return None
        row = rows[0]
        return Subscription(
            id=str(row.get("id", "")),
            plan=str(row.get("plan", "")),
            status=str(row.get("status", "")),
            renewal_date=str(row.get("renewal_date", "")),
        )

    async def list_team_members(self, owner_id: str) -> list[TeamMember]:
        rows = await self._select("team_members", {"owner_id": f"eq.{owner_id}", "order": "joined_at.asc"})
        return [_member(row) for row in rows]

    async def list_invites(self, owner_id: str) -> list[UserInvite]:
        rows = await self._select("invites", {"owner_id": f"eq.{owner_id}", "order": "created_at.desc"})
        return [_invite(row) for row in rows]

    async def create_invite(
        self,
        owner_id: str,
        email: str,
        role: str,
        permissions: list[str],
    ) -> UserInvite:
        created = datetime.now(timezone.utc)
        rows = await self._write(
            "POST",
            "invites",
            json={
                "owner_id": owner_id,
                "email": email,
                "role": role,
                "permissions": permissions,
                "created_at": created.isoformat(),
                "expires_at": (created + timedelta(days=7)).isoformat(),
                "status": "pending",
            },
        )
        return _invite(rows[0])

    async def update_member_permissions(
        self,
        owner_id: str,
        member_id: str,
        role: str | None,
        permissions: list[str] | None,
    ) -> TeamMember | None:
        changes: dict[str, Any] = {}
        if permissions is not None:
            changes["permissions"] = permissions
        if role:
            changes["role"] = role
        if not changes:
            rows = await self._select(
                "team_members",
                {"id": f"eq.{member_id}", "owner_id": f"eq.{owner_id}", "limit": "1"},
            )
            return _member(rows[0]) if rows else None
        rows = await self._write(
            "PATCH",
            "team_members",
            params={"id": f"eq.{member_id}", "owner_id": f"eq.{owner_id}"},
            json=changes,
        )
        return _member(rows[0]) if rows else None

    async def remove_team_member(self, owner_id: str, member_id: str) -> bool:
        rows = await self._write(
            "DELETE",
            "team_members",
            params={"id": f"eq.{member_id}", "owner_id": f"eq.{owner_id}"},
        )
        return bool(rows)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _select(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        query = {"select": "*", **params}
        return await self._send("GET", table, params=query)

    async def _write(
        self,
        method: str,
        table: str,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        headers = {"Prefer": "return=representation"}
        return await self._send(method, table, params=params, json=json, headers=headers)

    async def _send(
        self,
        method: str,
        table: str,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> list[dict[str, Any]]:
        try:
            response = await self._client.request(
                method,
                f"{self._rest_url}/{table}",
                params=params,
                json=json,
                headers={**self._headers, **(headers or {})},
            )
        except httpx.HTTPError as e:
            self._logger.error("Supabase transport failure", extra={"endpoint": table, "error": str(e)})
            raise UpstreamError("Record store unavailable", error="Database error") from e

        if response.status_code >= 400:
            try:
                message = response.json().get("message") or response.text
            except (ValueError, AttributeError):
                message = response.text
            self._logger.error(
                "Supabase request failed",
                extra={"endpoint": table, "status_code": response.status_code, "error": message},
            )
            raise UpstreamError(message or "Record store request failed", error="Database error")

        if not response.content:
            return []
        data = response.json()
        if isinstance(data, dict):
            return [data]
        return [row for row in data if isinstance(row, dict)]


def _project(row: dict[str, Any]) -> Project:
    return Project(
        id=str(row.get("id", "")),
        name=str(row.get("name", "")),
        status=str(row.get("status", "design")),
        progress=int(row.get("progress") or 0),
        description=str(row.get("description") or ""),
        start_date=str(row.get("start_date") or ""),
        user_id=str(row.get("user_id", "")),
        launch_date=row.get("launch_date"),
        website_url=row.get("website_url"),
    )


def _change_request(row: dict[str, Any]) -> ChangeRequest:
    return ChangeRequest(
        id=str(row.get("id", "")),
        project_id=str(row.get("project_id", "")),
        title=str(row.get("title", "")),
        description=str(row.get("description", "")),
        category=str(row.get("category", "other")),
        priority=str(row.get("priority", "medium")),
        status=str(row.get("status", "submitted")),
        created_at=str(row.get("created_at", "")),
        updated_at=str(row.get("updated_at", "")),
    )


def _profile(row: dict[str, Any]) -> AccountProfile:
    return AccountProfile(
        id=str(row.get("id", "")),
        name=str(row.get("name", "")),
        email=str(row.get("email", "")),
        company=row.get("company"),
    )


def _member(row: dict[str, Any]) -> TeamMember:
    return TeamMember(
        id=str(row.get("id", "")),
        email=str(row.get("email", "")),
        name=str(row.get("name", "")),
        role=str(row.get("role", "viewer")),
        joined_at=str(row.get("joined_at", "")),
        status=str(row.get("status", "active")),
        permissions=tuple(row.get("permissions") or ()),
    )


def _invite(row: dict[str, Any]) -> UserInvite:
    return UserInvite(
        id=str(row.get("id", "")),
        email=str(row.get("email", "")),
        role=str(row.get("role", "viewer")),
        created_at=str(row.get("created_at", "")),
        expires_at=str(row.get("expires_at", "")),
        status=str(row.get("status", "pending")),
        permissions=tuple(row.get("permissions") or ()),
    )
