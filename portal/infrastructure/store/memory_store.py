from __future__ import annotations

import time
import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone

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


DEMO_USER_ID = "demo@astrobot.design"


class MemoryRecordStore(RecordStorePort):
    """Process-local record store seeded with the demo account.

    Used in tests and whenever the hosted database is not configured. Not shared
    across workers and lost on restart.
    """

    def __init__(self, seed: bool = True) -> None:
        self._projects: dict[str, ProjectDetail] = {}
        self._changes: list[tuple[str, ChangeRequest]] = []
        self._profiles: dict[str, AccountProfile] = {}
        self._subscriptions: dict[str, Subscription] = {}
        self._members: dict[str, dict[str, TeamMember]] = {}
        self._invites: dict[str, list[UserInvite]] = {}
        if seed:
            self._seed()

    async def fetch_projects(self, user_id: str) -> list[Project]:
        return [d.project for d in self._projects.values() if d.project.user_id == user_id]

    async def fetch_project_by_id(self, project_id: str) -> ProjectDetail | None:
        return self._projects.get(project_id)

    async def list_change_requests(self, user_id: str) -> list[ChangeRequest]:
        return [change for owner, change in self._changes if owner == user_id]

    async def create_change_request(
        self,
        user_id: str,
        project_id: str,
        title: str,
        description: str,
        category: str,
        priority: str,
    ) -> ChangeRequest:
        now = _now_iso()
        change = ChangeRequest(
            id=str(int(time.time() * 1000)) + uuid.uuid4().hex[:4],
            project_id=project_id,
            title=title,
            description=description,
            category=category,
            priority=priority,
            status="submitted",
            created_at=now,
            updated_at=now,
        )
        self._changes.append((user_id, change))
        return change

    async def fetch_profile(self, user_id: str) -> AccountProfile | None:
        return self._profiles.get(user_id)

    async def update_profile(
        self,
        user_id: str,
        name: str | None = None,
        email: str | None = None,
        company: str | None = None,
    ) -> AccountProfile | None:
        profile = self._profiles.get(user_id)
        if profile is None:
            return None
        updated = replace(
            profile,
            name=name or profile.name,
            email=email or profile.email,
            company=company or profile.company,
        )
        self._profiles[user_id] = updated
        return updated

    async def fetch_subscription(self, user_id: str) -> Subscription | None:
        return self._subscriptions.get(user_id)

    async def list_team_members(self, owner_id: str) -> list[TeamMember]:
        return list(self._members.get(owner_id, {}).values())

    async def list_invites(self, owner_id: str) -> list[UserInvite]:
        return list(self._invites.get(owner_id, []))

    async def create_invite(
        self,
        owner_id: str,
        email: str,
        role: str,
        permissions: list[str],
    ) -> UserInvite:
        created = datetime.now(timezone.utc)
        invite = UserInvite(
            id=f"invite-{uuid.uuid4().hex[:8]}",
            email=email,
            role=role,
            created_at=created.isoformat(),
            expires_at=(created + timedelta(days=7)).isoformat(),
            status="pending",
            permissions=tuple(permissions),
        )
        self._invites.setdefault(owner_id, []).append(invite)
        return invite

    async def update_member_permissions(
        self,
        owner_id: str,
        member_id: str,
        role: str | None,
        permissions: list[str] | None,
    ) -> TeamMember | None:
        members = self._members.get(owner_id, {})
        member = members.get(member_id)
        if member is None:
            return None
        updated = replace(
            member,
            role=role or member.role,
            permissions=member.permissions if permissions is None else tuple(permissions),
        )
        members[member_id] = updated
        return updated

    async def remove_team_member(self, owner_id: str, member_id: str) -> bool:
        return self._members.get(owner_id, {}).pop(member_id, None) is not None

    def _seed(self) -> None:
        projects = [
            ProjectDetail(
                project=Project(
                    id="1",
                    name="TechStart Ventures",
                    status="development",
                    progress=65,
                    description="A modern marketing website for a tech startup",
                    start_date="2024-01-01",
                    launch_date="2024-02-15",
                    user_id=DEMO_USER_ID,
                    website_url="https://www.stripe.com",
                ),
                timeline=(
                    TimelinePhase("Design Phase", True, "2024-01-15"),
                    TimelinePhase("Development", True, "2024-02-01"),
                    TimelinePhase("Review & Testing", False),
                    TimelinePhase("Launch", False),
                ),
                domain="techstartventures.com",
                ssl_status="active",
                uptime=99.98,
                page_load_time=820,
                hosting_region="US-East-1",
            ),
            ProjectDetail(
                project=Project(
                    id="2",
                    name="Digital Design Co",
                    status="design",
                    progress=30,
                    description="Portfolio website for a design agency",
                    start_date="2024-01-10",
                    user_id=DEMO_USER_ID,
                    website_url="https://www.dribbble.com",
                ),
                timeline=(
                    TimelinePhase("Discovery & Planning", True, "2024-01-10"),
                    TimelinePhase("Design Phase", False),
                    TimelinePhase("Development", False),
                    TimelinePhase("Launch", False),
                ),
                ssl_status="none",
            ),
            ProjectDetail(
                project=Project(
                    id="3",
                    name="E-Commerce Plus",
                    status="review",
                    progress=90,
                    description="Full e-commerce platform for online retail",
                    start_date="2023-11-01",
                    launch_date="2024-01-20",
                    user_id=DEMO_USER_ID,
                    website_url="https://www.shopify.com",
                ),
                timeline=(
                    TimelinePhase("Design Phase", True, "2023-11-15"),
                    TimelinePhase("Development", True, "2023-12-15"),
                    TimelinePhase("Review & Testing", True, "2024-01-10"),
                    TimelinePhase("Launch", False),
                ),
                domain="ecommerceplus.shop",
                ssl_status="pending",
                uptime=99.5,
                page_load_time=1240,
                hosting_region="EU-West-1",
            ),
        ]
        self._projects = {d.project.id: d for d in projects}

        self._profiles[DEMO_USER_ID] = AccountProfile(
            id=DEMO_USER_ID,
            name="Demo User",
            email=DEMO_USER_ID,
            company="Tech Ventures",
        )
        self._subscriptions[DEMO_USER_ID] = Subscription(
            id="sub-001",
            plan="Professional",
            status="active",
            renewal_date=(datetime.now(timezone.utc) + timedelta(days=30)).isoformat(),
        )
        self._members[DEMO_USER_ID] = {
            "member-1": TeamMember(
                id="member-1",
                email=DEMO_USER_ID,
                name="Demo User",
                role="admin",
                joined_at="2024-01-01T00:00:00+00:00",
                status="active",
                permissions=("view_projects", "edit_projects", "submit_changes", "manage_team", "view_reports"),
            ),
            "member-2": TeamMember(
                id="member-2",
                email="designer@astrobot.design",
                name="Dana Designer",
                role="member",
                joined_at="2024-01-12T00:00:00+00:00",
                status="active",
                permissions=("view_projects", "submit_changes"),
            ),
        }


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
