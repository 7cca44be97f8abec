from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TimelinePhase:
    phase: str
    completed: bool
    date: str | None = None


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    status: str  # "design", "development", "review", "launched"
    progress: int
    description: str
    start_date: str
    user_id: str
    launch_date: str | None = None
    website_url: str | None = None


@dataclass(frozen=True)
class ProjectDetail:
    project: Project
    timeline: tuple[TimelinePhase, ...] = ()
    domain: str | None = None
    ssl_status: str | None = None  # "active", "pending", "expired", "none"
    uptime: float | None = None
    page_load_time: int | None = None  # milliseconds
    hosting_region: str | None = None


@dataclass(frozen=True)
class ChangeRequest:
    id: str
    project_id: str
    title: str
    description: str
    category: str  # "content", "design", "feature", "bug", "other"
    priority: str
    status: str
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class AccountProfile:
    id: str
    name: str
    email: str
    company: str | None = None


@dataclass(frozen=True)
class Subscription:
    id: str
    plan: str
    status: str  # "active", "cancelled", "expired"
    renewal_date: str


@dataclass(frozen=True)
class TeamMember:
    id: str
    email: str
    name: str
    role: str  # "admin", "member", "viewer"
    joined_at: str
    status: str  # "active", "invited", "pending"
    permissions: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class UserInvite:
    id: str
    email: str
    role: str
    created_at: str
    expires_at: str
    status: str  # "pending", "accepted", "declined"
    permissions: tuple[str, ...] = field(default_factory=tuple)
