from __future__ import annotations

from abc import ABC, abstractmethod

from portal.domain.entities.records import (
    AccountProfile,
    ChangeRequest,
    Project,
    ProjectDetail,
    Subscription,
    TeamMember,
    UserInvite,
)


class RecordStorePort(ABC):
    """Project, account and team records kept in the hosted database."""

    @abstractmethod
    async def fetch_projects(self, user_id: str) -> list[Project]:
        raise NotImplementedError

    @abstractmethod
    async def fetch_project_by_id(self, project_id: str) -> ProjectDetail | None:
        raise NotImplementedError

    @abstractmethod
    async def list_change_requests(self, user_id: str) -> list[ChangeRequest]:
        raise NotImplementedError

    @abstractmethod
    async def create_change_request(
        self,
        user_id: str,
        project_id: str,
        title: str,
        description: str,
        category: str,
        priority: str,
    ) -> ChangeRequest:
        raise NotImplementedError

    @abstractmethod
    async def fetch_profile(self, user_id: str) -> AccountProfile | None:
        raise NotImplementedError

    @abstractmethod
    async def update_profile(
        self,
        user_id: str,
        name: str | None = None,
        email: str | None = None,
        company: str | None = None,
    ) -> AccountProfile | None:
        """Apply the non-empty fields. Returns None if the account does not exist."""
        raise NotImplementedError

    @abstractmethod
    async def fetch_subscription(self, user_id: str) -> Subscription | None:
        raise NotImplementedError

    @abstractmethod
    async def list_team_members(self, owner_id: str) -> list[TeamMember]:
        raise NotImplementedError

    @abstractmethod
    async def list_invites(self, owner_id: str) -> list[UserInvite]:
        raise NotImplementedError

    @abstractmethod
    async def create_invite(
        self,
        owner_id: str,
        email: str,
        role: str,
        permissions: list[str],
    ) -> UserInvite:
        raise NotImplementedError

    @abstractmethod
    async def update_member_permissions(
        self,
        owner_id: str,
        member_id: str,
        role: str | None,
        permissions: list[str] | None,
    ) -> TeamMember | None:
        """Change role and/or permissions; ``None`` leaves that field as it is."""
        raise NotImplementedError

    @abstractmethod
    async def remove_team_member(self, owner_id: str, member_id: str) -> bool:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None
