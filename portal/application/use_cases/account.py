from __future__ import annotations

import logging

from portal.application.exceptions import NotFoundError, ValidationError
from portal.application.ports.record_store import RecordStorePort
from portal.domain.entities.records import AccountProfile, Subscription, TeamMember, UserInvite


ROLES = {"admin", "member", "viewer"}
PERMISSIONS = {"view_projects", "edit_projects", "submit_changes", "manage_team", "view_reports"}


class AccountUseCase:
    def __init__(self, store: RecordStorePort) -> None:
        self._store = store
        self._logger = logging.getLogger(__name__)

    async def get_profile(self, user_id: str) -> AccountProfile:
        profile = await self._store.fetch_profile(user_id)
        if profile is None:
            raise NotFoundError("Account not found", error="Account not found")
        return profile

    async def update_profile(
        self,
        user_id: str,
        name: str | None = None,
        email: str | None = None,
        company: str | None = None,
    ) -> AccountProfile:
        profile = await self._store.update_profile(user_id, name=name, email=email, company=company)
        if profile is None:
            raise NotFoundError("Account not found", error="Account not found")
        return profile

    async def get_subscription(self, user_id: str) -> Subscription:
        subscription = await self._store.fetch_subscription(user_id)
        if subscription is None:
            raise NotFoundError("Account not found", error="Account not found")
        return subscription

    async def list_team_members(self, owner_id: str) -> list[TeamMember]:
        return await self._store.list_team_members(owner_id)

    async def list_invites(self, owner_id: str) -> list[UserInvite]:
        return await self._store.list_invites(owner_id)

    async def invite_user(
        self,
        owner_id: str,
        email: str | None,
        role: str | None,
        permissions: list[str] | None,
    ) -> UserInvite:
        if not email or not role:
            raise ValidationError("Email and role are required")
        _check_role(role)
        permissions = _check_permissions(permissions or [])
        invite = await self._store.create_invite(owner_id, email=email, role=role, permissions=permissions)
        self._logger.info("Team invite created", extra={"reason": role})
        return invite

    async def update_permissions(
        self,
        owner_id: str,
        member_id: str,
        role: str | None,
        permissions: list[str] | None,
    ) -> TeamMember:
        if role:
            _check_role(role)
        member = await self._store.update_member_permissions(
            owner_id,
            member_id,
            role=role,
            permissions=None if permissions is None else _check_permissions(permissions),
        )
        if member is None:
            raise NotFoundError("Team member not found", error="Team member not found")
        return member

    async def remove_member(self, owner_id: str, member_id: str) -> None:
        if not await self._store.remove_team_member(owner_id, member_id):
            raise NotFoundError("Team member not found", error="Team member not found")


def _check_role(role: str) -> None:
    if role not in ROLES:
        raise ValidationError(f"Unknown role: {role}")


def _check_permissions(permissions: list[str]) -> list[str]:
    unknown = [p for p in permissions if p not in PERMISSIONS]
    if unknown:
        raise ValidationError(f"Unknown permissions: {', '.join(unknown)}")
    return list(dict.fromkeys(permissions))
