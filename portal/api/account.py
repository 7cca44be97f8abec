from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from portal.api.schemas import (
    AccountProfileSchema,
    InviteInSchema,
    PermissionsUpdateSchema,
    ProfileUpdateSchema,
    SubscriptionSchema,
    TeamMemberSchema,
    UserInviteSchema,
)
from portal.application.use_cases.account import AccountUseCase
from portal.wiring.dependencies import get_account_use_case, get_current_user_id


router = APIRouter(prefix="/api")


@router.get("/account/profile", response_model=AccountProfileSchema)
async def get_profile(
    user_id: str = Depends(get_current_user_id),
    uc: AccountUseCase = Depends(get_account_use_case),
) -> AccountProfileSchema:
    return AccountProfileSchema.from_entity(await uc.get_profile(user_id))


@router.put("/account/profile", response_model=AccountProfileSchema)
async def update_profile(
    req: ProfileUpdateSchema,
    user_id: str = Depends(get_current_user_id),
    uc: AccountUseCase = Depends(get_account_use_case),
) -> AccountProfileSchema:
    profile = await uc.update_profile(user_id, name=req.name, email=req.email, company=req.company)
    return AccountProfileSchema.from_entity(profile)


@router.get("/account/subscription", response_model=SubscriptionSchema)
async def get_subscription(
    user_id: str = Depends(get_current_user_id),
    uc: AccountUseCase = Depends(get_account_use_case),
) -> SubscriptionSchema:
    return SubscriptionSchema.from_entity(await uc.get_subscription(user_id))


@router.get("/team/members", response_model=list[TeamMemberSchema])
async def team_members(
    user_id: str = Depends(get_current_user_id),
    uc: AccountUseCase = Depends(get_account_use_case),
) -> list[TeamMemberSchema]:
    return [TeamMemberSchema.from_entity(m) for m in await uc.list_team_members(user_id)]


@router.post("/team/invite", response_model=UserInviteSchema, status_code=201)
async def invite_user(
    req: InviteInSchema,
    user_id: str = Depends(get_current_user_id),
    uc: AccountUseCase = Depends(get_account_use_case),
) -> UserInviteSchema:
    invite = await uc.invite_user(user_id, email=req.email, role=req.role, permissions=req.permissions)
    return UserInviteSchema.from_entity(invite)


@router.get("/team/invites", response_model=list[UserInviteSchema])
async def team_invites(
    user_id: str = Depends(get_current_user_id),
    uc: AccountUseCase = Depends(get_account_use_case),
) -> list[UserInviteSchema]:
    return [UserInviteSchema.from_entity(i) for i in await uc.list_invites(user_id)]


@router.put("/team/members/{member_id}/permissions", response_model=TeamMemberSchema)
async def update_permissions(
    member_id: str,
    req: PermissionsUpdateSchema,
    user_id: str = Depends(get_current_user_id),
    uc: AccountUseCase = Depends(get_account_use_case),
) -> TeamMemberSchema:
    member = await uc.update_permissions(user_id, member_id, role=req.role, permissions=req.permissions)
    return TeamMemberSchema.from_entity(member)


@router.delete("/team/members/{member_id}", status_code=204)
async def remove_member(
    member_id: str,
    user_id: str = Depends(get_current_user_id),
    uc: AccountUseCase = Depends(get_account_use_case),
) -> Response:
    await uc.remove_member(user_id, member_id)
    return Response(status_code=204)
