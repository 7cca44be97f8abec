from __future__ import annotations

from fastapi import APIRouter, Depends

from portal.api.schemas import (
    ChangeRequestInSchema,
    ChangeRequestSchema,
    ProjectDetailSchema,
    ProjectSchema,
)
from portal.application.use_cases.projects import ProjectsUseCase
from portal.wiring.dependencies import get_current_user_id, get_projects_use_case


router = APIRouter(prefix="/api")


@router.get("/projects", response_model=list[ProjectSchema])
async def list_projects(
    user_id: str = Depends(get_current_user_id),
    uc: ProjectsUseCase = Depends(get_projects_use_case),
) -> list[ProjectSchema]:
    return [ProjectSchema.from_entity(p) for p in await uc.list_projects(user_id)]


@router.get("/projects/{project_id}", response_model=ProjectDetailSchema)
async def project_detail(
    project_id: str,
    uc: ProjectsUseCase = Depends(get_projects_use_case),
) -> ProjectDetailSchema:
    return ProjectDetailSchema.from_detail(await uc.get_project(project_id))


@router.post("/changes", response_model=ChangeRequestSchema, status_code=201)
async def submit_change(
    req: ChangeRequestInSchema,
    user_id: str = Depends(get_current_user_id),
    uc: ProjectsUseCase = Depends(get_projects_use_case),
) -> ChangeRequestSchema:
    change = await uc.submit_change(
        user_id,
        project_id=req.project_id,
        title=req.title,
        description=req.description,
        category=req.category,
        priority=req.priority,
    )
    return ChangeRequestSchema.from_entity(change)


@router.get("/changes", response_model=list[ChangeRequestSchema])
async def list_changes(
    user_id: str = Depends(get_current_user_id),
    uc: ProjectsUseCase = Depends(get_projects_use_case),
) -> list[ChangeRequestSchema]:
    return [ChangeRequestSchema.from_entity(c) for c in await uc.list_changes(user_id)]
