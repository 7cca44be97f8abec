from __future__ import annotations

import logging

from portal.application.exceptions import NotFoundError, ValidationError
from portal.application.ports.record_store import RecordStorePort
from portal.domain.entities.records import ChangeRequest, Project, ProjectDetail


CHANGE_CATEGORIES = {"content", "design", "feature", "bug", "other"}
CHANGE_PRIORITIES = {"low", "medium", "high"}


class ProjectsUseCase:
    def __init__(self, store: RecordStorePort) -> None:
        self._store = store
        self._logger = logging.getLogger(__name__)

    async def list_projects(self, user_id: str) -> list[Project]:
        return await self._store.fetch_projects(user_id)

    async def get_project(self, project_id: str) -> ProjectDetail:
        detail = await self._store.fetch_project_by_id(project_id)
        if detail is None:
            raise NotFoundError(f"Project {project_id} not found", error="Project not found")
        return detail

    async def list_changes(self, user_id: str) -> list[ChangeRequest]:
        return await self._store.list_change_requests(user_id)

    async def submit_change(
        self,
        user_id: str,
        project_id: str | None,
        title: str | None,
        description: str | None,
        category: str | None,
        priority: str | None = None,
    ) -> ChangeRequest:
        if not (project_id and title and description and category):
            raise ValidationError("Missing required fields")
        if category not in CHANGE_CATEGORIES:
            raise ValidationError(f"Unknown category: {category}")
        priority = priority or "medium"
        if priority not in CHANGE_PRIORITIES:
            raise ValidationError(f"Unknown priority: {priority}")

        change = await self._store.create_change_request(
            user_id=user_id,
            project_id=project_id,
            title=title,
            description=description,
            category=category,
            priority=priority,
        )
        self._logger.info("Change request submitted", extra={"reason": category})
        return change
