"""
Task routes. Every handler sits behind the bearer-token gate and is scoped to
the authenticated user.
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from api.errors import internal_error, raise_for
from auth.dependencies import get_current_user_id
from database import tasks as task_repo
from database.session import get_db_session
from utils.results import Failure
from utils.schemas import (
    MessageResponse,
    TaskCreateRequest,
    TaskResponse,
    TaskUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tasks"], dependencies=[Depends(get_current_user_id)])


@router.get("/tasks", response_model=List[TaskResponse])
async def list_tasks(
    session: AsyncSession = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
) -> List[TaskResponse]:
    try:
        rows = await task_repo.list_tasks(session, user_id)
    except SQLAlchemyError:
        logger.exception("Fetch tasks failed for user %s", user_id)
        raise internal_error("Failed to fetch tasks.")
    return [TaskResponse.from_orm_task(row) for row in rows]


@router.post(
    "/tasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_task(
    req: TaskCreateRequest,
    session: AsyncSession = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
) -> TaskResponse:
    try:
        result = await task_repo.create_task(session, user_id, req.title)
    except SQLAlchemyError:
        logger.exception("Create task failed for user %s", user_id)
        raise internal_error("Failed to create task.")

    if isinstance(result, Failure):
        raise_for(result)
    return TaskResponse.from_orm_task(result)


@router.put("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    req: TaskUpdateRequest,
    session: AsyncSession = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
) -> TaskResponse:
    try:
        result = await task_repo.update_task(session, user_id, task_id, req.to_changes())
    except SQLAlchemyError:
        logger.exception("Update task %s failed for user %s", task_id, user_id)
        raise internal_error("Failed to update task.")

    if isinstance(result, Failure):
        raise_for(result)
    return TaskResponse.from_orm_task(result)


@router.delete("/tasks/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: int,
    session: AsyncSession = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
) -> MessageResponse:
    try:
        failure = await task_repo.delete_task(session, user_id, task_id)
    except SQLAlchemyError:
        logger.exception("Delete task %s failed for user %s", task_id, user_id)
        raise internal_error("Failed to delete task.")

    if failure is not None:
        raise_for(failure)
    return MessageResponse(message="Task deleted successfully.")
