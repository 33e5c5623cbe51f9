"""
Task repository: ownership-scoped CRUD.

Every function takes the authenticated ``user_id`` and only ever touches
rows whose ``author_id`` matches it.  Update and delete are single
conditional statements, so the ownership check and the mutation cannot be
separated by another request.  "Does not exist" and "belongs to someone
else" produce the same ``NOT_FOUND`` failure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Task
from utils.results import ErrorKind, Failure, Result

logger = logging.getLogger(__name__)

TITLE_REQUIRED = Failure(ErrorKind.INVALID_INPUT, "Task title is required.")
TITLE_EMPTY = Failure(ErrorKind.INVALID_INPUT, "Task title cannot be empty.")
NOTHING_TO_UPDATE = Failure(
    ErrorKind.INVALID_INPUT, "Must provide title or completed status for update."
)
TASK_NOT_FOUND = Failure(ErrorKind.NOT_FOUND, "Task not found or unauthorized.")


@dataclass(frozen=True)
class TaskChanges:
    """Partial update expressed in storage field names."""

    title: Optional[str] = None
    is_done: Optional[bool] = None

    def is_empty(self) -> bool:
        return self.title is None and self.is_done is None

    def values(self) -> dict:
        values = {}
        if self.title is not None:
            values["title"] = self.title
        if self.is_done is not None:
            values["is_done"] = self.is_done
        return values


def _is_blank(title: Optional[str]) -> bool:
    return title is None or not title.strip()


async def list_tasks(session: AsyncSession, user_id: int) -> List[Task]:
    """Return the user's tasks: open ones first, then by creation order."""
    result = await session.execute(
        select(Task)
        .where(Task.author_id == user_id)
        .order_by(Task.is_done.asc(), Task.id.asc())
    )
    return list(result.scalars().all())


async def create_task(
    session: AsyncSession,
    user_id: int,
    title: Optional[str],
) -> Result[Task]:
    if _is_blank(title):
        return TITLE_REQUIRED

    task = Task(title=title, is_done=False, author_id=user_id)
    session.add(task)
    await session.commit()
    logger.debug("Created task %s for user %s", task.id, user_id)
    return task


async def update_task(
    session: AsyncSession,
    user_id: int,
    task_id: int,
    changes: TaskChanges,
) -> Result[Task]:
    if changes.is_empty():
        return NOTHING_TO_UPDATE
    if changes.title is not None and _is_blank(changes.title):
        return TITLE_EMPTY

    result = await session.execute(
        update(Task)
        .where(Task.id == task_id, Task.author_id == user_id)
        .values(**changes.values())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        return TASK_NOT_FOUND

    refreshed = await session.execute(
        select(Task)
        .where(Task.id == task_id, Task.author_id == user_id)
        .execution_options(populate_existing=True)
    )
    task = refreshed.scalar_one()
    await session.commit()
    return task


async def delete_task(
    session: AsyncSession,
    user_id: int,
    task_id: int,
) -> Optional[Failure]:
    """Delete the task; returns ``None`` on success."""
    result = await session.execute(
        delete(Task)
        .where(Task.id == task_id, Task.author_id == user_id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        return TASK_NOT_FOUND

    await session.commit()
    logger.debug("Deleted task %s for user %s", task_id, user_id)
    return None
