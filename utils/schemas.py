"""
Pydantic request / response schemas for the HTTP API.

This is also where the storage field names meet the client field names:
the task table calls its flag ``is_done`` while clients send and receive
``completed``.  ``TaskResponse.from_orm_task`` and
``TaskUpdateRequest.to_changes`` are the only two places that rename it.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auth.password import MAX_PASSWORD_BYTES
from database.models import Task, User
from database.tasks import TaskChanges


# ═══════════════════════════════════════════════════════════════════════════════
# Auth
# ═══════════════════════════════════════════════════════════════════════════════


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    email: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def _fits_bcrypt(cls, value: str) -> str:
        if len(value.encode()) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserPublic(BaseModel):
    id: int
    username: str
    email: str

    @classmethod
    def from_orm_user(cls, user: User) -> "UserPublic":
        return cls(id=user.id, username=user.username, email=user.email)


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserPublic


# ═══════════════════════════════════════════════════════════════════════════════
# Tasks
# ═══════════════════════════════════════════════════════════════════════════════


class TaskCreateRequest(BaseModel):
    # Owner is always the authenticated user; any client-sent owner field
    # is dropped with the other unknown keys.
    title: Optional[str] = None


class TaskUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    completed: Optional[bool] = None
    is_done: Optional[bool] = Field(None, alias="isDone")

    def to_changes(self) -> TaskChanges:
        """Map client field names onto storage field names."""
        done = self.completed if self.completed is not None else self.is_done
        return TaskChanges(title=self.title, is_done=done)


class TaskResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str
    completed: bool
    author_id: int = Field(..., alias="authorId")

    @classmethod
    def from_orm_task(cls, task: Task) -> "TaskResponse":
        return cls(
            id=task.id,
            title=task.title,
            completed=task.is_done,
            author_id=task.author_id,
        )


class MessageResponse(BaseModel):
    message: str
