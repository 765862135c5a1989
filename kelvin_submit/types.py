"""Type definitions for kelvin submit."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field


class SubmitData(BaseModel):
    """The submit created by Kelvin."""

    id: int = Field(strict=True, ge=0)
    url: str


class TaskData(BaseModel):
    """The task owning the assignment."""

    name: str


class SubmitResponse(BaseModel):
    """Body of a successful ``POST /api/submits/<assignment_id>``."""

    submit: SubmitData
    task: TaskData


@dataclass(frozen=True)
class SubmitAccepted:
    """Kelvin accepted the submit."""

    submit_id: int
    url: str
    task_name: str


@dataclass(frozen=True)
class SubmitRejected:
    """Kelvin answered with a status other than 200 OK."""

    status_code: int
    body: str | None = None


SubmitResult = SubmitAccepted | SubmitRejected
