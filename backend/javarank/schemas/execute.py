"""Pydantic v2 schemas for the Judge0 code-execution proxy."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ExecuteRequest(BaseModel):
    """Java source to compile and run, plus optional analytics context."""

    model_config = ConfigDict(populate_by_name=True)

    code: str = Field(..., min_length=1, max_length=100_000)
    stdin: str = Field(default="", max_length=100_000)
    username: str | None = Field(default=None, max_length=64)
    challenge_id: str | None = Field(default=None, max_length=100, validation_alias="challengeId")


class ExecutionStatus(BaseModel):
    id: int
    description: str


class ExecuteResponse(BaseModel):
    """Judge0 result with base64 fields already decoded."""

    stdout: str | None = None
    stderr: str | None = None
    compile_output: str | None = None
    status: ExecutionStatus
    time: str | None = None
    memory: int | None = None
