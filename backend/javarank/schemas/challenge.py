"""
Pydantic v2 schemas for challenge CRUD.

The wire format is camelCase (sampleCode, testCases) to match the web
client; the ORM columns are snake_case. Aliases bridge the two.
"""

from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ChallengeTestCase(BaseModel):
    """One input / expected-output pair."""

    model_config = ConfigDict(populate_by_name=True)

    input: str
    expected_output: str | None = Field(
        default=None,
        validation_alias=AliasChoices("expectedOutput", "expected_output"),
        serialization_alias="expectedOutput",
    )


class ChallengeIn(BaseModel):
    """Payload accepted by POST /api/challenges (create or update by id)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1, max_length=100)
    title: str = Field(..., min_length=1, max_length=255)
    problem: str = Field(..., min_length=1)
    concept: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=100)
    difficulty: Literal["Easy", "Medium", "Hard"]
    sample_code: str | None = Field(default=None, validation_alias="sampleCode")
    test_cases: list[ChallengeTestCase] | None = Field(default=None, validation_alias="testCases")


class ChallengeOut(BaseModel):
    """A stored challenge as returned to the client."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    problem: str
    concept: str
    category: str
    difficulty: str
    sample_code: str | None = Field(
        default=None,
        validation_alias=AliasChoices("sample_code", "sampleCode"),
        serialization_alias="sampleCode",
    )
    test_cases: list[ChallengeTestCase] | None = Field(
        default=None,
        validation_alias=AliasChoices("test_cases", "testCases"),
        serialization_alias="testCases",
    )


class ChallengeList(BaseModel):
    challenges: list[ChallengeOut]


class ChallengeSaved(BaseModel):
    success: bool = True
    challenge: ChallengeOut


class BulkDeleteRequest(BaseModel):
    ids: list[str] = Field(..., min_length=1)


class BulkDeleteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    deleted_count: int = Field(alias="deletedCount")


class SuccessResponse(BaseModel):
    success: bool = True
