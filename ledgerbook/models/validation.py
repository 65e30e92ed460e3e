"""Validation result models returned by the record validator."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ledgerbook.models.records import EntityType


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'future_date', 'over_limit')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation of one record.

    Stage 1: Schema validation (required content)
    Stage 2: Semantic validation (dates, amounts, limits)

    Warnings never block a save; only errors do.
    """

    entity_type: EntityType
    record_id: str
    validated_at: datetime = Field(default_factory=datetime.now)

    schema_valid: bool = True
    semantic_valid: bool = True
    issues: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def can_save(self) -> bool:
        return not self.errors
