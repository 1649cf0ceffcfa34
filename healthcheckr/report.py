# ============================================================================
# HEALTH REPORT MODELS
# ============================================================================
# EPOCH: 1 - HEALTH AGGREGATION
# STATUS: Core - Report schemas
# PURPOSE: Pydantic V2 models for the detailed health report
# CREATED: 08 OCT 2026
# ============================================================================
"""
Health Report Models

Pydantic V2 models for the detailed report returned by HealthChecker.check().
All models are frozen and use V2 patterns: ConfigDict, model_validate,
model_dump.

Serialized shape (absent optional fields are omitted, never null):

    {
      "status": "Degraded",
      "checks": [
        {"name": "db", "status": "Healthy", "durationMs": 12, "tags": ["core"]},
        {"name": "cache", "status": "Degraded", "description": "slow", "durationMs": 40}
      ],
      "totalDurationMs": 41,
      "timestamp": "2026-10-08T09:15:02.120000Z",
      "data": {"environment": "production"}
    }

result_code is a side channel for HTTP hosts and is never serialized.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from healthcheckr.config import NOT_FOUND_STATUS_CODE
from healthcheckr.core import HealthStatus


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class HealthReportEntry(BaseModel):
    """Outcome of one check inside a detailed report."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., description="Name the check was registered under")
    description: Optional[str] = Field(default=None, description="Human-readable detail")
    status: HealthStatus = Field(..., description="Status of this check")
    error: Optional[str] = Field(
        default=None,
        description="Error text (only when error inclusion is enabled)",
    )
    duration_ms: Optional[int] = Field(
        default=None,
        alias="durationMs",
        description="Execution time in milliseconds (only when duration tracking is enabled)",
    )
    data: Optional[Dict[str, Any]] = Field(default=None, description="Data produced by the check")
    tags: Optional[Tuple[str, ...]] = Field(default=None, description="Tags from registration")


class HealthReport(BaseModel):
    """Detailed health report."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "status": "Healthy",
                "checks": [
                    {"name": "postgres", "status": "Healthy", "durationMs": 12},
                ],
                "totalDurationMs": 13,
                "timestamp": "2026-10-08T09:15:02.120000Z",
            }
        },
    )

    status: HealthStatus = Field(
        default=HealthStatus.UNKNOWN,
        description="Rolled-up status (Unknown when no check matched)",
    )
    checks: Tuple[HealthReportEntry, ...] = Field(
        default=(),
        description="Entries in registration order",
    )
    total_duration_ms: Optional[int] = Field(
        default=None,
        alias="totalDurationMs",
        description="Wall-clock time of the whole run in milliseconds",
    )
    timestamp: datetime = Field(
        default_factory=_utc_now,
        description="When the report was constructed",
    )
    data: Optional[Dict[str, Any]] = Field(default=None, description="Global metadata")
    result_code: int = Field(
        default=NOT_FOUND_STATUS_CODE,
        exclude=True,
        description="Transport status code for HTTP hosts (not serialized)",
    )

    def get_entry(self, name: str) -> Optional[HealthReportEntry]:
        """Find an entry by name (case-insensitive)."""
        key = name.casefold()
        for entry in self.checks:
            if entry.name.casefold() == key:
                return entry
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self, indent: Optional[int] = 2) -> str:
        """Serialize to JSON text."""
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=indent)

    def to_status_text(self) -> str:
        """Bare overall status, e.g. "Healthy"."""
        return self.status.value

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HealthReport":
        """Parse a dictionary produced by to_dict()."""
        return cls.model_validate(data)

    @classmethod
    def from_json(cls, text: str) -> "HealthReport":
        """Parse JSON produced by to_json()."""
        return cls.model_validate_json(text)


__all__ = [
    "HealthReportEntry",
    "HealthReport",
]
