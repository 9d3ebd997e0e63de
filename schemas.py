from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

SNAPSHOT_VERSION = 1


@dataclass
class OperationResult:
    """Outcome of a write operation. Truthy when the write succeeded."""

    ok: bool
    message: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok


@dataclass
class SaveResult(OperationResult):
    """Outcome of saving a set draft.

    ``archived`` is None when the set was not marked completed, otherwise
    it reports whether the history record was written.
    """

    archived: Optional[bool] = None
    archive_message: Optional[str] = None


@dataclass
class Draft:
    weight: float = 0
    reps: int = 0
    sets: int = 0
    notes: str = ""
    sources: dict[str, str] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            "weight": self.weight,
            "reps": self.reps,
            "sets": self.sets,
            "notes": self.notes,
            "sources": dict(self.sources),
        }


class SectionDefinition(BaseModel):
    title: str
    exercise_ids: list[int] = Field(default_factory=list)


class PlanDefinition(BaseModel):
    name: str
    sections: list[SectionDefinition] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("plan name must not be empty")
        return value.strip()


class SetPayload(BaseModel):
    weight: Any = 0
    reps: Any = 0
    sets: Any = 0
    notes: Optional[str] = ""
    completed: bool = False


class ExercisePayload(BaseModel):
    name: str
    muscle_group: Optional[str] = None
    notes: Optional[str] = None
    default_sets: Optional[str] = None
    default_reps: Optional[str] = None


class MeasurementPayload(BaseModel):
    type: str
    value: float
    unit: str = "kg"
    date: Optional[str] = None


class Snapshot(BaseModel):
    """Backup document. ``history`` and ``exercises`` are mandatory."""

    version: int = SNAPSHOT_VERSION
    exportedAt: Optional[str] = None
    exercises: list[dict[str, Any]]
    history: list[dict[str, Any]]
    workouts: Optional[list[dict[str, Any]]] = None
    workout_exercises: Optional[list[dict[str, Any]]] = None
    measurements: Optional[list[dict[str, Any]]] = None
    workout_plans: Optional[list[dict[str, Any]]] = None
    plan_sections: Optional[list[dict[str, Any]]] = None
    plan_exercises: Optional[list[dict[str, Any]]] = None

    @field_validator("version")
    @classmethod
    def _supported_version(cls, value: int) -> int:
        if value > SNAPSHOT_VERSION:
            raise ValueError(f"unsupported snapshot version {value}")
        return value

    def table_rows(self, table: str) -> list[dict[str, Any]]:
        return getattr(self, table) or []
