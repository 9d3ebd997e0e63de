from pydantic import BaseModel, Field, ValidationError, field_validator


class TrackerSettings(BaseModel):
    db_path: str = "workout.db"
    tracked_measurements: list[str] = Field(
        default_factory=lambda: ["weight", "arm", "forearm", "chest"]
    )
    measurement_units: dict[str, str] = Field(
        default_factory=lambda: {
            "weight": "kg",
            "arm": "cm",
            "forearm": "cm",
            "chest": "cm",
        }
    )
    stats_window: int = Field(7, ge=1)
    personal_record_limit: int = Field(5, ge=1)
    progress_limit: int = Field(10, ge=1)
    history_page_size: int = Field(10, ge=1)
    log_level: str = "INFO"

    @field_validator("tracked_measurements")
    @classmethod
    def _at_least_one(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one measurement type must be tracked")
        return value


def validate_settings(data: dict) -> TrackerSettings:
    try:
        return TrackerSettings(**data)
    except ValidationError as e:
        raise ValueError(str(e))
