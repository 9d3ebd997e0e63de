import os
import yaml

from settings_schema import TrackerSettings, validate_settings

APP_VERSION = "1.0.0"


class YamlConfig:
    """Load and save tracker settings to a YAML file."""

    ENV_DB_PATH = "TRACKER_DB"

    def __init__(self, path: str = "settings.yaml") -> None:
        self.path = path

    def load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} must contain a mapping")
        return data

    def save(self, data: dict) -> None:
        validate_settings(data)
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(dict(data), f)

    def settings(self) -> TrackerSettings:
        """Return validated settings with file values over the defaults."""
        data = self.load()
        env_db = os.environ.get(self.ENV_DB_PATH)
        if env_db:
            data["db_path"] = env_db
        return validate_settings(data)


def load_settings(path: str = "settings.yaml") -> TrackerSettings:
    return YamlConfig(path).settings()
