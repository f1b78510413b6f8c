"""Configuration loading for smart-validator.

The config file is optional JSON, by default ``.smart-validator/config.json``
under the project root::

    {
      "watchGlobs": ["src/**/*.{tsx,jsx}"],
      "excludeGlobs": ["node_modules/**", "dist/**", "build/**"],
      "pollIntervalMs": 5000
    }
"""

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

DEFAULT_CONFIG_PATH = Path(".smart-validator") / "config.json"

# Watch mode triggers targeted runs for component files only. Edge
# functions, migrations, .ts sources and package.json are still covered by
# the initial and periodic full runs; list them in "watchGlobs" to get
# targeted runs for them too. Watching every rule target would put a
# recursive observer on the project root.
DEFAULT_WATCH_GLOBS = ["src/**/*.{tsx,jsx}"]
DEFAULT_EXCLUDE_GLOBS = ["node_modules/**", "dist/**", "build/**"]


class ValidatorConfig(BaseModel):
    """Runtime settings, read from camelCase JSON keys."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    watch_globs: list[str] = Field(default_factory=lambda: list(DEFAULT_WATCH_GLOBS), alias="watchGlobs")
    exclude_globs: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_GLOBS), alias="excludeGlobs")
    poll_interval_ms: int = Field(default=5000, alias="pollIntervalMs", ge=0)
    use_polling: bool = Field(default=False, alias="usePolling")
    debounce_ms: int = Field(default=2000, alias="debounceMs", ge=0)
    full_revalidation_minutes: float = Field(default=30, alias="fullRevalidationMinutes", gt=0)
    type_check_command: list[str] = Field(
        default_factory=lambda: ["npx", "tsc", "--noEmit", "--skipLibCheck"],
        alias="typeCheckCommand",
    )
    build_command: list[str] = Field(
        default_factory=lambda: ["npm", "run", "build:check"],
        alias="buildCommand",
    )
    report_path: str = Field(default="smart-validator-report.json", alias="reportPath")

    @field_validator("watch_globs", mode="after")
    @classmethod
    def _keep_default_watch_globs(cls, value: list[str]) -> list[str]:
        # An empty list would watch nothing; fall back like the defaults do.
        return value or list(DEFAULT_WATCH_GLOBS)

    @field_validator("type_check_command", "build_command", mode="after")
    @classmethod
    def _non_empty_command(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("command must not be empty")
        return value

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000

    @property
    def full_revalidation_seconds(self) -> float:
        return self.full_revalidation_minutes * 60


def load_config(project_root: str | Path, path: Optional[str | Path] = None) -> ValidatorConfig:
    """Load the config for a project.

    A missing default config file yields the defaults; a missing file that
    was asked for explicitly is an error.
    """
    project_root = Path(project_root)
    explicit = path is not None
    config_path = Path(path) if explicit else project_root / DEFAULT_CONFIG_PATH

    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {config_path}")
        return ValidatorConfig()

    try:
        with config_path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file is not valid JSON: {config_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError("Config must be a JSON object")

    try:
        return ValidatorConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config in {config_path}: {exc}") from exc
