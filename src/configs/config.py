# src/configs/config.py
from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.configs.settings import IngestSettings, get_settings


class Config:
    """
    File locations for the ingest pipeline.
    """

    # This points to src/configs/
    CONFIG_DIR = Path(__file__).parent.resolve()
    # This points to the project root
    PROJECT_ROOT = CONFIG_DIR.parent.parent

    INGESTION_CONFIG_PATH = CONFIG_DIR / "ingestion.yaml"

    @classmethod
    @lru_cache
    def load_ingestion_config(cls) -> dict:
        """Loads the bundled YAML defaults for ingest calls."""
        return _read_yaml(cls.INGESTION_CONFIG_PATH)


class IngestConfig(BaseModel):
    """
    Per-call configuration of the ingest pipeline.

    ``as_of`` anchors the return-window rule; when None the orchestrator reads
    the wall clock once per call.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    return_window_days: int = Field(default=30, ge=0, alias="returnWindowDays")
    as_of: Optional[datetime] = Field(default=None, alias="asOf")
    max_workers: int = Field(default=1, ge=1, alias="maxWorkers")
    email_mask: str = Field(default="****", min_length=1, alias="emailMask")

    @field_validator("as_of")
    @classmethod
    def validate_as_of(cls, v: Optional[datetime]) -> Optional[datetime]:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @classmethod
    def from_settings(cls, settings: Optional[IngestSettings] = None) -> "IngestConfig":
        settings = settings or get_settings()
        return cls(
            return_window_days=settings.RETURN_WINDOW_DAYS,
            max_workers=settings.MAX_WORKERS,
            email_mask=settings.EMAIL_MASK,
        )

    def merged(
        self, overrides: Union["IngestConfig", Mapping[str, Any], None]
    ) -> "IngestConfig":
        """
        Overlay a partial config on this one.

        ``overrides`` may use either the Python or the camelCase field names,
        e.g. ``{"returnWindowDays": 45}``.
        """
        if overrides is None:
            return self
        if isinstance(overrides, IngestConfig):
            data = overrides.model_dump(exclude_unset=True)
        else:
            data = IngestConfig.model_validate(dict(overrides)).model_dump(
                exclude_unset=True
            )
        return self.model_copy(update=data)


def load_ingest_config(path: Union[str, Path, None] = None) -> IngestConfig:
    """
    Build an IngestConfig from a YAML file.

    Values under the file's ``ingest:`` key are overlaid on the environment
    defaults. Without a path the bundled ``ingestion.yaml`` is used.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        pydantic.ValidationError: If a value is invalid.
    """
    if path is None:
        raw = Config.load_ingestion_config()
    else:
        raw = _read_yaml(Path(path))

    section = raw.get("ingest") or {}
    return IngestConfig.from_settings().merged(section)


def _read_yaml(path: Path) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"Missing config at {path}")

    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}
