from __future__ import annotations

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _to_bool(value: Union[str, bool, int]) -> bool:
    if not isinstance(value, str):
        return bool(value)
    normalized = value.strip().lower()
    return normalized in {"1", "true", "yes", "on", "y"}


class BoundedStoreSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    capacity: int = Field(1024, ge=1)


class TTLSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    name: str = Field("default", min_length=1)
    prune_interval_seconds: float = Field(3600.0, gt=0.0)
    # None derives the prefix from the table name.
    value_prefix: Optional[str] = Field(None, min_length=1)
    autostart_pruning: bool = True

    @field_validator("autostart_pruning", mode="before")
    @classmethod
    def _parse_autostart(cls, value: Union[str, bool]) -> bool:
        return _to_bool(value)


class StoreSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    codec: Literal["binary", "json"] = "binary"

    @field_validator("codec", mode="before")
    @classmethod
    def _normalise_codec(cls, value: str) -> str:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class LoggingSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    service_name: str = "kvcache"
    level: str = "INFO"
    log_dir: Optional[str] = None

    @field_validator("level", mode="before")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        if isinstance(value, str):
            return value.strip().upper() or "INFO"
        return value


class AppSettings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    version: int = 1
    bounded: BoundedStoreSettings = Field(
        default_factory=lambda: BoundedStoreSettings()
    )
    ttl: TTLSettings = Field(default_factory=lambda: TTLSettings())
    store: StoreSettings = Field(default_factory=lambda: StoreSettings())
    logging: LoggingSettings = Field(default_factory=lambda: LoggingSettings())
