"""Configuration models using Pydantic."""

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from session_guard.constants import DEFAULT_QUOTA_INFO_RATIO, DEFAULT_QUOTA_WARN_RATIO
from session_guard.format import clamp_ratio


class QuotaConfig(BaseModel):
    """Persisted storage quota.

    Stored under the "quota" key of the guard's JSON file using camelCase
    keys. Ratios are clamped into [0, 1] (malformed values fall back to the
    defaults) and reordered so info_ratio <= warn_ratio always holds.
    """

    model_config = ConfigDict(populate_by_name=True)

    max_total_size_bytes: int = Field(alias="maxTotalSizeBytes", gt=0)
    info_ratio: float = Field(default=DEFAULT_QUOTA_INFO_RATIO, alias="infoRatio")
    warn_ratio: float = Field(default=DEFAULT_QUOTA_WARN_RATIO, alias="warnRatio")

    @field_validator("max_total_size_bytes", mode="before")
    @classmethod
    def _floor_size(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("maxTotalSizeBytes must be a number")
        if isinstance(value, str):
            try:
                value = float(value)
            except ValueError as e:
                raise ValueError("maxTotalSizeBytes must be a number") from e
        if isinstance(value, float):
            if not math.isfinite(value):
                raise ValueError("maxTotalSizeBytes must be finite")
            return math.floor(value)
        return value

    @field_validator("info_ratio", mode="before")
    @classmethod
    def _clamp_info(cls, value: Any) -> float:
        return clamp_ratio(value, DEFAULT_QUOTA_INFO_RATIO)

    @field_validator("warn_ratio", mode="before")
    @classmethod
    def _clamp_warn(cls, value: Any) -> float:
        return clamp_ratio(value, DEFAULT_QUOTA_WARN_RATIO)

    @model_validator(mode="after")
    def _order_ratios(self) -> "QuotaConfig":
        if self.info_ratio > self.warn_ratio:
            self.info_ratio, self.warn_ratio = self.warn_ratio, self.info_ratio
        return self

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the on-disk camelCase keys."""
        return self.model_dump(by_alias=True)
