"""Quota config persistence in the guard's JSON file.

The file may hold other top-level keys owned by other tools; writes are
read-modify-write so those keys survive verbatim.
"""

from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any

import aiofiles
from pydantic import ValidationError

from session_guard.config.models import QuotaConfig
from session_guard.config.paths import get_quota_config_path
from session_guard.constants import DEFAULT_QUOTA_INFO_RATIO, DEFAULT_QUOTA_WARN_RATIO

logger = logging.getLogger(__name__)


class QuotaStore:
    """Reads and writes the "quota" section of the guard config file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or get_quota_config_path()

    async def _load_root(self) -> Any:
        async with aiofiles.open(self.path, encoding="utf-8") as f:
            raw = await f.read()
        return json.loads(raw)

    async def read(self) -> QuotaConfig | None:
        """Load the quota config.

        Returns:
            The config, or None when the file is missing, unreadable or has
            no valid quota (missing or non-positive max size).
        """
        try:
            data = await self._load_root()
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            logger.debug(
                "quota_config_unreadable",
                extra={"file.path": str(self.path), "error.message": str(e)},
            )
            return None

        if not isinstance(data, dict):
            return None
        quota = data.get("quota")
        if not isinstance(quota, dict):
            return None

        try:
            return QuotaConfig.model_validate(quota)
        except ValidationError as e:
            logger.debug(
                "quota_config_invalid",
                extra={"file.path": str(self.path), "error.message": str(e)},
            )
            return None

    async def write(self, max_total_size_bytes: int | float) -> QuotaConfig:
        """Persist a new quota size, resetting thresholds to the defaults.

        Args:
            max_total_size_bytes: Quota in bytes; floored to an integer.

        Returns:
            The config as written.

        Raises:
            ValueError: If the size is not a finite positive number. Such
                values are never persisted.
        """
        if (
            isinstance(max_total_size_bytes, bool)
            or not isinstance(max_total_size_bytes, (int, float))
            or not math.isfinite(max_total_size_bytes)
        ):
            raise ValueError(f"Invalid quota size: {max_total_size_bytes!r}")
        size = math.floor(max_total_size_bytes)
        if size <= 0:
            raise ValueError(f"Quota size must be positive: {max_total_size_bytes!r}")

        root: dict[str, Any] = {}
        try:
            data = await self._load_root()
            if isinstance(data, dict):
                root = dict(data)
        except (OSError, ValueError):
            root = {}

        existing = root.get("quota")
        quota: dict[str, Any] = dict(existing) if isinstance(existing, dict) else {}
        quota["maxTotalSizeBytes"] = size
        quota["infoRatio"] = DEFAULT_QUOTA_INFO_RATIO
        quota["warnRatio"] = DEFAULT_QUOTA_WARN_RATIO
        root["quota"] = quota

        self.path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(self.path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(root, indent=2, ensure_ascii=False) + "\n")

        logger.info(
            "quota_config_written",
            extra={"file.path": str(self.path), "quota.bytes": size},
        )
        return QuotaConfig.model_validate(quota)
