import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .settings import SETTINGS_FILE, load_user_settings, parse_bool


DEFAULT_JOBS = 1
DEFAULT_DEDUPE = False


@dataclass
class AppConfig:
    jobs: int = DEFAULT_JOBS
    dedupe_renders: bool = DEFAULT_DEDUPE
    log_path: Optional[str] = None

    @classmethod
    def from_env(
        cls,
        jobs: Optional[int] = None,
        dedupe_renders: Optional[bool] = None,
        log_path: Optional[str] = None,
        settings_path: Optional[Path] = None,
    ) -> "AppConfig":
        settings = load_user_settings(settings_path or SETTINGS_FILE)

        jobs_value = _resolve_int(
            jobs,
            os.environ.get("SVG2ICON_JOBS"),
            settings.jobs,
            DEFAULT_JOBS,
            "SVG2ICON_JOBS",
        )
        if jobs_value < 0:
            raise ValueError(f"Worker count must not be negative: {jobs_value}")
        if jobs_value == 0:
            jobs_value = os.cpu_count() or 1

        dedupe_value = _resolve_bool(
            dedupe_renders,
            os.environ.get("SVG2ICON_DEDUPE"),
            settings.dedupe_renders,
            DEFAULT_DEDUPE,
            "SVG2ICON_DEDUPE",
        )
        log_path_value = log_path or os.environ.get("SVG2ICON_LOG_PATH") or settings.log_path

        return cls(
            jobs=jobs_value,
            dedupe_renders=dedupe_value,
            log_path=log_path_value,
        )


def _resolve_int(
    direct_value: Optional[int],
    env_value: Optional[str],
    stored_value: Optional[int],
    default_value: int,
    env_name: str,
) -> int:
    if direct_value is not None:
        return direct_value
    if env_value is not None:
        try:
            return int(env_value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid integer for {env_name}: {env_value}") from exc
    if stored_value is not None:
        return stored_value
    return default_value


def _resolve_bool(
    direct_value: Optional[bool],
    env_value: Optional[str],
    stored_value: Optional[bool],
    default_value: bool,
    env_name: str,
) -> bool:
    if direct_value is not None:
        return direct_value
    if env_value is not None:
        parsed = parse_bool(env_value)
        if parsed is None:
            raise ValueError(f"Invalid boolean for {env_name}: {env_value}")
        return parsed
    if stored_value is not None:
        return stored_value
    return default_value
