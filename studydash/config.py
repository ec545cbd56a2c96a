from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from studydash.constants import EXTRA_SOURCES

load_dotenv()


@dataclass(frozen=True)
class Settings:
    jwt_secret: str
    canvas_api_url: str = "https://uc.instructure.com/api/v1"
    db_path: Path = Path("data/studydash.db")
    jwt_expires_hours: int = 24
    cors_origin: str = "http://localhost:5173"
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"
    canvas_timeout_seconds: float = 30.0
    # background sync
    scheduler_enabled: bool = True
    sync_interval_hours: float = 3
    sync_cache_hours: float = 1
    sync_active_days: int = 7
    sync_course_delay_seconds: float = 0.5
    # optional enrichment sources, see constants.EXTRA_SOURCES
    sync_extra_sources: tuple[str, ...] = field(default_factory=tuple)
    planner_months_before: int = 2
    planner_months_after: int = 3
    users_file: Optional[Path] = None

    @property
    def canvas_web_url(self) -> str:
        """Canvas UI base, i.e. the API URL without its /api/v1 suffix."""
        base = self.canvas_api_url.rstrip("/")
        if base.lower().endswith("/api/v1"):
            base = base[: -len("/api/v1")]
        elif base.lower().endswith("/api"):
            base = base[: -len("/api")]
        return base


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _parse_sources(raw: str) -> tuple[str, ...]:
    sources = []
    for part in raw.split(","):
        name = part.strip().lower()
        if not name:
            continue
        if name not in EXTRA_SOURCES:
            raise RuntimeError(f"SYNC_EXTRA_SOURCES: unknown source '{name}' (expected one of {', '.join(EXTRA_SOURCES)})")
        sources.append(name)
    return tuple(sources)


def load_settings() -> Settings:
    jwt_secret = os.getenv("JWT_SECRET", "").strip()
    if not jwt_secret:
        raise RuntimeError("JWT_SECRET missing in .env")

    try:
        port = int(os.getenv("PORT", "5000").strip())
        jwt_hours = int(os.getenv("JWT_EXPIRES_HOURS", "24").strip())
        interval = float(os.getenv("SYNC_INTERVAL_HOURS", "3").strip())
        cache = float(os.getenv("SYNC_CACHE_HOURS", "1").strip())
        active_days = int(os.getenv("SYNC_ACTIVE_DAYS", "7").strip())
        delay = float(os.getenv("SYNC_COURSE_DELAY_SECONDS", "0.5").strip())
        timeout = float(os.getenv("CANVAS_TIMEOUT_SECONDS", "30").strip())
        months_before = int(os.getenv("PLANNER_MONTHS_BEFORE", "2").strip())
        months_after = int(os.getenv("PLANNER_MONTHS_AFTER", "3").strip())
    except ValueError as e:
        raise RuntimeError(f"Invalid numeric setting in .env: {e}") from e

    if interval <= 0:
        raise RuntimeError("SYNC_INTERVAL_HOURS must be positive")

    users_raw = os.getenv("USERS_FILE", "").strip()

    # a relative db_path is resolved against the working directory by create_app
    return Settings(
        jwt_secret=jwt_secret,
        canvas_api_url=os.getenv("CANVAS_API_URL", "https://uc.instructure.com/api/v1").strip().rstrip("/"),
        db_path=Path(os.getenv("DB_PATH", "data/studydash.db").strip()),
        jwt_expires_hours=jwt_hours,
        cors_origin=os.getenv("CORS_ORIGIN", "http://localhost:5173").strip(),
        host=os.getenv("HOST", "0.0.0.0").strip(),
        port=port,
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
        canvas_timeout_seconds=timeout,
        scheduler_enabled=_env_bool("SCHEDULER_ENABLED", True),
        sync_interval_hours=interval,
        sync_cache_hours=cache,
        sync_active_days=active_days,
        sync_course_delay_seconds=delay,
        sync_extra_sources=_parse_sources(os.getenv("SYNC_EXTRA_SOURCES", "")),
        planner_months_before=months_before,
        planner_months_after=months_after,
        users_file=Path(users_raw) if users_raw else None,
    )
