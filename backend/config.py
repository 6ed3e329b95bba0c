"""Runtime configuration read from the environment (and .env, if present)."""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

# Default DB lives in data/ next to the backend (gitignored)
_DB_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data")
DEFAULT_DATABASE_URL = f"sqlite:///{os.path.join(_DB_DIR, 'circuitsage.db')}"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    frontend_url: Optional[str] = None
    # Upper bound on graph sample count; 0 disables the guard
    max_graph_points: int = 10000
    history_page_limit: int = 100
    rate_limit_per_minute: int = 60
    compute_rate_limit_per_minute: int = 30
    seed_data: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
            frontend_url=os.getenv("FRONTEND_URL"),
            max_graph_points=_env_int("MAX_GRAPH_POINTS", 10000),
            history_page_limit=_env_int("HISTORY_PAGE_LIMIT", 100),
            rate_limit_per_minute=_env_int("RATE_LIMIT_PER_MINUTE", 60),
            compute_rate_limit_per_minute=_env_int("COMPUTE_RATE_LIMIT_PER_MINUTE", 30),
            seed_data=_env_bool("SEED_DATA", True),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def graph_point_limit(self) -> Optional[int]:
        return self.max_graph_points if self.max_graph_points > 0 else None
