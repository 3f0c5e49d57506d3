"""
db/config.py

Environment-driven database configuration.

The database is optional for this project: it is only touched when rollup
persistence is enabled, so nothing here runs at import time.
"""

from __future__ import annotations

import os
from pathlib import Path

ENV_FILES: tuple[str, ...] = (".env", ".env.local")

CLOUD_ENVIRONMENTS: frozenset[str] = frozenset({"prod", "production", "staging", "cloud"})


def load_env_files(root: Path | None = None) -> None:
    """
    Load KEY=VALUE pairs from `.env` and `.env.local` under ``root``.

    Variables already present in the process environment win.
    """

    project_root = root or Path(__file__).resolve().parents[1]
    for filename in ENV_FILES:
        env_path = project_root / filename
        if not env_path.is_file():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if line.startswith("export "):
                line = line[len("export "):].strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            if key:
                os.environ.setdefault(key, value.strip().strip('"').strip("'"))


def normalize_postgres_url(url: str) -> str:
    """
    Rewrite bare postgres URLs to the psycopg (v3) SQLAlchemy driver.
    """

    url = url.strip()
    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix):]
    return url


def resolve_database_url() -> str:
    """
    Pick the database URL for the current environment.

    DATABASE_URL wins; otherwise CLOUD_DATABASE_URL when ENVIRONMENT names a
    cloud deployment, then LOCAL_DATABASE_URL.
    """

    load_env_files()

    environment = os.getenv("ENVIRONMENT", "local").strip().lower()
    candidates = ["DATABASE_URL"]
    if environment in CLOUD_ENVIRONMENTS:
        candidates.append("CLOUD_DATABASE_URL")
    candidates.append("LOCAL_DATABASE_URL")

    for name in candidates:
        value = os.getenv(name, "").strip()
        if value:
            return normalize_postgres_url(value)

    raise RuntimeError(
        "Rollup persistence is enabled but no database URL is configured. "
        "Set DATABASE_URL, or LOCAL_DATABASE_URL / CLOUD_DATABASE_URL."
    )
