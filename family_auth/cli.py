"""Small CLI helpers exposed as console scripts for developer convenience.

Usage (from project root, after `pip install -e .`):
  runserver --host=0.0.0.0 --port=8000 --no-reload
  run-tests
  init-db           # create missing tables
  purge-tokens      # delete expired refresh tokens now
  init-env          # copies .env.example -> .env if missing
"""
from __future__ import annotations

import sys
import shutil
import subprocess
from pathlib import Path
from typing import List


def _args() -> List[str]:
    return sys.argv[1:]


def runserver() -> None:
    """Run Uvicorn programmatically. Accepts simple flags:

    --host=<host>  (default 127.0.0.1)
    --port=<port>  (default 8000)
    --no-reload    (disable auto-reload)
    --reload       (enable auto-reload)
    """
    import uvicorn

    host = "127.0.0.1"
    port = 8000
    reload = True

    for a in _args():
        if a.startswith("--host="):
            host = a.split("=", 1)[1]
        elif a.startswith("--port="):
            value = a.split("=", 1)[1]
            if not value.isdigit():
                sys.exit(f"Invalid port: {value}")
            port = int(value)
        elif a == "--no-reload":
            reload = False
        elif a == "--reload":
            reload = True

    print(f"Starting uvicorn on {host}:{port} (reload={reload})")
    uvicorn.run("family_auth.main:app", host=host, port=port, reload=reload)


def run_tests() -> None:
    """Run pytest with any forwarded args."""
    cmd = ["pytest"] + _args()
    subprocess.run(cmd, check=True)


def init_database() -> None:
    """Create any missing tables in DATABASE_URL."""
    from family_auth.core.database import init_db
    from family_auth.core.logger import setup_logging

    setup_logging()
    init_db()
    print("Database tables created")


def purge_tokens() -> None:
    """Run the expired refresh-token sweep once, in-process."""
    from family_auth.core.database import SessionLocal
    from family_auth.core.logger import setup_logging
    from family_auth.tasks.session_tasks import purge_expired

    setup_logging()
    db = SessionLocal()
    try:
        deleted = purge_expired(db)
    finally:
        db.close()
    print(f"Deleted {deleted} expired refresh tokens")


def init_env() -> None:
    """Copy `.env.example` to `.env` if `.env` is missing."""
    root = Path(__file__).resolve().parents[1]
    src = root / ".env.example"
    dst = root / ".env"
    if dst.exists():
        print(f".env already exists at {dst}")
        return
    if not src.exists():
        print(f".env.example not found at {src}")
        return
    shutil.copy(src, dst)
    print(f"Created .env from .env.example at {dst}")


if __name__ == "__main__":
    # Allow running the helpers directly: python -m family_auth.cli runserver
    if len(sys.argv) <= 1:
        print(__doc__)
        sys.exit(0)
    cmd = sys.argv[1]
    sys.argv.pop(1)
    if cmd == "runserver":
        runserver()
    elif cmd in ("run-tests", "tests", "test"):
        run_tests()
    elif cmd in ("init-db", "initdb"):
        init_database()
    elif cmd in ("purge-tokens", "purge"):
        purge_tokens()
    elif cmd in ("init-env", "initenv"):
        init_env()
    else:
        print(f"Unknown command: {cmd}")
