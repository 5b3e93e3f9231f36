#!/usr/bin/env python
"""Container entrypoint for the chat service.

Applies Alembic migrations first when asked to (``--migrate`` or
``RUN_DB_MIGRATIONS=1``), then serves ``auction_chat.main:app`` with Uvicorn.
"""

from __future__ import annotations

import argparse
import os

import uvicorn

from auction_chat.config import get_settings
from auction_chat.migration_runner import run_migrations_once


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the auction chat API and realtime endpoint")
    parser.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "8000")))
    parser.add_argument("--migrate", action="store_true", default=os.getenv("RUN_DB_MIGRATIONS") == "1")
    parser.add_argument("--reload", action="store_true")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    if args.migrate:
        print("[runserver] Applying migrations...", flush=True)
        run_migrations_once()
    print(f"[runserver] Serving {settings.app_name} on {args.host}:{args.port}", flush=True)
    uvicorn.run(
        "auction_chat.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
