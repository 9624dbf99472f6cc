"""Run the Home Management Hub ASGI application with uvicorn."""

from __future__ import annotations

import os
from typing import Optional

import uvicorn

DEFAULT_PORT = 5000


def resolve_port(environ: Optional[dict[str, str]] = None) -> int:
    """Listen port from ``PORT`` (hosting platforms) or ``HOMEHUB_SERVER_PORT``."""

    env = os.environ if environ is None else environ
    raw = env.get("PORT") or env.get("HOMEHUB_SERVER_PORT") or str(DEFAULT_PORT)
    try:
        return int(raw)
    except ValueError as exc:
        raise SystemExit(f"Invalid port '{raw}': {exc}") from exc


def main() -> None:
    """Serve ``homehub.server.app:app`` until interrupted."""

    host = os.environ.get("HOMEHUB_SERVER_HOST", "127.0.0.1")
    uvicorn.run("homehub.server.app:app", host=host, port=resolve_port())


if __name__ == "__main__":
    main()
