# Postponed evaluation keeps annotations as strings so importing this script stays cheap.
from __future__ import annotations

# Allow running scripts without requiring an editable install (`pip install -e .`).
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
sys.path.insert(0, str(SRC_PATH))

import os

# `uvicorn` serves the FastAPI app over ASGI during local development.
import uvicorn

# The app factory takes a typed config, so nothing is wired through module globals.
from bcyclerouter.api.app import create_app
from bcyclerouter.config.loader import load_config


def main() -> None:
    # Feed URLs, showcase mode and log level can be overridden from the environment.
    config = load_config()
    app = create_app(config)

    host = os.getenv("BCYCLEROUTER_HOST", "127.0.0.1")
    port = int(os.getenv("BCYCLEROUTER_PORT", "8000"))
    proxy_headers = os.getenv("BCYCLEROUTER_PROXY_HEADERS", "false").strip().lower() in {"1", "true", "yes", "on"}
    forwarded_allow_ips = os.getenv("BCYCLEROUTER_FORWARDED_ALLOW_IPS", "127.0.0.1")

    uvicorn.run(
        app,
        host=host,
        port=port,
        proxy_headers=proxy_headers,
        forwarded_allow_ips=forwarded_allow_ips,
    )


if __name__ == "__main__":
    main()
