"""
Entry point for the license server.
"""

from __future__ import annotations

from pathlib import Path

import uvicorn

from tornade_license.common.config import Config

from .core import LicenseServer


def start_server(config: Config | None = None, store_path: Path | None = None) -> None:
    """Start the license server."""
    server = LicenseServer(config=config or Config(), store_path=store_path)
    uvicorn.run(server.app, host=server.server_host, port=server.server_port)
