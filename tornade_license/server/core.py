"""
License server wiring using FastAPI.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from fastapi import FastAPI

from tornade_license.common.config import Config
from tornade_license.common.logging_utils import setup_logger

from .activation_ledger import ActivationLedger
from .delivery import LoggingKeyDelivery
from .key_issuer import KeyIssuer
from .persistence import InMemoryActivationStore, JsonFileActivationStore
from .routes import LicenseRoutes
from .services import LicenseService

if TYPE_CHECKING:
    from tornade_license.common.interfaces import IActivationStore, IKeyDelivery


def build_store(config: Config, store_path: Path | None = None) -> IActivationStore:
    """Create the activation store selected by the configuration."""
    if config.STORE_BACKEND == "memory":
        return InMemoryActivationStore()
    return JsonFileActivationStore(
        store_path or config.STORE_PATH, lock_timeout=config.LOCK_TIMEOUT
    )


class LicenseServer:
    """Builds the components and the FastAPI app serving them."""

    def __init__(  # noqa: PLR0913
        self,
        config: Config | None = None,
        store: IActivationStore | None = None,
        delivery: IKeyDelivery | None = None,
        max_activations: int | None = None,
        admin_password: str | None = None,
        server_host: str | None = None,
        server_port: int | None = None,
        store_path: Path | None = None,
        log_level: int | None = None,
    ):
        self.config = config or Config()
        self.logger = logging.getLogger("tornade_license")
        setup_logger(
            self.logger, log_level if log_level is not None else self.config.LOG_LEVEL
        )
        self.admin_password = admin_password or self.config.ADMIN_PASSWORD
        self.server_host = (
            server_host if server_host is not None else self.config.SERVER_HOST
        )
        self.server_port = (
            server_port if server_port is not None else self.config.SERVER_PORT
        )

        self.store = store or build_store(self.config, store_path)
        self.key_issuer = KeyIssuer(self.config)
        self.ledger = ActivationLedger(
            self.config, self.store, max_activations=max_activations
        )
        self.delivery = delivery or LoggingKeyDelivery()
        self.service = LicenseService(
            config=self.config,
            key_issuer=self.key_issuer,
            ledger=self.ledger,
            delivery=self.delivery,
            logger=self.logger,
            admin_password=self.admin_password,
        )

        self.app = FastAPI(title="Tornade License Server")
        LicenseRoutes(self.service, self.admin_password).setup_routes(self.app)

        self.logger.info(
            "License server configured for http://%s:%s (max %d activations per key)",
            self.server_host,
            self.server_port,
            self.ledger.max_activations,
        )
        if not self.admin_password:
            self.logger.info("TORNADE_ADMIN_PASSWORD not set, admin endpoints disabled")
