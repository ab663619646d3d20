"""
Routes for the license server.
"""

import logging
from typing import Any, Callable, TypeVar

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from tornade_license.common.exceptions import InvalidRequest, LicenseError
from tornade_license.common.models import (
    ActivateRequest,
    ActivationStatusRequest,
    IssueLicenseRequest,
    ValidateKeyRequest,
)

from .services import LicenseService

ModelT = TypeVar("ModelT", bound=BaseModel)

logger = logging.getLogger(__name__)


def error_response(err: LicenseError) -> JSONResponse:
    return JSONResponse({"error": err.code}, status_code=err.status_code)


class LicenseRoutes:
    """Handles FastAPI routes for the license server."""

    def __init__(self, service: LicenseService, admin_password: str | None):
        self.service = service
        self.admin_password = admin_password

    def setup_routes(self, app: FastAPI) -> None:
        """Setup API routes on the FastAPI app."""

        app.get("/health")(self.health)
        app.post("/api/activate")(self.activate)
        app.post("/api/validate")(self.validate_key)
        if self.admin_password:
            app.post("/admin/issue")(self.issue)
            app.post("/admin/activations")(self.activation_status)

    @staticmethod
    async def _parse(request: Request, model: type[ModelT]) -> ModelT:
        """Decode a JSON body into ``model``; any failure is ``InvalidRequest``."""
        try:
            body = await request.json()
        except ValueError as e:
            raise InvalidRequest("body is not JSON") from e
        if not isinstance(body, dict):
            raise InvalidRequest("body must be a JSON object")
        try:
            return model.model_validate(body)
        except ValidationError as e:
            raise InvalidRequest(str(e)) from e

    async def _handle(
        self,
        request: Request,
        model: type[ModelT],
        handler: Callable[[ModelT], Any],
    ) -> Any:
        try:
            req = await self._parse(request, model)
            return await run_in_threadpool(handler, req)
        except LicenseError as e:
            logger.debug("%s %s -> %s", request.method, request.url.path, e.code)
            return error_response(e)

    async def health(self) -> dict[str, Any]:
        """Handle /health endpoint."""
        return self.service.health()

    async def activate(self, request: Request) -> Any:
        """Handle /api/activate endpoint."""
        return await self._handle(request, ActivateRequest, self.service.activate)

    async def validate_key(self, request: Request) -> Any:
        """Handle /api/validate endpoint."""
        return await self._handle(
            request, ValidateKeyRequest, self.service.validate_key
        )

    async def issue(self, request: Request) -> Any:
        """Handle /admin/issue endpoint."""
        return await self._handle(request, IssueLicenseRequest, self.service.issue)

    async def activation_status(self, request: Request) -> Any:
        """Handle /admin/activations endpoint."""
        return await self._handle(
            request, ActivationStatusRequest, self.service.activation_status
        )
