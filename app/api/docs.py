"""OpenAPI document with the bearer security scheme applied globally."""

from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

from app.api.middleware.auth import BEARER_DESCRIPTION

DOCS_URL = "/swagger"
REDOC_URL = "/redoc"
OPENAPI_URL = "/swagger/v1/swagger.json"

BEARER_SCHEME: dict[str, Any] = {
    "type": "http",
    "scheme": "bearer",
    "bearerFormat": "JWT",
    "description": BEARER_DESCRIPTION,
}


def docs_urls(enabled: bool) -> dict[str, str | None]:
    """FastAPI constructor arguments; all None disables the docs routes."""
    if not enabled:
        return {"docs_url": None, "redoc_url": None, "openapi_url": None}
    return {"docs_url": DOCS_URL, "redoc_url": REDOC_URL, "openapi_url": OPENAPI_URL}


def install_openapi(app: FastAPI) -> None:
    """Replace ``app.openapi`` with a generator that adds the Bearer scheme."""

    def openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )
        schemes = schema.setdefault("components", {}).setdefault("securitySchemes", {})
        schemes["Bearer"] = BEARER_SCHEME
        schema["security"] = [{"Bearer": []}]
        app.openapi_schema = schema
        return schema

    app.openapi = openapi
