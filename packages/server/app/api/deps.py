"""Request-scoped access to the service container built at startup."""

from __future__ import annotations

from fastapi import Request

from app.services.container import ServiceContainer


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services
