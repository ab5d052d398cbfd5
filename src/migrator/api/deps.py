"""
FastAPI dependency injection — settings and config-service client.

Both are stashed on ``app.state`` by ``create_app`` so tests can supply
their own.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from migrator.core.config_service import ConfigServiceClient
from migrator.core.settings import MigratorSettings
from migrator.ops.upgrade import BackendFactory


def get_settings(request: Request) -> MigratorSettings:
    return request.app.state.settings


def get_client(request: Request) -> ConfigServiceClient:
    return request.app.state.client


def get_connect(request: Request) -> BackendFactory:
    return request.app.state.connect


Settings = Annotated[MigratorSettings, Depends(get_settings)]
Client = Annotated[ConfigServiceClient, Depends(get_client)]
Connect = Annotated[BackendFactory, Depends(get_connect)]
