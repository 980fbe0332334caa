"""
FastAPI app exposing read-only schema introspection.
Run with `uvicorn datalayer.api:app`.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI

from . import __version__
from .config import load_settings

logging.basicConfig(level=load_settings().log_level.upper())

app = FastAPI(title="datalayer-api", version=__version__)


from .routes import base as base_routes
from .routes import schema as schema_routes

app.include_router(base_routes.router)
app.include_router(schema_routes.router)
