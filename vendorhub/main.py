import logging

from fastapi import FastAPI

from vendorhub.api.errors import register_error_handlers
from vendorhub.api.v1.router import router as v1_router
from vendorhub.core.telemetry import setup_telemetry

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="Vendor Hub API", version="0.1.0")

setup_telemetry(app)
register_error_handlers(app)
app.include_router(v1_router)
