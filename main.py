from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware
from core.config_loader import settings
from core.logging_config import configure_logging

from location.router import location_router
from contract.router import contract_router
from shift.router import shift_router
from shifttemplate.router import shifttemplate_router
from shifttemplate import consumer as shifttemplate_consumer
from messaging.bus import bus
import models_bootstrap

configure_logging()

openapi_tags = [
    {
        "name": "Contracts",
        "description": "Contract activation and expiration",
    },
    {
        "name": "Shift Templates",
        "description": "Templates reconciled from activated contracts",
    },
    {
        "name": "Health Checks",
        "description": "Application health checks",
    }
]

app = FastAPI(openapi_tags=openapi_tags)

if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            str(origin).strip("/") for origin in settings.BACKEND_CORS_ORIGINS
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(location_router, prefix="/api")
app.include_router(contract_router, prefix="/api")
app.include_router(shift_router, prefix="/api")
app.include_router(shifttemplate_router, prefix="/api")

# contract.activated -> template import, in-process
shifttemplate_consumer.register(bus)


@app.get("/health", tags=['Health Checks'])
def read_root():
    return {"health": "true"}
