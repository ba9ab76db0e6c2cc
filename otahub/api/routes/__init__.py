from otahub.api.routes.firmware import router as firmware_router
from otahub.api.routes.ota import router as ota_router

__all__ = ["firmware_router", "ota_router"]
