"""
Device proxy API routes
"""

from fastapi import APIRouter, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel
from typing import Any, Dict, Optional
import logging

from hub.client import HubApiError

logger = logging.getLogger(__name__)

# Request models
class DevicePatchRequest(BaseModel):
    attributes: Optional[Dict[str, Any]] = None


def create_device_routes(hub_client):
    """Create device list/patch routes forwarding to the hub"""
    router = APIRouter(tags=["devices"])

    @router.get("/devices")
    async def list_devices():
        """Return the hub's raw device array unmodified"""
        try:
            devices = await hub_client.list_devices()
            return JSONResponse(content=devices)
        except HubApiError as e:
            logger.error(f"Error fetching devices: HTTP {e.status} {e.body}")
            return PlainTextResponse("Error fetching devices", status_code=500)
        except Exception as e:
            logger.error(f"Error fetching devices: {e}")
            return PlainTextResponse("Error fetching devices", status_code=500)

    @router.patch("/devices/{device_id}")
    async def patch_device(device_id: str, request: Optional[DevicePatchRequest] = None):
        """Validate the attribute patch and forward it to the hub"""
        attributes = request.attributes if request else None
        if not attributes:
            return PlainTextResponse(
                "Bad Request: 'attributes' payload is missing or empty.", status_code=400
            )

        logger.info(f"PATCHing device {device_id} with attributes: {attributes}")

        try:
            await hub_client.patch_device(device_id, attributes)
        except HubApiError as e:
            logger.error(f"Error updating device {device_id}: HTTP {e.status} {e.body}")
            return PlainTextResponse(f"Error updating device: {e.body}", status_code=500)
        except Exception as e:
            logger.error(f"Error updating device {device_id}: {e}")
            return PlainTextResponse(f"Error updating device: {e}", status_code=500)

        return Response(status_code=204)

    return router
