"""
System health API routes
"""

from fastapi import APIRouter
from pydantic import BaseModel
from datetime import datetime, timezone

# Response models
class SystemHealthResponse(BaseModel):
    status: str
    hub_address: str
    hub_base_url: str
    version: str
    timestamp: datetime

def create_system_routes(hub_client, version: str):
    """Create system monitoring routes"""
    router = APIRouter(prefix="/system", tags=["system"])

    @router.get("/health", response_model=SystemHealthResponse)
    async def system_health():
        """Report the discovered hub address without calling the hub"""
        return SystemHealthResponse(
            status="healthy",
            hub_address=hub_client.address,
            hub_base_url=hub_client.base_url,
            version=version,
            timestamp=datetime.now(timezone.utc)
        )

    return router
