from typing import Any

from fastapi import APIRouter, Request
from sqlalchemy import text


router = APIRouter(tags=["health"])


@router.get("/health", summary="Readiness probe")
async def health(request: Request) -> dict[str, Any]:
    """Check health of the service and its backing store."""

    health_status: dict[str, Any] = {
        "status": "healthy",
        "dependencies": {
            "database": "unknown",
        },
    }

    session_factory = getattr(request.app.state, "session_factory", None)
    if session_factory is None:
        health_status["dependencies"]["database"] = "healthy (in-memory)"
        return health_status

    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        health_status["dependencies"]["database"] = "healthy"
    except Exception as e:
        health_status["dependencies"]["database"] = f"unhealthy: {str(e)}"
        health_status["status"] = "degraded"

    return health_status
