"""Health check endpoints.

- /health: liveness, always ok
- /healthz: checks the key-value store (Redis when configured) and reports
  which reasoning service is active
"""

import json
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Response

from lastmile.api.deps import Services, get_services
from lastmile.store.kv import KeyValueStore

router = APIRouter()


async def check_store(kv: KeyValueStore) -> tuple[bool, str]:
    """Check key-value store connectivity.

    Returns:
        (is_ok, status_message)
    """
    try:
        if kv.ping():
            return (True, "ok")
        return (False, "unreachable")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz(
    services: Annotated[Services, Depends(get_services)],
) -> dict[str, Any] | Response:
    """Health check endpoint.

    Returns:
        200 with component status if the store is reachable
        503 otherwise
    """
    store_ok, store_status = await check_store(services.kv)

    response_body = {
        "status": "ok" if store_ok else "degraded",
        "components": {
            "store": store_status,
            "reasoning": services.reasoning.name,
            "live_tracking": "degraded" if services.live.degraded else "ok",
        },
    }

    if not store_ok:
        return Response(
            content=json.dumps(response_body),
            status_code=503,
            media_type="application/json",
        )

    return response_body
