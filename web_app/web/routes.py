"""Redirect and load-balancer probe routes."""

from fastapi import APIRouter, Request, HTTPException, status
from fastapi.responses import RedirectResponse

router = APIRouter()


@router.get("/health", include_in_schema=False)
async def health_check_web(request: Request):
    """Health check endpoint (simple version for load balancers)."""
    service = request.app.state.service

    health = await service.health_check()

    if health["overall"]:
        return {"status": "healthy"}
    raise HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Service unhealthy",
    )


@router.get("/{short_code}", include_in_schema=False)
async def redirect_to_url(request: Request, short_code: str):
    """Redirect to the original URL (404 via NotFoundError if unknown)."""
    service = request.app.state.service

    original_url = await service.resolve(short_code)

    return RedirectResponse(url=original_url, status_code=status.HTTP_302_FOUND)
