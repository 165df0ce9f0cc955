"""Health check routes."""

from datetime import datetime

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter
from pydantic import BaseModel

from threadline.config import Settings

router = APIRouter(tags=["health"], route_class=DishkaRoute)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    git_sha: str
    segment_width: int
    alphabet_size: int


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: FromDishka[Settings]) -> HealthResponse:
    """Basic health check endpoint.

    Returns:
        Health status and the active tree shape
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(),
        git_sha=settings.git_sha,
        segment_width=settings.tree.segment_width,
        alphabet_size=len(settings.tree.alphabet),
    )
