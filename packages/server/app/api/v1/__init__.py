"""
API v1 Router

Fanclub, membership and post endpoints. Identity comes only from the
verified session (see app.core.identity); no endpoint accepts a user id from
the query string or body.
"""

from fastapi import APIRouter
from fanclub_shared.schemas.common import ErrorResponse
from . import fanclubs, posts, me

# Every core error is rendered as ErrorResponse by app.core.http_errors
ERROR_RESPONSES = {
    status: {"model": ErrorResponse} for status in (400, 401, 403, 404, 409, 500)
}

router = APIRouter()

router.include_router(
    fanclubs.router, prefix="/fanclubs", tags=["Fanclubs"], responses=ERROR_RESPONSES
)
router.include_router(posts.router, tags=["Posts"], responses=ERROR_RESPONSES)
router.include_router(me.router, prefix="/me", tags=["Me"], responses=ERROR_RESPONSES)


@router.get("/", tags=["API"])
async def api_root():
    """API root — returns version and available endpoints."""
    return {
        "api": "v1",
        "version": "0.1.0",
        "endpoints": [
            "/fanclubs",
            "/fanclubs/search",
            "/fanclubs/{fanclubId}/posts",
            "/posts/{postId}",
            "/me/memberships",
        ],
    }
