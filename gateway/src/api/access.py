"""
GET /auth-check endpoint used by the dashboard sign-in page.

Answers 200 ``{"authenticated": true}`` when the bearer token passes the
access gate, otherwise 401 ``{"authenticated": false}``. Unlike the API routes
the failure body is a plain flag so the sign-in page can test a token without
parsing an error detail.

CHANGELOG:
- 2026-10-19: Initial creation (STORY-013)

TODO:
- None
"""

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

router = APIRouter(tags=["auth"])


@router.get("/auth-check")
async def auth_check(request: Request) -> JSONResponse:
    """Report whether the request's bearer token is accepted."""
    try:
        await request.app.state.gate.verify(request)
    except HTTPException as exc:
        return JSONResponse(
            {"authenticated": False},
            status_code=exc.status_code,
            headers=exc.headers,
        )
    return JSONResponse({"authenticated": True})
