from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["Health"])


@router.get("/", response_class=PlainTextResponse)
def welcome() -> str:
    return "Welcome to the Analytics API 😊!"


@router.get("/health")
def health_check() -> dict:
    """Health check endpoint.

    Liveness only: it does not touch the counter store or the database, and
    it is never rate limited.

    Returns:
        dict: A dictionary with a single "status" key set to "ok".
    """

    return {"status": "ok"}
