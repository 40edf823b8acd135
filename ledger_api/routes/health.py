"""
Health check.

GET /health - liveness and version
"""

from fastapi import APIRouter

from ledger_api.responses import envelope
from ledger_kernel import __version__

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check():
    return envelope(200, "Service is healthy", {"status": "ok", "version": __version__})
