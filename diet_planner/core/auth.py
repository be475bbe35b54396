"""
Internal API authentication dependency.

The generation endpoints are internal: only the diet planner backend (which
owns users, plans and persistence) is allowed to call them.

How it works:
  - Backend sends header: X-Internal-Secret: <INTERNAL_API_SECRET>
  - This service checks it matches the env var
  - Returns 403 if missing or wrong, 503 if the secret is not configured
"""
import os
from fastapi import Header, HTTPException
from typing import Annotated


SECRET = os.getenv("INTERNAL_API_SECRET", "")


def verify_internal_secret(x_internal_secret: Annotated[str, Header()] = "") -> None:
    """FastAPI dependency: validates the shared internal secret header."""
    if not SECRET:
        # Unconfigured secret blocks everything rather than exposing the AI endpoints
        raise HTTPException(
            status_code=503,
            detail="Service not configured (INTERNAL_API_SECRET not set)"
        )
    if x_internal_secret != SECRET:
        raise HTTPException(
            status_code=403,
            detail="Forbidden: invalid or missing internal secret"
        )
