from __future__ import annotations

from fastapi import APIRouter, Depends

from ratelimiter.core.rate_limit import enforce_rate_limit

router = APIRouter(tags=["Hello"])


@router.get("/hello", dependencies=[Depends(enforce_rate_limit)])
def hello() -> dict[str, str]:
    """Rate limited sample resource.

    Returns:
        dict: ``{"message": "Hello World"}``.
    """

    return {"message": "Hello World"}
