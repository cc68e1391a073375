"""Tonight's pick API endpoints."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from gamenight.api.dependencies import get_pick_service, valid_category
from gamenight.services.picks import PickService

router = APIRouter(prefix="/api/picks", tags=["picks"])


class PickResponse(BaseModel):
    """Last pick for a category."""

    category: str
    pick: dict[str, Any] | None
    pick_state: dict[str, Any] | None = None


class ConfidenceResponse(BaseModel):
    """Confidence tier of the last refresh."""

    category: str
    tier: str | None
    header: str | None = None
    subtext: str | None = None
    gap: int | None = None


@router.post("/{category}/refresh")
async def refresh_category(
    category: str = Depends(valid_category),
    service: PickService = Depends(get_pick_service),
) -> dict[str, Any]:
    """
    Run a refresh now and return the full result.

    Provider failures do not produce an HTTP error; they come back in the
    `error` field with an empty event list.
    """
    result = await service.refresh(category)
    return result.to_dict()


@router.post("/{category}/lock", response_model=PickResponse)
async def lock_pick(
    category: str = Depends(valid_category),
    service: PickService = Depends(get_pick_service),
):
    """Lock today's pick. No-op when there is no current pick or it is already locked."""
    transition = await service.lock_pick(category)
    return PickResponse(
        category=category,
        pick=service.get_pick(category),
        pick_state=transition.state.to_dict() if transition.state else None,
    )


@router.get("/{category}", response_model=PickResponse)
async def get_pick(
    category: str = Depends(valid_category),
    service: PickService = Depends(get_pick_service),
):
    """Pick from the most recent refresh in this process."""
    result = service.last_result(category)
    return PickResponse(
        category=category,
        pick=service.get_pick(category),
        pick_state=result.pick_state.to_dict() if result and result.pick_state else None,
    )


@router.get("/{category}/confidence", response_model=ConfidenceResponse)
async def get_confidence(
    category: str = Depends(valid_category),
    service: PickService = Depends(get_pick_service),
):
    """Confidence tier from the most recent refresh."""
    confidence = service.get_confidence_tier(category)
    if confidence is None:
        return ConfidenceResponse(category=category, tier=None)
    return ConfidenceResponse(
        category=category,
        tier=confidence.tier.value,
        header=confidence.header,
        subtext=confidence.subtext,
        gap=confidence.gap,
    )
