"""Hub directory endpoints."""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, HTTPException, Query, status

from ...data.hub_repository import ROLE_AUTHENTICATOR, ROLE_COUTURIER, filter_hubs_by_role, get_hubs
from ...models.domain import Hub
from ...schemas.hubs import HubListResponse, HubModel

router = APIRouter(prefix="/hubs", tags=["hubs"])

_ROLES = {ROLE_AUTHENTICATOR, ROLE_COUTURIER}


def _hub_to_model(hub: Hub) -> HubModel:
    data = asdict(hub)
    data["capabilities"] = sorted(hub.capabilities)
    return HubModel.model_validate(data)


@router.get("", response_model=HubListResponse)
def list_hubs(
    role: str | None = Query(default=None, description="authenticator (hub #1) or couturier (hub #2)"),
    tier: int = Query(default=3, ge=1, le=3, description="Tier used to pick the authentication fee"),
) -> HubListResponse:
    if role is not None and role not in _ROLES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown hub role '{role}'. Expected one of: {', '.join(sorted(_ROLES))}",
        )
    try:
        hubs = list(get_hubs(tier))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error loading hubs: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to load hubs: {str(exc)}",
        ) from exc
    if role is not None:
        hubs = filter_hubs_by_role(hubs, role)
    return HubListResponse(tier=tier, role=role, hubs=[_hub_to_model(hub) for hub in hubs])
