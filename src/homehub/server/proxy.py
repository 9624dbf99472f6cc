"""Meal publishing endpoint that relays to the GitHub Contents API."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from homehub.errors import GitHubNotConfiguredError, GitHubUpstreamError
from homehub.server import deps

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["proxy"])


class PublishedMealPayload(BaseModel):
    """Required fields of a published meal; the body itself is committed as sent."""

    title: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="allow")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/save-meal", summary="Commit a meal JSON file to GitHub")
def save_meal_endpoint(
    payload: dict[str, Any] = Body(...),
    publisher_factory: deps.MealPublisherFactory = Depends(deps.get_meal_publisher_factory),
    auth: None = Depends(deps.require_api_token),
) -> Any:
    PublishedMealPayload.model_validate(payload)
    try:
        publisher = publisher_factory()
        url = publisher.save_meal(payload)
    except GitHubNotConfiguredError as exc:
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, str(exc))
    except ValueError as exc:
        return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc))
    except GitHubUpstreamError as exc:
        return _error(exc.status_code, exc.message)
    except (httpx.HTTPError, KeyError, TypeError) as exc:
        logger.warning("Meal publish failed: %s", exc)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
    return {"success": True, "url": url}


__all__ = ["PublishedMealPayload", "router"]
