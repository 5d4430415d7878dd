"""Rules configuration endpoints for reading and updating thresholds."""

from fastapi import APIRouter, Request

from amlscreen.models import AMLConfig

router = APIRouter(prefix="/api")


@router.get("/rules", response_model=AMLConfig)
async def get_rules(request: Request) -> AMLConfig:
    """Return the current screening configuration and risk policy."""
    return request.app.state.engine.config


@router.put("/rules", response_model=AMLConfig)
async def update_rules(
    new_config: AMLConfig,
    request: Request,
) -> AMLConfig:
    """Replace the screening configuration.

    Every component picks up the new thresholds on the next screening.
    Fields omitted from the body fall back to their defaults.
    """
    request.app.state.engine.update_config(new_config)
    return new_config
