"""Mission progress simulation endpoint."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from survey_fleet.api.deps import get_optional_organization_id, get_simulator
from survey_fleet.simulation.progress_simulator import ProgressSimulator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["simulation"])


@router.post("/simulate-progress")
def simulate_progress(simulator: ProgressSimulator = Depends(get_simulator),
                      organization_id: Optional[str] = Depends(get_optional_organization_id)):
    """Run one simulator tick.

    Scoped to the request's organization when one is given, otherwise all
    organizations advance. Failures of single missions or drones are listed
    in the response and make ``success`` false, as does a tick skipped because
    another one was still running. Only a failure of the tick as a whole
    answers 500.
    """
    try:
        result = simulator.tick(organization_id)
    except Exception:
        logger.exception("Error simulating progress")
        return JSONResponse(status_code=500, content={"error": "Failed to simulate progress"})
    return {"success": result.success, **result.to_dict()}
