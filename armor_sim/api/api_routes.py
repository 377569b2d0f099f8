"""API routes for the armor penetration estimator."""

import logging
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from armor_sim.simulators.diffusion import fdm_steps
from armor_sim.simulators.penetration import ComputationError, score_attacks, score_query
from armor_sim.validators import InputValidationError

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_RUNS = 1000
MAX_STEPS = 1000
MAX_CELLS = 10_000

# Request/Response models
# Records stay loosely typed here; armor_sim.validators owns their schema
# so that failures carry the record name.
class AttackScoreRequest(BaseModel):
    attack: Dict[str, Any]
    weapon_material: Dict[str, Any]
    armor_material: Dict[str, Any]
    weapon: Dict[str, Any]
    runs: int = Field(default=1, ge=1, le=MAX_RUNS)
    seed: Optional[int] = None

class WeaponScoresRequest(BaseModel):
    weapon: Dict[str, Any]
    weapon_material: Dict[str, Any]
    armor_material: Dict[str, Any]
    seed: Optional[int] = None

class FdmRequest(BaseModel):
    cells: List[float] = Field(max_length=MAX_CELLS)
    width: int
    steps: int = Field(default=1, ge=0, le=MAX_STEPS)


def _invalid(e: InputValidationError) -> HTTPException:
    logger.info("rejected %s: %s", e.record, e)
    return HTTPException(status_code=422, detail=e.to_dict())

def _failed(e: ComputationError) -> HTTPException:
    logger.info("computation failed on %s: %s", e.quantity, e)
    return HTTPException(status_code=400, detail=e.to_dict())

# ============================================================================
# Estimator
# ============================================================================

@router.post("/attack-score")
def attack_score(req: AttackScoreRequest) -> Dict[str, Any]:
    """Estimate the effectiveness score of one attack."""
    try:
        return score_query(req.model_dump())
    except InputValidationError as e:
        raise _invalid(e)
    except ComputationError as e:
        raise _failed(e)

@router.post("/weapon-scores")
def weapon_scores(req: WeaponScoresRequest) -> Dict[str, Any]:
    """Score every attack the weapon carries."""
    try:
        scores = score_attacks(req.weapon, req.weapon_material, req.armor_material, seed=req.seed)
    except InputValidationError as e:
        raise _invalid(e)
    except ComputationError as e:
        raise _failed(e)
    return {"scores": scores}

# ============================================================================
# Diffusion
# ============================================================================

@router.post("/fdm")
def fdm(req: FdmRequest) -> Dict[str, Any]:
    """Apply ``steps`` diffusion updates to a flattened grid."""
    try:
        cells = fdm_steps(req.cells, req.width, req.steps)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"cells": cells}
