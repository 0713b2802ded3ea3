"""
Saved simulations: list, create, fetch and vote.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlmodel import Session

from app.database import get_session
from app.models.simulation import Simulation
from app.routes.bracket import ApiModel, GroupPredictionModel, KnockoutPredictionModel
from app.routes.draft import PlayoffSelectionModel
from app.services import simulation_service
from app.services.simulation_service import (
    DEFAULT_LIST_LIMIT,
    SORT_VOTES,
    DuplicateVoteError,
    SimulationNotFoundError,
    SimulationValidationError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class SimulationCreate(ApiModel):
    """Every field optional here so that missing ones surface as a 400, not a 422."""

    name: Optional[str] = None
    playoff_selections: Optional[List[PlayoffSelectionModel]] = None
    group_predictions: Optional[List[GroupPredictionModel]] = None
    advancing_third_place_teams: Optional[List[str]] = None
    knockout_predictions: Optional[List[KnockoutPredictionModel]] = None
    champion_team_id: Optional[str] = None
    user_id: Optional[str] = None


class SimulationResponse(ApiModel):
    id: str
    name: Optional[str] = None
    data: Dict[str, Any]
    champion_team_id: str
    user_id: Optional[str] = None
    votes_count: int
    created_at: datetime
    updated_at: datetime


class VoteResponse(ApiModel):
    simulation_id: str
    votes_count: int


def _dump(models: Optional[List[ApiModel]]) -> Optional[List[Dict[str, Any]]]:
    if models is None:
        return None
    return [m.model_dump(by_alias=True) for m in models]


def _to_response(simulation: Simulation) -> SimulationResponse:
    return SimulationResponse(
        id=simulation.id,
        name=simulation.name,
        data=simulation.data,
        champion_team_id=simulation.champion_team_id,
        user_id=simulation.user_id,
        votes_count=simulation.votes_count,
        created_at=simulation.created_at,
        updated_at=simulation.updated_at,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/simulations", response_model=List[SimulationResponse])
def list_simulations(
    sort: str = Query(SORT_VOTES, description="votes (default) or recent"),
    limit: int = Query(DEFAULT_LIST_LIMIT, description="Clamped to 1..100"),
    champion: Optional[str] = Query(None, description="Only simulations with this champion team id"),
    session: Session = Depends(get_session),
):
    simulations = simulation_service.list_simulations(session, sort=sort, limit=limit, champion=champion)
    return [_to_response(s) for s in simulations]


@router.post("/simulations", response_model=SimulationResponse, status_code=201)
def create_simulation(payload: SimulationCreate, session: Session = Depends(get_session)):
    try:
        simulation = simulation_service.create_simulation(
            session,
            group_predictions=_dump(payload.group_predictions),
            advancing_third_place_teams=payload.advancing_third_place_teams,
            knockout_predictions=_dump(payload.knockout_predictions),
            champion_team_id=payload.champion_team_id,
            playoff_selections=_dump(payload.playoff_selections),
            name=payload.name,
            user_id=payload.user_id,
        )
    except SimulationValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _to_response(simulation)


@router.get("/simulations/{simulation_id}", response_model=SimulationResponse)
def get_simulation(simulation_id: str, session: Session = Depends(get_session)):
    try:
        simulation = simulation_service.get_simulation(session, simulation_id)
    except SimulationNotFoundError:
        raise HTTPException(status_code=404, detail="Simulation not found")
    return _to_response(simulation)


@router.post("/simulations/{simulation_id}/vote", response_model=VoteResponse)
def vote_for_simulation(
    simulation_id: str,
    x_user_id: Optional[str] = Header(None),
    session: Session = Depends(get_session),
):
    """One vote per user per simulation; the caller is identified by the X-User-Id header."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    try:
        votes_count = simulation_service.add_vote(session, simulation_id, x_user_id)
    except SimulationNotFoundError:
        raise HTTPException(status_code=404, detail="Simulation not found")
    except DuplicateVoteError:
        raise HTTPException(status_code=409, detail="Already voted")
    return VoteResponse(simulation_id=simulation_id, votes_count=votes_count)
