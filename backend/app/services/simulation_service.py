"""
Saved simulations: create, list, fetch and vote.

The stored document is whatever the wizard produced (playoff selections, group
predictions, advancing third-placed teams, knockout predictions); the engine
never sees simulation ids.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.models.simulation import Simulation
from app.models.vote import Vote
from app.services.tournament_registry import GROUP_IDS

logger = logging.getLogger(__name__)

SORT_VOTES = "votes"
SORT_RECENT = "recent"
DEFAULT_LIST_LIMIT = 50
MAX_LIST_LIMIT = 100


class SimulationError(Exception):
    """Base class for saved-simulation failures."""


class SimulationValidationError(SimulationError):
    pass


class SimulationNotFoundError(SimulationError):
    pass


class DuplicateVoteError(SimulationError):
    pass


def create_simulation(
    session: Session,
    *,
    group_predictions: Optional[List[Dict[str, Any]]],
    advancing_third_place_teams: Optional[List[str]],
    knockout_predictions: Optional[List[Dict[str, Any]]],
    champion_team_id: Optional[str],
    playoff_selections: Optional[List[Dict[str, Any]]] = None,
    name: Optional[str] = None,
    user_id: Optional[str] = None,
) -> Simulation:
    """
    Persist a finished prediction.

    Requires 12 group predictions, exactly 8 advancing third-placed teams,
    the knockout predictions and a champion.
    """
    error = None
    if not group_predictions or not advancing_third_place_teams or not knockout_predictions or not champion_team_id:
        error = "Missing required fields"
    elif len(group_predictions) != len(GROUP_IDS):
        error = "Invalid group predictions"
    elif len(advancing_third_place_teams) != 8:
        error = "Invalid third place teams"
    if error:
        logger.warning("Rejected simulation: %s", error)
        raise SimulationValidationError(error)

    simulation = Simulation(
        name=name or None,
        data={
            "playoffSelections": playoff_selections or [],
            "groupPredictions": group_predictions,
            "advancingThirdPlaceTeams": advancing_third_place_teams,
            "knockoutPredictions": knockout_predictions,
        },
        champion_team_id=champion_team_id,
        user_id=user_id or None,
        votes_count=0,
    )
    session.add(simulation)
    session.commit()
    session.refresh(simulation)
    logger.info("Created simulation %s (champion=%s)", simulation.id, champion_team_id)
    return simulation


def list_simulations(
    session: Session,
    sort: str = SORT_VOTES,
    limit: int = DEFAULT_LIST_LIMIT,
    champion: Optional[str] = None,
) -> List[Simulation]:
    """Most voted first (newest breaks ties), or newest first for any other sort."""
    limit = max(1, min(limit, MAX_LIST_LIMIT))
    query = select(Simulation)
    if champion:
        query = query.where(Simulation.champion_team_id == champion)
    if sort == SORT_VOTES:
        query = query.order_by(Simulation.votes_count.desc(), Simulation.created_at.desc())
    else:
        query = query.order_by(Simulation.created_at.desc())
    return list(session.exec(query.limit(limit)).all())


def get_simulation(session: Session, simulation_id: str) -> Simulation:
    simulation = session.get(Simulation, simulation_id)
    if not simulation:
        raise SimulationNotFoundError(simulation_id)
    return simulation


def add_vote(session: Session, simulation_id: str, user_id: str) -> int:
    """Record one vote by user_id and return the new vote count."""
    simulation = get_simulation(session, simulation_id)

    existing = session.exec(
        select(Vote).where(Vote.simulation_id == simulation_id, Vote.user_id == user_id)
    ).first()
    if existing:
        raise DuplicateVoteError(f"User {user_id} already voted for {simulation_id}")

    session.add(Vote(simulation_id=simulation_id, user_id=user_id))
    simulation.votes_count = (simulation.votes_count or 0) + 1
    simulation.updated_at = datetime.utcnow()
    session.add(simulation)
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        raise DuplicateVoteError(f"User {user_id} already voted for {simulation_id}") from exc
    session.refresh(simulation)
    logger.info("Vote on simulation %s by %s (total=%d)", simulation_id, user_id, simulation.votes_count)
    return simulation.votes_count
