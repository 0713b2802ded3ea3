"""
Prediction wizard endpoints.

The draft lives on the client. Every call sends the whole draft plus the
action and gets the next draft back, along with per-step completion flags.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException

from app.routes.bracket import (
    ApiModel,
    GroupPredictionModel,
    KnockoutPredictionModel,
    from_knockout_predictions,
    to_group_predictions,
    to_knockout_predictions,
)
from app.services import simulation_draft
from app.services.bracket_engine import GroupPrediction
from app.services.simulation_draft import SimulationDraft
from app.services.tournament_registry import PlayoffSelection

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class PlayoffSelectionModel(ApiModel):
    playoff_id: str
    selected_team_id: str


class DraftModel(ApiModel):
    step: int = 0
    playoff_selections: List[PlayoffSelectionModel]
    group_predictions: List[GroupPredictionModel]
    advancing_third_place_teams: List[str] = []
    knockout_predictions: List[KnockoutPredictionModel] = []


class DraftResponse(ApiModel):
    draft: DraftModel
    step_complete: List[bool]
    champion_team_id: Optional[str] = None


class StepRequest(ApiModel):
    draft: DraftModel
    step: int


class PlayoffWinnerRequest(ApiModel):
    draft: DraftModel
    playoff_id: str
    selected_team_id: str


class GroupOrderRequest(ApiModel):
    draft: DraftModel
    group_id: str
    ordered_team_ids: List[str]


class ThirdPlaceToggleRequest(ApiModel):
    draft: DraftModel
    team_id: str


class KnockoutWinnerRequest(ApiModel):
    draft: DraftModel
    match_id: str
    winner_team_id: str


# ============================================================================
# Conversions
# ============================================================================


def to_draft(model: DraftModel) -> SimulationDraft:
    return SimulationDraft(
        step=model.step,
        playoff_selections=tuple(PlayoffSelection(s.playoff_id, s.selected_team_id) for s in model.playoff_selections),
        group_predictions=tuple(to_group_predictions(model.group_predictions)),
        advancing_third_place_teams=tuple(model.advancing_third_place_teams),
        knockout_predictions=tuple(to_knockout_predictions(model.knockout_predictions)),
    )


def _group_model(prediction: GroupPrediction) -> GroupPredictionModel:
    return GroupPredictionModel(group_id=prediction.group_id, ordered_team_ids=list(prediction.ordered_team_ids))


def draft_response(draft: SimulationDraft) -> DraftResponse:
    return DraftResponse(
        draft=DraftModel(
            step=draft.step,
            playoff_selections=[
                PlayoffSelectionModel(playoff_id=s.playoff_id, selected_team_id=s.selected_team_id)
                for s in draft.playoff_selections
            ],
            group_predictions=[_group_model(gp) for gp in draft.group_predictions],
            advancing_third_place_teams=list(draft.advancing_third_place_teams),
            knockout_predictions=from_knockout_predictions(draft.knockout_predictions),
        ),
        step_complete=[
            simulation_draft.is_step0_complete(draft),
            simulation_draft.is_step1_complete(draft),
            simulation_draft.is_step2_complete(draft),
            simulation_draft.is_step3_complete(draft),
        ],
        champion_team_id=simulation_draft.get_champion_team_id(draft),
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/draft", response_model=DraftResponse)
def get_new_draft():
    """Fresh draft: first candidate for every playoff, groups in drawn order."""
    return draft_response(simulation_draft.new_draft())


@router.post("/draft/step", response_model=DraftResponse)
def change_step(request: StepRequest):
    try:
        draft = simulation_draft.set_step(to_draft(request.draft), request.step)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return draft_response(draft)


@router.post("/draft/playoff", response_model=DraftResponse)
def choose_playoff_winner(request: PlayoffWinnerRequest):
    draft = simulation_draft.set_playoff_winner(
        to_draft(request.draft), request.playoff_id, request.selected_team_id
    )
    return draft_response(draft)


@router.post("/draft/group", response_model=DraftResponse)
def order_group(request: GroupOrderRequest):
    draft = simulation_draft.set_group_prediction(
        to_draft(request.draft), request.group_id, request.ordered_team_ids
    )
    return draft_response(draft)


@router.post("/draft/third-place/toggle", response_model=DraftResponse)
def toggle_third_place(request: ThirdPlaceToggleRequest):
    """Add or remove a third-placed team; adding is a no-op once 8 are picked."""
    draft = simulation_draft.toggle_third_place_team(to_draft(request.draft), request.team_id)
    return draft_response(draft)


@router.post("/draft/knockout/winner", response_model=DraftResponse)
def choose_knockout_winner(request: KnockoutWinnerRequest):
    draft = simulation_draft.set_knockout_match_winner(
        to_draft(request.draft), request.match_id, request.winner_team_id
    )
    logger.debug("Draft knockout pick %s -> %s", request.match_id, request.winner_team_id)
    return draft_response(draft)
