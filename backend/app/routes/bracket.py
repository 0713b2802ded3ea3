"""
Bracket engine endpoints. Stateless: the caller sends the current group
predictions, third-place picks and knockout predictions and stores what comes
back.
"""

from typing import Dict, List, Optional

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.services.bracket_engine import (
    GroupPrediction,
    KnockoutMatchPrediction,
    count_completed_knockout_matches,
    get_champion,
    get_semi_finalists,
    initialize_knockout_predictions,
    is_knockout_complete,
    reconcile_knockout_predictions,
    update_knockout_predictions,
)
from app.services.third_place_matrix import find_third_place_option

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GroupPredictionModel(ApiModel):
    group_id: str
    ordered_team_ids: List[str]


class KnockoutPredictionModel(ApiModel):
    match_id: str
    home_team_id: str = ""
    away_team_id: str = ""
    winner_team_id: str = ""


class BracketInputs(ApiModel):
    group_predictions: List[GroupPredictionModel]
    advancing_third_place_teams: List[str]


class InitializeRequest(BracketInputs):
    pass


class ReconcileRequest(BracketInputs):
    knockout_predictions: List[KnockoutPredictionModel] = []


class WinnerRequest(ReconcileRequest):
    match_id: str
    winner_team_id: str


class KnockoutResponse(ApiModel):
    knockout_predictions: List[KnockoutPredictionModel]
    completed_count: int
    is_complete: bool
    champion_team_id: Optional[str] = None


class SummaryRequest(ApiModel):
    knockout_predictions: List[KnockoutPredictionModel]


class SummaryResponse(ApiModel):
    is_complete: bool
    completed_count: int
    champion_team_id: Optional[str] = None
    semi_finalists: List[str]


class ThirdPlaceRequest(ApiModel):
    advancing_groups: List[str]


class ThirdPlaceResponse(ApiModel):
    option: Optional[int] = None
    missing_groups: Optional[List[str]] = None
    assignments: Optional[Dict[str, str]] = None


# ============================================================================
# Conversions
# ============================================================================


def to_group_predictions(models: List[GroupPredictionModel]) -> List[GroupPrediction]:
    return [GroupPrediction(m.group_id, tuple(m.ordered_team_ids)) for m in models]


def to_knockout_predictions(models: List[KnockoutPredictionModel]) -> List[KnockoutMatchPrediction]:
    return [
        KnockoutMatchPrediction(m.match_id, m.home_team_id, m.away_team_id, m.winner_team_id)
        for m in models
    ]


def from_knockout_predictions(predictions) -> List[KnockoutPredictionModel]:
    return [
        KnockoutPredictionModel(
            match_id=p.match_id,
            home_team_id=p.home_team_id,
            away_team_id=p.away_team_id,
            winner_team_id=p.winner_team_id,
        )
        for p in predictions
    ]


def _knockout_response(predictions: List[KnockoutMatchPrediction]) -> KnockoutResponse:
    return KnockoutResponse(
        knockout_predictions=from_knockout_predictions(predictions),
        completed_count=count_completed_knockout_matches(predictions),
        is_complete=is_knockout_complete(predictions),
        champion_team_id=get_champion(predictions),
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/bracket/initialize", response_model=KnockoutResponse)
def initialize_bracket(request: InitializeRequest):
    """Round-of-32 predictions for the given group order and third-place picks."""
    predictions = initialize_knockout_predictions(
        to_group_predictions(request.group_predictions),
        request.advancing_third_place_teams,
    )
    return _knockout_response(predictions)


@router.post("/bracket/winner", response_model=KnockoutResponse)
def set_bracket_winner(request: WinnerRequest):
    """Pick a winner and cascade the change through dependent matches."""
    predictions = update_knockout_predictions(
        to_knockout_predictions(request.knockout_predictions),
        request.match_id,
        request.winner_team_id,
        to_group_predictions(request.group_predictions),
        request.advancing_third_place_teams,
    )
    return _knockout_response(predictions)


@router.post("/bracket/reconcile", response_model=KnockoutResponse)
def reconcile_bracket(request: ReconcileRequest):
    """Rebuild all 32 predictions after upstream changes, keeping still-valid winners."""
    predictions = reconcile_knockout_predictions(
        to_knockout_predictions(request.knockout_predictions),
        to_group_predictions(request.group_predictions),
        request.advancing_third_place_teams,
    )
    return _knockout_response(predictions)


@router.post("/bracket/summary", response_model=SummaryResponse)
def summarize_bracket(request: SummaryRequest):
    predictions = to_knockout_predictions(request.knockout_predictions)
    return SummaryResponse(
        is_complete=is_knockout_complete(predictions),
        completed_count=count_completed_knockout_matches(predictions),
        champion_team_id=get_champion(predictions),
        semi_finalists=get_semi_finalists(predictions),
    )


@router.post("/bracket/third-place", response_model=ThirdPlaceResponse)
def third_place_assignments(request: ThirdPlaceRequest):
    """Annex C row for 8 advancing groups; all fields null for any other input."""
    option = find_third_place_option(request.advancing_groups) if len(request.advancing_groups) == 8 else None
    if option is None:
        return ThirdPlaceResponse()
    return ThirdPlaceResponse(
        option=option.option,
        missing_groups=list(option.missing_groups),
        assignments=dict(option.assignments),
    )
