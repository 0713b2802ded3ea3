"""
Simulation draft: the four-step prediction wizard as an explicit state object.

Steps: 0 playoff winners, 1 group order, 2 best eight third-placed teams,
3 knockout picks. Each transition takes a SimulationDraft and returns a new
one; knockout work is delegated to bracket_engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

from app.services.bracket_engine import (
    GroupPrediction,
    KnockoutMatchPrediction,
    get_champion,
    initialize_group_predictions,
    initialize_knockout_predictions,
    is_knockout_complete,
    reconcile_knockout_predictions,
    reconcile_third_place_teams,
    update_knockout_predictions,
)
from app.services.tournament_registry import (
    PLAYOFF_PATHS,
    PlayoffMapping,
    PlayoffSelection,
    build_playoff_mapping,
    get_resolved_team,
)

MAX_ADVANCING_THIRD_PLACE = 8
WIZARD_STEPS = (0, 1, 2, 3)


def initialize_playoff_selections() -> Tuple[PlayoffSelection, ...]:
    """Default every playoff to its first candidate."""
    return tuple(PlayoffSelection(path.id, path.candidate_ids[0]) for path in PLAYOFF_PATHS)


@dataclass(frozen=True)
class SimulationDraft:
    step: int = 0
    playoff_selections: Tuple[PlayoffSelection, ...] = field(default_factory=initialize_playoff_selections)
    group_predictions: Tuple[GroupPrediction, ...] = field(
        default_factory=lambda: tuple(initialize_group_predictions())
    )
    advancing_third_place_teams: Tuple[str, ...] = ()
    knockout_predictions: Tuple[KnockoutMatchPrediction, ...] = ()


def new_draft() -> SimulationDraft:
    return SimulationDraft()


reset = new_draft


# =============================================================================
# Transitions
# =============================================================================


def set_step(draft: SimulationDraft, step: int) -> SimulationDraft:
    """
    Move to a wizard step.

    Entering step 2 drops third-place picks that are no longer 3rd. Entering
    step 3 does the same, then reconciles existing knockout picks against the
    current groups and third places; with no picks yet, they are initialised
    once exactly 8 third places are chosen.
    """
    if step not in WIZARD_STEPS:
        raise ValueError(f"Unknown wizard step: {step}")

    if step == 2:
        third = reconcile_third_place_teams(draft.advancing_third_place_teams, draft.group_predictions)
        return replace(draft, step=step, advancing_third_place_teams=tuple(third))

    if step == 3:
        third = reconcile_third_place_teams(draft.advancing_third_place_teams, draft.group_predictions)
        if draft.knockout_predictions:
            knockout = reconcile_knockout_predictions(draft.knockout_predictions, draft.group_predictions, third)
        elif len(third) == MAX_ADVANCING_THIRD_PLACE:
            knockout = initialize_knockout_predictions(draft.group_predictions, third)
        else:
            return replace(draft, step=step, advancing_third_place_teams=tuple(third))
        return replace(
            draft,
            step=step,
            advancing_third_place_teams=tuple(third),
            knockout_predictions=tuple(knockout),
        )

    return replace(draft, step=step)


def set_playoff_winner(draft: SimulationDraft, playoff_id: str, selected_team_id: str) -> SimulationDraft:
    selections = tuple(
        PlayoffSelection(s.playoff_id, selected_team_id) if s.playoff_id == playoff_id else s
        for s in draft.playoff_selections
    )
    return replace(draft, playoff_selections=selections)


def set_group_prediction(draft: SimulationDraft, group_id: str, ordered_team_ids: List[str]) -> SimulationDraft:
    groups = tuple(
        GroupPrediction(gp.group_id, tuple(ordered_team_ids)) if gp.group_id == group_id else gp
        for gp in draft.group_predictions
    )
    return replace(draft, group_predictions=groups)


def set_advancing_third_place_teams(draft: SimulationDraft, team_ids: List[str]) -> SimulationDraft:
    return replace(draft, advancing_third_place_teams=tuple(team_ids))


def toggle_third_place_team(draft: SimulationDraft, team_id: str) -> SimulationDraft:
    """Remove team_id if picked, else add it while fewer than 8 are picked."""
    current = draft.advancing_third_place_teams
    if team_id in current:
        return replace(draft, advancing_third_place_teams=tuple(t for t in current if t != team_id))
    if len(current) < MAX_ADVANCING_THIRD_PLACE:
        return replace(draft, advancing_third_place_teams=current + (team_id,))
    return draft


def set_knockout_match_winner(draft: SimulationDraft, match_id: str, winner_team_id: str) -> SimulationDraft:
    updated = update_knockout_predictions(
        draft.knockout_predictions,
        match_id,
        winner_team_id,
        draft.group_predictions,
        draft.advancing_third_place_teams,
    )
    return replace(draft, knockout_predictions=tuple(updated))


def initialize_knockout(draft: SimulationDraft) -> SimulationDraft:
    predictions = initialize_knockout_predictions(draft.group_predictions, draft.advancing_third_place_teams)
    return replace(draft, knockout_predictions=tuple(predictions))


# =============================================================================
# Completion checks
# =============================================================================


def is_step0_complete(draft: SimulationDraft) -> bool:
    return len(draft.playoff_selections) == len(PLAYOFF_PATHS) and all(
        s.selected_team_id for s in draft.playoff_selections
    )


def is_step1_complete(draft: SimulationDraft) -> bool:
    return all(len(gp.ordered_team_ids) == 4 for gp in draft.group_predictions)


def is_step2_complete(draft: SimulationDraft) -> bool:
    return len(draft.advancing_third_place_teams) == MAX_ADVANCING_THIRD_PLACE


def is_step3_complete(draft: SimulationDraft) -> bool:
    return is_knockout_complete(draft.knockout_predictions)


def get_champion_team_id(draft: SimulationDraft) -> Optional[str]:
    return get_champion(draft.knockout_predictions)


# =============================================================================
# Display helpers (playoff placeholders resolved here, never in the engine)
# =============================================================================


def get_playoff_mapping(draft: SimulationDraft) -> PlayoffMapping:
    return build_playoff_mapping(list(draft.playoff_selections))


def get_team_display_name(draft: SimulationDraft, team_id: str) -> str:
    team = get_resolved_team(team_id, get_playoff_mapping(draft))
    return team.name if team else team_id


def get_team_short_name(draft: SimulationDraft, team_id: str) -> str:
    team = get_resolved_team(team_id, get_playoff_mapping(draft))
    return team.short_name if team else team_id


def get_team_flag_code(draft: SimulationDraft, team_id: str) -> str:
    team = get_resolved_team(team_id, get_playoff_mapping(draft))
    return team.flag_code if team else "UN"
