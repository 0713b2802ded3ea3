"""
Bracket Engine: resolves knockout participants from group predictions and
propagates user-picked winners through the 32-match bracket.

- Group results: 1st/2nd/3rd per group from the user's ordering
- Third-place slots: assigned through the Annex C matrix
- Winner propagation: setting a winner recomputes every dependent match,
  clearing picks whose participants changed
- Reconciliation: full rebuild after group or third-place changes, keeping
  winners that are still one of the match's participants

Pure functions over immutable inputs. Nothing here raises for incomplete
state: an unresolvable participant is None (stored as "" in predictions).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple

from app.services.bracket_topology import (
    FINAL_MATCH_ID,
    KNOCKOUT_MATCHES,
    LATER_ROUND_SLOTS,
    ROUND_OF_32_SLOTS,
    SEMI_FINAL_MATCH_IDS,
    TOTAL_KNOCKOUT_MATCHES,
    BracketSource,
    GroupRunnerUp,
    GroupWinner,
    KnockoutMatchSlot,
    LoserOf,
    ThirdPlace,
    WinnerOf,
    matches_depending_on,
)
from app.services.third_place_matrix import ThirdPlaceAssignments, get_third_place_assignments
from app.services.tournament_registry import GROUP_IDS, GROUPS

logger = logging.getLogger(__name__)

UNDECIDED = ""


@dataclass(frozen=True)
class GroupPrediction:
    group_id: str
    ordered_team_ids: Tuple[str, ...]


@dataclass(frozen=True)
class KnockoutMatchPrediction:
    match_id: str
    home_team_id: str = UNDECIDED
    away_team_id: str = UNDECIDED
    winner_team_id: str = UNDECIDED

    @property
    def is_decided(self) -> bool:
        return self.winner_team_id != UNDECIDED


@dataclass(frozen=True)
class GroupResults:
    winners: Dict[str, str] = field(default_factory=dict)
    runners_up: Dict[str, str] = field(default_factory=dict)
    third_place: Dict[str, str] = field(default_factory=dict)


@dataclass
class BracketContext:
    group_results: GroupResults
    advancing_third_place_groups: List[str]
    third_place_assignments: Optional[ThirdPlaceAssignments]
    knockout_predictions: Dict[str, KnockoutMatchPrediction]


# =============================================================================
# Group results
# =============================================================================


def extract_group_results(predictions: Sequence[GroupPrediction]) -> GroupResults:
    """1st, 2nd and 3rd of each group, read straight from the user's ordering."""
    results = GroupResults()
    for prediction in predictions:
        ordered = prediction.ordered_team_ids
        if len(ordered) >= 3:
            results.winners[prediction.group_id] = ordered[0]
            results.runners_up[prediction.group_id] = ordered[1]
            results.third_place[prediction.group_id] = ordered[2]
    return results


def get_current_third_place_teams(predictions: Sequence[GroupPrediction]) -> List[str]:
    return [p.ordered_team_ids[2] for p in predictions if len(p.ordered_team_ids) >= 3]


def reconcile_third_place_teams(
    current_advancing: Sequence[str],
    group_predictions: Sequence[GroupPrediction],
) -> List[str]:
    """Drop advancing third-place picks that are no longer 3rd in their group."""
    valid = set(get_current_third_place_teams(group_predictions))
    return [team_id for team_id in current_advancing if team_id in valid]


def get_advancing_third_place_groups(
    advancing_third_place_teams: Sequence[str],
    third_place_by_group: Dict[str, str],
) -> List[str]:
    """Groups (A..L order) whose third-placed team is among the advancing picks."""
    advancing = set(advancing_third_place_teams)
    return [
        group_id
        for group_id in GROUP_IDS
        if third_place_by_group.get(group_id) and third_place_by_group[group_id] in advancing
    ]


# =============================================================================
# Source resolution
# =============================================================================


def build_bracket_context(
    group_predictions: Sequence[GroupPrediction],
    advancing_third_place_teams: Sequence[str],
    knockout_predictions: Sequence[KnockoutMatchPrediction],
) -> BracketContext:
    group_results = extract_group_results(group_predictions)
    advancing_groups = get_advancing_third_place_groups(advancing_third_place_teams, group_results.third_place)
    return BracketContext(
        group_results=group_results,
        advancing_third_place_groups=advancing_groups,
        third_place_assignments=get_third_place_assignments(advancing_groups),
        knockout_predictions={p.match_id: p for p in knockout_predictions},
    )


def _resolve_third_place(source: ThirdPlace, context: BracketContext) -> Optional[str]:
    assignments = context.third_place_assignments
    if not assignments:
        return None
    third_place_id = assignments.get(source.anchor)  # e.g. "3E"
    if not third_place_id:
        return None
    return context.group_results.third_place.get(third_place_id[1])


def resolve_team_from_source(source: BracketSource, context: BracketContext) -> Optional[str]:
    """
    Concrete (raw, possibly placeholder) team id for a bracket source, or None.
    Playoff placeholders are substituted only for display.
    """
    if isinstance(source, GroupWinner):
        return context.group_results.winners.get(source.group_id) or None
    if isinstance(source, GroupRunnerUp):
        return context.group_results.runners_up.get(source.group_id) or None
    if isinstance(source, ThirdPlace):
        return _resolve_third_place(source, context) or None
    if isinstance(source, WinnerOf):
        match = context.knockout_predictions.get(source.match_id)
        return (match.winner_team_id or None) if match else None
    if isinstance(source, LoserOf):
        match = context.knockout_predictions.get(source.match_id)
        if not match or not match.winner_team_id:
            return None
        loser = match.away_team_id if match.home_team_id == match.winner_team_id else match.home_team_id
        return loser or None
    return None


def get_match_teams(slot: KnockoutMatchSlot, context: BracketContext) -> Tuple[Optional[str], Optional[str]]:
    return (
        resolve_team_from_source(slot.home_source, context),
        resolve_team_from_source(slot.away_source, context),
    )


# =============================================================================
# Knockout state management
# =============================================================================


def _kept_winner(previous: Optional[KnockoutMatchPrediction], home: Optional[str], away: Optional[str]) -> str:
    """Previous winner if it is still one of the two participants."""
    if previous is None or not previous.winner_team_id:
        return UNDECIDED
    if previous.winner_team_id in (home, away):
        return previous.winner_team_id
    return UNDECIDED


def initialize_knockout_predictions(
    group_predictions: Sequence[GroupPrediction],
    advancing_third_place_teams: Sequence[str],
) -> List[KnockoutMatchPrediction]:
    """Round-of-32 predictions with resolved participants and no winners."""
    context = build_bracket_context(group_predictions, advancing_third_place_teams, [])
    predictions = []
    for slot in ROUND_OF_32_SLOTS:
        home, away = get_match_teams(slot, context)
        predictions.append(KnockoutMatchPrediction(slot.id, home or UNDECIDED, away or UNDECIDED, UNDECIDED))
    return predictions


def update_knockout_predictions(
    current_predictions: Sequence[KnockoutMatchPrediction],
    match_id: str,
    winner_team_id: str,
    group_predictions: Sequence[GroupPrediction],
    advancing_third_place_teams: Sequence[str],
) -> List[KnockoutMatchPrediction]:
    """
    Record a winner for match_id and cascade into every dependent match.

    A dependent whose (home, away) pair changed is reset with no winner and
    everything downstream of it is dropped; a dependent seen for the first
    time with both participants is created; an unchanged pair keeps its winner.

    The pick is ignored unless match_id exists with both participants set and
    winner_team_id is one of them.
    """
    predictions: Dict[str, KnockoutMatchPrediction] = {p.match_id: p for p in current_predictions}

    current = predictions.get(match_id)
    if current is None or not (current.home_team_id and current.away_team_id):
        logger.debug("Ignoring winner for %s: match not ready", match_id)
        return list(predictions.values())
    if winner_team_id not in (current.home_team_id, current.away_team_id):
        logger.debug("Ignoring winner %s for %s: not a participant", winner_team_id, match_id)
        return list(predictions.values())

    predictions[match_id] = replace(current, winner_team_id=winner_team_id)
    context = build_bracket_context(group_predictions, advancing_third_place_teams, list(predictions.values()))

    for slot in matches_depending_on(match_id):
        home, away = get_match_teams(slot, context)
        existing = predictions.get(slot.id)
        if existing is None:
            if home and away:
                fresh = KnockoutMatchPrediction(slot.id, home, away, UNDECIDED)
                predictions[slot.id] = fresh
                context.knockout_predictions[slot.id] = fresh
            continue

        pair = (home or UNDECIDED, away or UNDECIDED)
        if (existing.home_team_id, existing.away_team_id) == pair:
            continue

        fresh = KnockoutMatchPrediction(slot.id, pair[0], pair[1], UNDECIDED)
        predictions[slot.id] = fresh
        context.knockout_predictions[slot.id] = fresh
        for downstream in matches_depending_on(slot.id):
            if predictions.pop(downstream.id, None) is not None:
                logger.debug("Cleared %s after participants of %s changed", downstream.id, slot.id)
            context.knockout_predictions.pop(downstream.id, None)

    return list(predictions.values())


def reconcile_knockout_predictions(
    current_predictions: Sequence[KnockoutMatchPrediction],
    group_predictions: Sequence[GroupPrediction],
    advancing_third_place_teams: Sequence[str],
) -> List[KnockoutMatchPrediction]:
    """
    Rebuild all 32 predictions after group order or third-place picks changed.

    Pass 1 recomputes the round of 32; pass 2 walks the later rounds in
    topological order, feeding each decided match back into the context so
    later slots see it. A winner survives only if it is still a participant.
    """
    previous: Dict[str, KnockoutMatchPrediction] = {p.match_id: p for p in current_predictions}
    context = build_bracket_context(group_predictions, advancing_third_place_teams, [])
    rebuilt: List[KnockoutMatchPrediction] = []

    for slot in ROUND_OF_32_SLOTS:
        home, away = get_match_teams(slot, context)
        winner = _kept_winner(previous.get(slot.id), home, away)
        rebuilt.append(KnockoutMatchPrediction(slot.id, home or UNDECIDED, away or UNDECIDED, winner))

    context = build_bracket_context(group_predictions, advancing_third_place_teams, rebuilt)

    for slot in LATER_ROUND_SLOTS:
        home, away = get_match_teams(slot, context)
        winner = _kept_winner(previous.get(slot.id), home, away) if home and away else UNDECIDED
        prediction = KnockoutMatchPrediction(slot.id, home or UNDECIDED, away or UNDECIDED, winner)
        rebuilt.append(prediction)
        if winner:
            context.knockout_predictions[slot.id] = prediction

    return rebuilt


# =============================================================================
# Summaries
# =============================================================================


def is_knockout_complete(predictions: Sequence[KnockoutMatchPrediction]) -> bool:
    return len(predictions) == TOTAL_KNOCKOUT_MATCHES and all(p.winner_team_id for p in predictions)


def count_completed_knockout_matches(predictions: Sequence[KnockoutMatchPrediction]) -> int:
    return sum(1 for p in predictions if p.winner_team_id)


def get_champion(predictions: Sequence[KnockoutMatchPrediction]) -> Optional[str]:
    for prediction in predictions:
        if prediction.match_id == FINAL_MATCH_ID:
            return prediction.winner_team_id or None
    return None


def get_semi_finalists(predictions: Sequence[KnockoutMatchPrediction]) -> List[str]:
    teams: List[str] = []
    for prediction in predictions:
        if prediction.match_id in SEMI_FINAL_MATCH_IDS:
            teams.extend(t for t in (prediction.home_team_id, prediction.away_team_id) if t)
    return teams


def initialize_group_predictions() -> List[GroupPrediction]:
    """Default predictions: every group in its drawn order."""
    return [GroupPrediction(group.id, tuple(group.teams)) for group in GROUPS]


def get_knockout_slot(match_id: str) -> Optional[KnockoutMatchSlot]:
    return KNOCKOUT_MATCHES.get(match_id)
