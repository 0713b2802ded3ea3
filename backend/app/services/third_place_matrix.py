"""
Third Place Matrix: FIFA World Cup 2026 Competition Regulations, Annex C.

495 options, one per combination of the 4 groups whose third-placed team does
NOT advance. Options are numbered in lexicographic "choose 4 of 12" order:
option 1 = A,B,C,D missing, option 495 = I,J,K,L missing. Each option maps the
8 first-place anchors that face a third-placed team to one group ("3E", ...).

Source of rows:
- THIRD_PLACE_MATRIX_PATH set: a JSON export of the published table, a list of
  {"option": int, "missing_groups": [4 letters], "assignments": {"1A": "3E", ...}}
- otherwise: materialised once from the bracket's anchor eligibility sets by a
  deterministic assignment search (anchors in ANCHOR_PREFERENCES order of
  preference, which yields option 1 exactly as published)

Both paths go through validate_matrix().
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from itertools import combinations
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from app.services.bracket_topology import anchor_eligible_groups
from app.services.tournament_registry import GROUP_IDS

logger = logging.getLogger(__name__)

ANCHORS: Tuple[str, ...] = ("1A", "1B", "1D", "1E", "1G", "1I", "1K", "1L")

ThirdPlaceAssignments = Dict[str, str]  # anchor -> "3<group>"

# Per-anchor candidate order for the assignment search. Same letters as the
# bracket's possible-groups signature for that anchor.
ANCHOR_PREFERENCES: Dict[str, Tuple[str, ...]] = {
    "1A": ("E", "H", "I", "C", "F"),
    "1B": ("J", "E", "F", "G", "I"),
    "1D": ("I", "E", "F", "J", "B"),
    "1E": ("F", "A", "B", "C", "D"),
    "1G": ("H", "A", "E", "I", "J"),
    "1I": ("G", "C", "D", "F", "H"),
    "1K": ("L", "D", "E", "I", "J"),
    "1L": ("K", "E", "H", "I", "J"),
}

EXPECTED_OPTION_COUNT = 495


class ThirdPlaceMatrixError(ValueError):
    """Raised when the third-place table cannot be loaded or is inconsistent."""


@dataclass(frozen=True)
class ThirdPlaceOption:
    option: int
    missing_groups: Tuple[str, str, str, str]
    assignments: Dict[str, str]

    def group_for(self, anchor: str) -> Optional[str]:
        third_place_id = self.assignments.get(anchor)
        return third_place_id[1] if third_place_id else None


def missing_group_combinations() -> List[Tuple[str, ...]]:
    """All C(12,4) missing-group tuples in option order."""
    return list(combinations(GROUP_IDS, 4))


# =============================================================================
# Assignment search
# =============================================================================


def _solve_assignments(
    advancing: FrozenSet[str],
    eligible: Dict[str, FrozenSet[str]],
) -> Optional[ThirdPlaceAssignments]:
    """
    Assign each anchor a distinct advancing group from its eligible set.

    Most constrained anchor first (ties in ANCHORS order); candidates tried in
    ANCHOR_PREFERENCES order with backtracking.
    """
    candidates = {
        anchor: [g for g in ANCHOR_PREFERENCES[anchor] if g in advancing and g in eligible[anchor]]
        for anchor in ANCHORS
    }
    order = sorted(ANCHORS, key=lambda a: (len(candidates[a]), ANCHORS.index(a)))

    chosen: Dict[str, str] = {}
    used: set = set()

    def backtrack(index: int) -> bool:
        if index == len(order):
            return True
        anchor = order[index]
        for group in candidates[anchor]:
            if group in used:
                continue
            chosen[anchor] = group
            used.add(group)
            if backtrack(index + 1):
                return True
            used.discard(group)
            del chosen[anchor]
        return False

    if not backtrack(0):
        return None
    return {anchor: f"3{chosen[anchor]}" for anchor in ANCHORS}


def build_matrix() -> List[ThirdPlaceOption]:
    eligible = anchor_eligible_groups()
    matrix: List[ThirdPlaceOption] = []
    for option, missing in enumerate(missing_group_combinations(), start=1):
        advancing = frozenset(GROUP_IDS) - frozenset(missing)
        assignments = _solve_assignments(advancing, eligible)
        if assignments is None:
            raise ThirdPlaceMatrixError(f"No valid third-place assignment for missing groups {missing}")
        matrix.append(ThirdPlaceOption(option, tuple(missing), assignments))
    return matrix


# =============================================================================
# Loading
# =============================================================================


def load_matrix_file(path: Path) -> List[ThirdPlaceOption]:
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ThirdPlaceMatrixError(f"Cannot read third-place matrix from {path}: {exc}") from exc

    options: List[ThirdPlaceOption] = []
    for row in raw:
        try:
            options.append(
                ThirdPlaceOption(
                    option=int(row["option"]),
                    missing_groups=tuple(row["missing_groups"]),
                    assignments={anchor: row["assignments"][anchor] for anchor in ANCHORS},
                )
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ThirdPlaceMatrixError(f"Malformed third-place row {row!r}: {exc}") from exc
    return sorted(options, key=lambda o: o.option)


def validate_matrix(matrix: Iterable[ThirdPlaceOption]) -> None:
    """
    - exactly 495 options numbered 1..495 in lexicographic missing-group order
    - each option assigns all 8 anchors to distinct advancing groups
    - each assigned group lies in that anchor's eligible groups
    """
    matrix = list(matrix)
    if len(matrix) != EXPECTED_OPTION_COUNT:
        raise ThirdPlaceMatrixError(f"Expected {EXPECTED_OPTION_COUNT} options, got {len(matrix)}")

    eligible = anchor_eligible_groups()
    expected_missing = missing_group_combinations()
    for index, option in enumerate(matrix):
        if option.option != index + 1:
            raise ThirdPlaceMatrixError(f"Option numbers must run 1..495, found {option.option} at row {index + 1}")
        if tuple(option.missing_groups) != expected_missing[index]:
            raise ThirdPlaceMatrixError(
                f"Option {option.option}: missing groups {option.missing_groups} != {expected_missing[index]}"
            )
        if set(option.assignments) != set(ANCHORS):
            raise ThirdPlaceMatrixError(f"Option {option.option}: anchors {sorted(option.assignments)}")

        groups = [option.group_for(anchor) for anchor in ANCHORS]
        if len(set(groups)) != len(ANCHORS):
            raise ThirdPlaceMatrixError(f"Option {option.option}: a group is assigned twice")
        for anchor, group in zip(ANCHORS, groups):
            if group in option.missing_groups:
                raise ThirdPlaceMatrixError(f"Option {option.option}: {anchor} faces non-advancing 3{group}")
            if group not in eligible[anchor]:
                raise ThirdPlaceMatrixError(f"Option {option.option}: 3{group} cannot face {anchor}")


@lru_cache(maxsize=1)
def get_matrix() -> Tuple[ThirdPlaceOption, ...]:
    """The validated table, loaded once per process."""
    path = os.getenv("THIRD_PLACE_MATRIX_PATH")
    if path:
        logger.info("Loading third-place matrix from %s", path)
        matrix = load_matrix_file(Path(path))
    else:
        matrix = build_matrix()
    validate_matrix(matrix)
    return tuple(matrix)


@lru_cache(maxsize=1)
def _index_by_missing() -> Dict[Tuple[str, ...], ThirdPlaceOption]:
    return {tuple(option.missing_groups): option for option in get_matrix()}


# =============================================================================
# Lookup
# =============================================================================


def find_third_place_option(qualifying_groups: Iterable[str]) -> Optional[ThirdPlaceOption]:
    """Option whose missing groups equal the complement of the 8 qualifying groups."""
    qualifying = set(qualifying_groups)
    if len(qualifying) != 8 or not qualifying.issubset(GROUP_IDS):
        return None
    missing = tuple(sorted(g for g in GROUP_IDS if g not in qualifying))
    if len(missing) != 4:
        return None
    return _index_by_missing().get(missing)


def get_third_place_assignments(advancing_groups: List[str]) -> Optional[ThirdPlaceAssignments]:
    """
    Annex C assignments for the groups whose third-placed team advances.

    None unless exactly 8 groups are given or when no option matches.
    """
    if len(advancing_groups) != 8:
        return None
    option = find_third_place_option(advancing_groups)
    if option is None:
        logger.debug("No third-place option for advancing groups %s", advancing_groups)
        return None
    return dict(option.assignments)
