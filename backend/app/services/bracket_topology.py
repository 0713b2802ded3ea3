"""
Knockout Bracket Topology: the 32 fixed knockout slots (M73..M104) and where
each slot's two participants come from.

Sources form a tagged union of frozen dataclasses. The structure is static and
validated at import: every referenced group/match exists, matches only feed
later matches, and each third-place source carries the first-place anchor it
faces.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Literal, Tuple, Union

from app.services.tournament_registry import GROUP_IDS

KnockoutStage = Literal["roundOf32", "roundOf16", "quarterFinals", "semiFinals", "thirdPlace", "final"]

STAGE_ORDER: Tuple[str, ...] = ("roundOf32", "roundOf16", "quarterFinals", "semiFinals", "thirdPlace", "final")

STAGE_NAMES: Dict[str, str] = {
    "roundOf32": "Dieciseisavos",
    "roundOf16": "Octavos",
    "quarterFinals": "Cuartos",
    "semiFinals": "Semifinales",
    "thirdPlace": "Tercer Lugar",
    "final": "Final",
}

FINAL_MATCH_ID = "M104"
SEMI_FINAL_MATCH_IDS: Tuple[str, ...] = ("M101", "M102")


class TopologyError(ValueError):
    """Raised when the static knockout structure is inconsistent."""


# =============================================================================
# Bracket sources
# =============================================================================


@dataclass(frozen=True)
class GroupWinner:
    group_id: str
    kind: str = "groupWinner"


@dataclass(frozen=True)
class GroupRunnerUp:
    group_id: str
    kind: str = "groupRunnerUp"


@dataclass(frozen=True)
class ThirdPlace:
    """Third-placed team assigned by the Annex C matrix to the given first-place anchor."""

    anchor: str  # "1A", "1B", "1D", "1E", "1G", "1I", "1K", "1L"
    possible_groups: Tuple[str, ...]
    kind: str = "thirdPlace"


@dataclass(frozen=True)
class WinnerOf:
    match_id: str
    kind: str = "winnerOf"


@dataclass(frozen=True)
class LoserOf:
    match_id: str
    kind: str = "loserOf"


BracketSource = Union[GroupWinner, GroupRunnerUp, ThirdPlace, WinnerOf, LoserOf]


@dataclass(frozen=True)
class KnockoutMatchSlot:
    id: str
    match_number: int
    stage: str
    home_source: BracketSource
    away_source: BracketSource

    @property
    def sources(self) -> Tuple[BracketSource, BracketSource]:
        return (self.home_source, self.away_source)


def _slot(number: int, stage: str, home: BracketSource, away: BracketSource) -> Tuple[str, KnockoutMatchSlot]:
    match_id = f"M{number}"
    return match_id, KnockoutMatchSlot(match_id, number, stage, home, away)


def _third(anchor: str, groups: str) -> ThirdPlace:
    return ThirdPlace(anchor=anchor, possible_groups=tuple(groups))


# =============================================================================
# Knockout matches (logical structure)
# =============================================================================

KNOCKOUT_MATCHES: Dict[str, KnockoutMatchSlot] = dict([
    # Round of 32
    _slot(73, "roundOf32", GroupRunnerUp("A"), GroupRunnerUp("B")),
    _slot(74, "roundOf32", GroupWinner("E"), _third("1E", "ABCDF")),
    _slot(75, "roundOf32", GroupWinner("F"), GroupRunnerUp("C")),
    _slot(76, "roundOf32", GroupWinner("C"), GroupRunnerUp("F")),
    _slot(77, "roundOf32", GroupWinner("I"), _third("1I", "CDFGH")),
    _slot(78, "roundOf32", GroupRunnerUp("E"), GroupRunnerUp("I")),
    _slot(79, "roundOf32", GroupWinner("A"), _third("1A", "CEFHI")),
    _slot(80, "roundOf32", GroupWinner("L"), _third("1L", "EHIJK")),
    _slot(81, "roundOf32", GroupWinner("D"), _third("1D", "BEFIJ")),
    _slot(82, "roundOf32", GroupWinner("G"), _third("1G", "AEHIJ")),
    _slot(83, "roundOf32", GroupRunnerUp("K"), GroupRunnerUp("L")),
    _slot(84, "roundOf32", GroupWinner("H"), GroupRunnerUp("J")),
    _slot(85, "roundOf32", GroupWinner("B"), _third("1B", "EFGIJ")),
    _slot(86, "roundOf32", GroupWinner("J"), GroupRunnerUp("H")),
    _slot(87, "roundOf32", GroupWinner("K"), _third("1K", "DEIJL")),
    _slot(88, "roundOf32", GroupRunnerUp("D"), GroupRunnerUp("G")),
    # Round of 16
    _slot(89, "roundOf16", WinnerOf("M74"), WinnerOf("M77")),
    _slot(90, "roundOf16", WinnerOf("M73"), WinnerOf("M75")),
    _slot(91, "roundOf16", WinnerOf("M76"), WinnerOf("M78")),
    _slot(92, "roundOf16", WinnerOf("M79"), WinnerOf("M80")),
    _slot(93, "roundOf16", WinnerOf("M83"), WinnerOf("M84")),
    _slot(94, "roundOf16", WinnerOf("M81"), WinnerOf("M82")),
    _slot(95, "roundOf16", WinnerOf("M86"), WinnerOf("M88")),
    _slot(96, "roundOf16", WinnerOf("M85"), WinnerOf("M87")),
    # Quarter-finals
    _slot(97, "quarterFinals", WinnerOf("M89"), WinnerOf("M90")),
    _slot(98, "quarterFinals", WinnerOf("M93"), WinnerOf("M94")),
    _slot(99, "quarterFinals", WinnerOf("M91"), WinnerOf("M92")),
    _slot(100, "quarterFinals", WinnerOf("M95"), WinnerOf("M96")),
    # Semi-finals
    _slot(101, "semiFinals", WinnerOf("M97"), WinnerOf("M98")),
    _slot(102, "semiFinals", WinnerOf("M99"), WinnerOf("M100")),
    # Third place
    _slot(103, "thirdPlace", LoserOf("M101"), LoserOf("M102")),
    # Final
    _slot(104, "final", WinnerOf("M101"), WinnerOf("M102")),
])


# =============================================================================
# Visual ordering (top-to-bottom per bracket column)
# =============================================================================

# Pairs feeding the same round-of-16 match are adjacent
R32_VISUAL_ORDER: Tuple[str, ...] = (
    "M74", "M77",  # -> M89
    "M73", "M75",  # -> M90
    "M83", "M84",  # -> M93
    "M81", "M82",  # -> M94
    "M76", "M78",  # -> M91
    "M79", "M80",  # -> M92
    "M86", "M88",  # -> M95
    "M85", "M87",  # -> M96
)
R16_VISUAL_ORDER: Tuple[str, ...] = ("M89", "M90", "M93", "M94", "M91", "M92", "M95", "M96")
QF_VISUAL_ORDER: Tuple[str, ...] = ("M97", "M98", "M99", "M100")
SF_VISUAL_ORDER: Tuple[str, ...] = SEMI_FINAL_MATCH_IDS
THIRD_PLACE_VISUAL_ORDER: Tuple[str, ...] = ("M103",)
FINAL_VISUAL_ORDER: Tuple[str, ...] = (FINAL_MATCH_ID,)

# Round by round, so every slot comes after all of its feeders
KNOCKOUT_SLOTS: List[KnockoutMatchSlot] = [
    KNOCKOUT_MATCHES[match_id]
    for match_id in (
        R32_VISUAL_ORDER
        + R16_VISUAL_ORDER
        + QF_VISUAL_ORDER
        + SF_VISUAL_ORDER
        + THIRD_PLACE_VISUAL_ORDER
        + FINAL_VISUAL_ORDER
    )
]

ROUND_OF_32_SLOTS: List[KnockoutMatchSlot] = [s for s in KNOCKOUT_SLOTS if s.stage == "roundOf32"]
LATER_ROUND_SLOTS: List[KnockoutMatchSlot] = [s for s in KNOCKOUT_SLOTS if s.stage != "roundOf32"]

TOTAL_KNOCKOUT_MATCHES = len(KNOCKOUT_SLOTS)

# Possible-groups signature -> anchor, kept to cross-check the anchors stored on
# the ThirdPlace sources.
THIRD_PLACE_SIGNATURES: Dict[str, str] = {
    "ABCDF": "1E",
    "CDFGH": "1I",
    "CEFHI": "1A",
    "EHIJK": "1L",
    "BEFIJ": "1D",
    "AEHIJ": "1G",
    "EFGIJ": "1B",
    "DEIJL": "1K",
}


def third_place_sources() -> List[ThirdPlace]:
    """All ThirdPlace sources in round-of-32 visual order."""
    return [src for slot in ROUND_OF_32_SLOTS for src in slot.sources if isinstance(src, ThirdPlace)]


def anchor_eligible_groups() -> Dict[str, FrozenSet[str]]:
    """anchor ("1A", ...) -> the five groups whose third-placed team may face it."""
    return {src.anchor: frozenset(src.possible_groups) for src in third_place_sources()}


def get_knockout_match(match_id: str):
    return KNOCKOUT_MATCHES.get(match_id)


# =============================================================================
# Dependency graph
# =============================================================================


def _build_dependents() -> Dict[str, Tuple[str, ...]]:
    """match_id -> ids of slots fed directly by it (winner or loser), in slot order."""
    dependents: Dict[str, List[str]] = defaultdict(list)
    for slot in KNOCKOUT_SLOTS:
        for src in slot.sources:
            if isinstance(src, (WinnerOf, LoserOf)) and slot.id not in dependents[src.match_id]:
                dependents[src.match_id].append(slot.id)
    return {match_id: tuple(ids) for match_id, ids in dependents.items()}


DEPENDENTS: Dict[str, Tuple[str, ...]] = _build_dependents()

_SLOT_POSITION: Dict[str, int] = {slot.id: i for i, slot in enumerate(KNOCKOUT_SLOTS)}


def matches_depending_on(match_id: str) -> List[KnockoutMatchSlot]:
    """
    Every slot that depends on match_id, directly or transitively.

    Work-list traversal with a visited set; result is in KNOCKOUT_SLOTS order,
    so feeders are always listed before the slots they feed.
    """
    found = set()
    visited = {match_id}
    work = [match_id]
    while work:
        current = work.pop()
        for dependent_id in DEPENDENTS.get(current, ()):
            if dependent_id in visited:
                continue
            visited.add(dependent_id)
            found.add(dependent_id)
            work.append(dependent_id)
    return [KNOCKOUT_MATCHES[m] for m in sorted(found, key=_SLOT_POSITION.__getitem__)]


# =============================================================================
# Load-time validation
# =============================================================================


def validate_topology() -> None:
    if len(KNOCKOUT_SLOTS) != 32 or len({s.id for s in KNOCKOUT_SLOTS}) != 32:
        raise TopologyError("Knockout bracket must contain 32 distinct slots")
    if set(KNOCKOUT_MATCHES) != {s.id for s in KNOCKOUT_SLOTS}:
        raise TopologyError("Visual ordering does not cover every knockout match")

    anchors = set()
    for slot in KNOCKOUT_SLOTS:
        if slot.stage not in STAGE_ORDER:
            raise TopologyError(f"{slot.id}: unknown stage '{slot.stage}'")
        for src in slot.sources:
            if isinstance(src, (GroupWinner, GroupRunnerUp)):
                if src.group_id not in GROUP_IDS:
                    raise TopologyError(f"{slot.id}: unknown group '{src.group_id}'")
            elif isinstance(src, ThirdPlace):
                signature = "".join(sorted(src.possible_groups))
                if THIRD_PLACE_SIGNATURES.get(signature) != src.anchor:
                    raise TopologyError(f"{slot.id}: anchor {src.anchor} does not match signature {signature}")
                if src.anchor in anchors:
                    raise TopologyError(f"{slot.id}: anchor {src.anchor} used twice")
                home = slot.home_source
                if not isinstance(home, GroupWinner) or f"1{home.group_id}" != src.anchor:
                    raise TopologyError(f"{slot.id}: anchor {src.anchor} is not the home group winner")
                anchors.add(src.anchor)
            elif isinstance(src, (WinnerOf, LoserOf)):
                feeder = KNOCKOUT_MATCHES.get(src.match_id)
                if feeder is None:
                    raise TopologyError(f"{slot.id}: unknown source match '{src.match_id}'")
                if _SLOT_POSITION[feeder.id] >= _SLOT_POSITION[slot.id]:
                    raise TopologyError(f"{slot.id}: source {feeder.id} is not an earlier match")
            else:
                raise TopologyError(f"{slot.id}: unsupported source {src!r}")

    if anchors != set(THIRD_PLACE_SIGNATURES.values()):
        raise TopologyError(f"Third-place anchors {sorted(anchors)} do not cover the matrix anchors")


validate_topology()
