"""
Read-only tournament data: teams, groups, playoff paths and the knockout
slot structure.
"""
from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, HTTPException

from app.routes.bracket import ApiModel
from app.services.bracket_topology import KNOCKOUT_SLOTS, STAGE_NAMES, BracketSource
from app.services.tournament_registry import GROUPS, PLAYOFF_PATHS, TEAMS_REGISTRY, get_group

router = APIRouter()


# ── Response models ──────────────────────────────────────────────────────

class TeamResponse(ApiModel):
    id: str
    name: str
    short_name: str
    flag_code: str
    group_id: Optional[str] = None
    is_playoff_slot: bool = False


class GroupResponse(ApiModel):
    id: str
    name: str
    teams: List[str]


class PlayoffPathResponse(ApiModel):
    id: str
    name: str
    slot_team_id: str
    candidate_ids: List[str]


class SourceResponse(ApiModel):
    kind: str
    group_id: Optional[str] = None
    match_id: Optional[str] = None
    anchor: Optional[str] = None
    possible_groups: Optional[List[str]] = None


class KnockoutSlotResponse(ApiModel):
    id: str
    match_number: int
    stage: str
    stage_name: str
    home_source: SourceResponse
    away_source: SourceResponse


def _source_response(source: BracketSource) -> SourceResponse:
    return SourceResponse(**asdict(source))


# ── Endpoints ────────────────────────────────────────────────────────────

@router.get("/teams", response_model=List[TeamResponse])
def list_teams(include_candidates: bool = True):
    """All registry teams; include_candidates=false hides playoff candidates not drawn into a group."""
    teams = TEAMS_REGISTRY.values()
    if not include_candidates:
        teams = [t for t in teams if t.group_id]
    return [TeamResponse(**asdict(t)) for t in teams]


@router.get("/groups", response_model=List[GroupResponse])
def list_groups():
    return [GroupResponse(id=g.id, name=g.name, teams=list(g.teams)) for g in GROUPS]


@router.get("/groups/{group_id}", response_model=GroupResponse)
def get_group_detail(group_id: str):
    group = get_group(group_id.upper())
    if not group:
        raise HTTPException(status_code=404, detail="Group not found")
    return GroupResponse(id=group.id, name=group.name, teams=list(group.teams))


@router.get("/playoffs", response_model=List[PlayoffPathResponse])
def list_playoffs():
    return [
        PlayoffPathResponse(
            id=p.id,
            name=p.name,
            slot_team_id=p.slot_team_id,
            candidate_ids=list(p.candidate_ids),
        )
        for p in PLAYOFF_PATHS
    ]


@router.get("/knockout/slots", response_model=List[KnockoutSlotResponse])
def list_knockout_slots():
    """The 32 knockout slots in display order, round by round."""
    return [
        KnockoutSlotResponse(
            id=slot.id,
            match_number=slot.match_number,
            stage=slot.stage,
            stage_name=STAGE_NAMES[slot.stage],
            home_source=_source_response(slot.home_source),
            away_source=_source_response(slot.away_source),
        )
        for slot in KNOCKOUT_SLOTS
    ]
