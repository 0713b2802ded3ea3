"""
Tournament Registry: FIFA World Cup 2026 teams, groups and playoff paths
(Single Source of Truth)

Every team lookup goes through TEAMS_REGISTRY. Six group slots are playoff
placeholders that resolve to a real team once the user picks the playoff
winner; the substitution is a plain key -> key mapping (PlayoffMapping).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

GROUP_IDS: Tuple[str, ...] = ("A", "B", "C", "D", "E", "F", "G", "H", "I", "J", "K", "L")

PlayoffMapping = Dict[str, str]


class RegistryError(ValueError):
    """Raised when the static team/group data is inconsistent."""


@dataclass(frozen=True)
class Team:
    id: str
    name: str
    short_name: str
    flag_code: str
    group_id: Optional[str] = None
    is_playoff_slot: bool = False


@dataclass(frozen=True)
class Group:
    id: str
    name: str
    teams: Tuple[str, ...]


@dataclass(frozen=True)
class PlayoffPath:
    id: str
    name: str
    slot_team_id: str
    candidate_ids: Tuple[str, ...]


@dataclass(frozen=True)
class PlayoffSelection:
    playoff_id: str
    selected_team_id: str


def _team(team_id, name, short_name, flag_code, group_id=None, is_playoff_slot=False) -> Tuple[str, Team]:
    return team_id, Team(team_id, name, short_name, flag_code, group_id, is_playoff_slot)


# =============================================================================
# Teams
# =============================================================================

TEAMS_REGISTRY: Dict[str, Team] = dict([
    # ---- Confirmed teams (42) ----
    _team("mex", "México", "MEX", "MX", "A"),
    _team("rsa", "Sudáfrica", "RSA", "ZA", "A"),
    _team("kor", "Corea del Sur", "KOR", "KR", "A"),
    _team("can", "Canadá", "CAN", "CA", "B"),
    _team("qat", "Qatar", "QAT", "QA", "B"),
    _team("sui", "Suiza", "SUI", "CH", "B"),
    _team("bra", "Brasil", "BRA", "BR", "C"),
    _team("mar", "Marruecos", "MAR", "MA", "C"),
    _team("hai", "Haití", "HAI", "HT", "C"),
    _team("sco", "Escocia", "SCO", "GB", "C"),
    _team("usa", "Estados Unidos", "USA", "US", "D"),
    _team("par", "Paraguay", "PAR", "PY", "D"),
    _team("aus", "Australia", "AUS", "AU", "D"),
    _team("ger", "Alemania", "GER", "DE", "E"),
    _team("cur", "Curazao", "CUR", "CW", "E"),
    _team("civ", "Costa de Marfil", "CIV", "CI", "E"),
    _team("ecu", "Ecuador", "ECU", "EC", "E"),
    _team("ned", "Países Bajos", "NED", "NL", "F"),
    _team("jpn", "Japón", "JPN", "JP", "F"),
    _team("tun", "Túnez", "TUN", "TN", "F"),
    _team("bel", "Bélgica", "BEL", "BE", "G"),
    _team("egy", "Egipto", "EGY", "EG", "G"),
    _team("irn", "Irán", "IRN", "IR", "G"),
    _team("nzl", "Nueva Zelanda", "NZL", "NZ", "G"),
    _team("esp", "España", "ESP", "ES", "H"),
    _team("cpv", "Cabo Verde", "CPV", "CV", "H"),
    _team("ksa", "Arabia Saudita", "KSA", "SA", "H"),
    _team("uru", "Uruguay", "URU", "UY", "H"),
    _team("fra", "Francia", "FRA", "FR", "I"),
    _team("sen", "Senegal", "SEN", "SN", "I"),
    _team("nor", "Noruega", "NOR", "NO", "I"),
    _team("arg", "Argentina", "ARG", "AR", "J"),
    _team("alg", "Argelia", "ALG", "DZ", "J"),
    _team("aut", "Austria", "AUT", "AT", "J"),
    _team("jor", "Jordania", "JOR", "JO", "J"),
    _team("por", "Portugal", "POR", "PT", "K"),
    _team("uzb", "Uzbekistán", "UZB", "UZ", "K"),
    _team("col", "Colombia", "COL", "CO", "K"),
    _team("eng", "Inglaterra", "ENG", "GB", "L"),
    _team("cro", "Croacia", "CRO", "HR", "L"),
    _team("gha", "Ghana", "GHA", "GH", "L"),
    _team("pan", "Panamá", "PAN", "PA", "L"),
    # ---- Playoff slot placeholders (6) ----
    _team("playoff-1-slot", "Playoff 1", "PO1", "UN", "K", True),
    _team("playoff-2-slot", "Playoff 2", "PO2", "UN", "I", True),
    _team("playoff-3-slot", "Playoff 3", "PO3", "EU", "B", True),
    _team("playoff-4-slot", "Playoff 4", "PO4", "EU", "F", True),
    _team("playoff-5-slot", "Playoff 5", "PO5", "EU", "D", True),
    _team("playoff-6-slot", "Playoff 6", "PO6", "EU", "A", True),
    # ---- Playoff candidates ----
    # Intercontinental 1
    _team("ncl", "Nueva Caledonia", "NCL", "NC"),
    _team("jam", "Jamaica", "JAM", "JM"),
    _team("cod", "RD Congo", "COD", "CD"),
    # Intercontinental 2
    _team("bol", "Bolivia", "BOL", "BO"),
    _team("sur", "Surinam", "SUR", "SR"),
    _team("irq", "Irak", "IRQ", "IQ"),
    # UEFA A
    _team("ita", "Italia", "ITA", "IT"),
    _team("nir", "Irlanda del Norte", "NIR", "GB"),
    _team("wal", "Gales", "WAL", "GB"),
    _team("bih", "Bosnia y Herzegovina", "BIH", "BA"),
    # UEFA B
    _team("ukr", "Ucrania", "UKR", "UA"),
    _team("swe", "Suecia", "SWE", "SE"),
    _team("pol", "Polonia", "POL", "PL"),
    _team("alb", "Albania", "ALB", "AL"),
    # UEFA C
    _team("svk", "Eslovaquia", "SVK", "SK"),
    _team("kos", "Kosovo", "KOS", "XK"),
    _team("tur", "Turquía", "TUR", "TR"),
    _team("rou", "Rumania", "ROU", "RO"),
    # UEFA D
    _team("cze", "República Checa", "CZE", "CZ"),
    _team("irl", "Irlanda", "IRL", "IE"),
    _team("den", "Dinamarca", "DEN", "DK"),
    _team("mkd", "Macedonia del Norte", "MKD", "MK"),
])


# =============================================================================
# Playoff paths
# =============================================================================

PLAYOFF_PATHS: List[PlayoffPath] = [
    PlayoffPath("playoff-1", "Playoff Intercontinental 1", "playoff-1-slot", ("ncl", "jam", "cod")),
    PlayoffPath("playoff-2", "Playoff Intercontinental 2", "playoff-2-slot", ("bol", "sur", "irq")),
    PlayoffPath("playoff-3", "Playoff UEFA A", "playoff-3-slot", ("ita", "nir", "wal", "bih")),
    PlayoffPath("playoff-4", "Playoff UEFA B", "playoff-4-slot", ("ukr", "swe", "pol", "alb")),
    PlayoffPath("playoff-5", "Playoff UEFA C", "playoff-5-slot", ("svk", "kos", "tur", "rou")),
    PlayoffPath("playoff-6", "Playoff UEFA D", "playoff-6-slot", ("cze", "irl", "den", "mkd")),
]


# =============================================================================
# Groups (playoff winners appear through their slot ids)
# =============================================================================

GROUPS: List[Group] = [
    Group("A", "Grupo A", ("mex", "rsa", "kor", "playoff-6-slot")),
    Group("B", "Grupo B", ("can", "playoff-3-slot", "qat", "sui")),
    Group("C", "Grupo C", ("bra", "mar", "hai", "sco")),
    Group("D", "Grupo D", ("usa", "par", "aus", "playoff-5-slot")),
    Group("E", "Grupo E", ("ger", "cur", "civ", "ecu")),
    Group("F", "Grupo F", ("ned", "jpn", "playoff-4-slot", "tun")),
    Group("G", "Grupo G", ("bel", "egy", "irn", "nzl")),
    Group("H", "Grupo H", ("esp", "cpv", "ksa", "uru")),
    Group("I", "Grupo I", ("fra", "sen", "playoff-2-slot", "nor")),
    Group("J", "Grupo J", ("arg", "alg", "aut", "jor")),
    Group("K", "Grupo K", ("por", "playoff-1-slot", "uzb", "col")),
    Group("L", "Grupo L", ("eng", "cro", "gha", "pan")),
]


# =============================================================================
# Team resolution
# =============================================================================

def resolve_team_id(raw_team_id: str, playoff_mapping: PlayoffMapping) -> str:
    """Substitute a playoff placeholder with the selected team; other ids pass through."""
    return playoff_mapping.get(raw_team_id, raw_team_id)


def get_resolved_team(raw_team_id: str, playoff_mapping: PlayoffMapping) -> Optional[Team]:
    return TEAMS_REGISTRY.get(resolve_team_id(raw_team_id, playoff_mapping))


def build_playoff_mapping(selections: List[PlayoffSelection]) -> PlayoffMapping:
    """Map each playoff slot id to the team selected for it. Unknown playoff ids are ignored."""
    paths = {path.id: path for path in PLAYOFF_PATHS}
    mapping: PlayoffMapping = {}
    for selection in selections:
        path = paths.get(selection.playoff_id)
        if path:
            mapping[path.slot_team_id] = selection.selected_team_id
    return mapping


def get_team(team_id: str) -> Optional[Team]:
    return TEAMS_REGISTRY.get(team_id)


def get_group(group_id: str) -> Optional[Group]:
    for group in GROUPS:
        if group.id == group_id:
            return group
    return None


def get_playoff_path(playoff_id: str) -> Optional[PlayoffPath]:
    for path in PLAYOFF_PATHS:
        if path.id == playoff_id:
            return path
    return None


# =============================================================================
# Load-time validation
# =============================================================================

def validate_registry() -> None:
    """
    Check the static data once at import time.

    - group ids are exactly A..L, each group has 4 distinct known team slots
    - every team sits in at most one group, and a team's group_id matches it
    - each playoff slot appears in exactly one path; candidates are real teams
    """
    if tuple(g.id for g in GROUPS) != GROUP_IDS:
        raise RegistryError(f"Groups must be {GROUP_IDS}, got {[g.id for g in GROUPS]}")

    seen: Dict[str, str] = {}
    for group in GROUPS:
        if len(group.teams) != 4 or len(set(group.teams)) != 4:
            raise RegistryError(f"Group {group.id} must list 4 distinct teams")
        for team_id in group.teams:
            team = TEAMS_REGISTRY.get(team_id)
            if team is None:
                raise RegistryError(f"Group {group.id} references unknown team '{team_id}'")
            if team_id in seen:
                raise RegistryError(f"Team '{team_id}' appears in groups {seen[team_id]} and {group.id}")
            if team.group_id != group.id:
                raise RegistryError(f"Team '{team_id}' is tagged group {team.group_id}, listed in {group.id}")
            seen[team_id] = group.id

    slot_ids = {t.id for t in TEAMS_REGISTRY.values() if t.is_playoff_slot}
    path_slots = [p.slot_team_id for p in PLAYOFF_PATHS]
    if sorted(path_slots) != sorted(slot_ids):
        raise RegistryError("Every playoff slot must belong to exactly one playoff path")
    for path in PLAYOFF_PATHS:
        for candidate in path.candidate_ids:
            team = TEAMS_REGISTRY.get(candidate)
            if team is None or team.is_playoff_slot:
                raise RegistryError(f"Playoff {path.id} lists invalid candidate '{candidate}'")


validate_registry()
