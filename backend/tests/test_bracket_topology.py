"""
Tests for the static knockout structure and its dependency walk.
"""
from app.services.bracket_topology import (
    DEPENDENTS,
    KNOCKOUT_MATCHES,
    KNOCKOUT_SLOTS,
    LATER_ROUND_SLOTS,
    ROUND_OF_32_SLOTS,
    STAGE_NAMES,
    TOTAL_KNOCKOUT_MATCHES,
    GroupWinner,
    LoserOf,
    ThirdPlace,
    WinnerOf,
    anchor_eligible_groups,
    get_knockout_match,
    matches_depending_on,
    third_place_sources,
    validate_topology,
)


def test_32_slots_m73_to_m104():
    assert TOTAL_KNOCKOUT_MATCHES == 32
    assert sorted(s.match_number for s in KNOCKOUT_SLOTS) == list(range(73, 105))
    assert len(ROUND_OF_32_SLOTS) == 16
    assert len(LATER_ROUND_SLOTS) == 16


def test_round_of_32_slots_fed_only_by_group_sources():
    for slot in ROUND_OF_32_SLOTS:
        for src in slot.sources:
            assert not isinstance(src, (WinnerOf, LoserOf))


def test_every_feeder_listed_before_the_slot_it_feeds():
    position = {slot.id: i for i, slot in enumerate(KNOCKOUT_SLOTS)}
    for slot in LATER_ROUND_SLOTS:
        for src in slot.sources:
            assert position[src.match_id] < position[slot.id]


def test_third_place_sources_carry_anchor_of_home_winner():
    sources = third_place_sources()
    assert len(sources) == 8
    for slot in ROUND_OF_32_SLOTS:
        if isinstance(slot.away_source, ThirdPlace):
            assert isinstance(slot.home_source, GroupWinner)
            assert slot.away_source.anchor == f"1{slot.home_source.group_id}"


def test_anchor_eligible_groups():
    eligible = anchor_eligible_groups()
    assert set(eligible) == {"1A", "1B", "1D", "1E", "1G", "1I", "1K", "1L"}
    assert eligible["1E"] == frozenset("ABCDF")
    assert eligible["1K"] == frozenset("DEIJL")
    for groups in eligible.values():
        assert len(groups) == 5


def test_third_place_match_fed_by_semi_final_losers():
    slot = get_knockout_match("M103")
    assert slot.home_source == LoserOf("M101")
    assert slot.away_source == LoserOf("M102")
    assert get_knockout_match("M104").sources == (WinnerOf("M101"), WinnerOf("M102"))
    assert get_knockout_match("M999") is None


def test_semi_finals_feed_final_and_third_place():
    assert DEPENDENTS["M101"] == ("M103", "M104")
    assert "M104" not in DEPENDENTS


def test_matches_depending_on_round_of_32_match():
    ids = [slot.id for slot in matches_depending_on("M74")]

    # R16 -> QF -> SF -> 3rd place & final, listed in play order
    assert ids == ["M89", "M97", "M101", "M103", "M104"]


def test_matches_depending_on_final_is_empty():
    assert matches_depending_on("M104") == []
    assert matches_depending_on("M103") == []


def test_every_round_of_32_match_reaches_the_final():
    for slot in ROUND_OF_32_SLOTS:
        ids = [s.id for s in matches_depending_on(slot.id)]
        assert ids[-1] == "M104"
        assert len(ids) == len(set(ids))


def test_stage_names_cover_all_stages():
    for slot in KNOCKOUT_SLOTS:
        assert slot.stage in STAGE_NAMES
    assert KNOCKOUT_MATCHES["M104"].stage == "final"


def test_validate_topology_passes():
    validate_topology()
