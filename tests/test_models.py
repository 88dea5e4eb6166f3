from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from pyleague.models import (
    PlayerEntry,
    PlayerPool,
    PoolPlayer,
    ReversalMarkerEntry,
    RoleReassignmentEntry,
    Squad,
    SubstitutionEntry,
    parse_history_entry,
)


def _stored_squad() -> dict:
    return {
        "id": "sq1",
        "leagueId": "lg1",
        "userId": "u1",
        "squadName": "Deccan Dashers",
        "players": [
            {"playerId": "p1", "playerName": "One", "role": "batsman", "points": 120},
            {"playerId": "p2", "playerName": "Two", "role": "Bowler", "points": 80, "pointsAtJoining": 20},
        ],
        "captainId": "p1",
        "viceCaptainId": "p2",
        "bankedPoints": 15.5,
        "benchTransfersUsed": 1,
        "transfersUsed": 1,
        "transferHistory": [
            {
                "timestamp": "2025-01-15T10:00:00Z",
                "transferType": "bench",
                "changeType": "playerSubstitution",
                "playerOut": "p4",
                "playerIn": "p2",
            }
        ],
    }


def test_squad_loads_camel_case_record():
    squad = Squad.model_validate(_stored_squad())

    assert squad.league_id == "lg1"
    assert squad.players[1].role == "bowler"
    assert squad.players[0].points_at_joining == 0.0
    assert squad.players[0].points_when_role_assigned is None
    assert isinstance(squad.transfer_history[0], SubstitutionEntry)
    assert squad.bench_transfers_used == 1


def test_squad_record_round_trips_field_presence():
    squad = Squad.model_validate(_stored_squad())
    record = squad.to_record()

    assert record["captainId"] == "p1"
    assert "xFactorId" not in record
    assert "pointsWhenRoleAssigned" not in record["players"][0]
    entry = record["transferHistory"][0]
    assert set(entry) == {"timestamp", "transferType", "changeType", "playerOut", "playerIn"}


def test_squad_rejects_shared_role_holders():
    payload = _stored_squad()
    payload["xFactorId"] = "p1"

    with pytest.raises(ValidationError):
        Squad.model_validate(payload)


def test_player_entry_is_frozen():
    entry = PlayerEntry(player_id="p1", points=10)

    with pytest.raises((TypeError, ValidationError)):
        entry.points = 20  # type: ignore[misc]


def test_role_reassignment_entry_rejects_player_out():
    with pytest.raises(ValidationError):
        parse_history_entry(
            {
                "timestamp": "2025-01-20T00:00:00Z",
                "transferType": "flexible",
                "changeType": "roleReassignment",
                "newViceCaptainId": "p3",
                "playerOut": "p2",
            }
        )


def test_role_reassignment_entry_has_no_captain_field():
    with pytest.raises(ValidationError):
        parse_history_entry(
            {
                "timestamp": "2025-01-20T00:00:00Z",
                "transferType": "flexible",
                "changeType": "roleReassignment",
                "newCaptainId": "p3",
            }
        )


def test_role_reassignment_entry_needs_exactly_one_role():
    base = {"timestamp": "2025-01-20T00:00:00Z", "transferType": "midSeason", "changeType": "roleReassignment"}

    with pytest.raises(ValidationError):
        parse_history_entry(base)
    with pytest.raises(ValidationError):
        parse_history_entry({**base, "newViceCaptainId": "p3", "newXFactorId": "p4"})

    entry = parse_history_entry({**base, "newXFactorId": "p4"})
    assert isinstance(entry, RoleReassignmentEntry)
    assert entry.target_id == "p4"


def test_bench_role_reassignment_entry_is_not_representable():
    with pytest.raises(ValidationError):
        parse_history_entry(
            {
                "timestamp": "2025-01-20T00:00:00Z",
                "transferType": "bench",
                "changeType": "roleReassignment",
                "newViceCaptainId": "p3",
            }
        )


def test_reversal_marker_parses():
    entry = parse_history_entry(
        {
            "timestamp": "2025-01-16T00:00:00Z",
            "transferType": "admin_reversal",
            "changeType": "admin_reversal",
            "note": "Transfer #1 reversed by admin",
            "reversedTransferIndex": 0,
        }
    )

    assert isinstance(entry, ReversalMarkerEntry)
    assert entry.reversed_transfer_index == 0
    assert entry.to_record()["changeType"] == "admin_reversal"


def test_substitution_entry_timestamp_round_trip():
    entry = SubstitutionEntry(
        timestamp=datetime(2025, 1, 15, tzinfo=timezone.utc),
        transfer_type="flexible",
        player_out="p5",
        player_in="p3",
        points_banked=42.0,
    )

    record = entry.to_record()
    assert record["pointsBanked"] == 42.0
    assert "snapshot" not in record
    assert parse_history_entry(record) == entry


def test_substitution_entry_snapshot_rejects_unknown_role():
    record = {
        "timestamp": "2025-01-15T00:00:00Z",
        "transferType": "bench",
        "changeType": "playerSubstitution",
        "playerOut": "p1",
        "playerIn": "p5",
        "snapshot": {"playerInPointsAtJoining": 10, "rolesMoved": ["captain"]},
    }
    entry = parse_history_entry(record)
    assert entry.snapshot.player_in_points_at_joining == 10.0
    assert entry.snapshot.roles_moved == ["captain"]

    record["snapshot"]["rolesMoved"] = ["keeper"]
    with pytest.raises(ValidationError):
        parse_history_entry(record)


def test_pool_lookup():
    pool = PlayerPool(
        id="pool1",
        players=[
            PoolPlayer(player_id="p1", name="One", role="wk", points=55.0),
            PoolPlayer(player_id="p2", name="Two", role="all-rounder", points=12.5),
        ],
    )

    assert pool.get_current_points("p1") == 55.0
    assert pool.get("p1").role == "wicketkeeper"
    assert pool.get("p2").role == "allrounder"
    assert "p2" in pool
    assert "p9" not in pool
    with pytest.raises(KeyError):
        pool.get_current_points("p9")


def test_pool_player_to_entry_starts_from_current_points():
    entry = PoolPlayer(player_id="p7", name="Seven", team="IND", role="bowler", points=88.0).to_entry()

    assert entry.points == 88.0
    assert entry.points_at_joining == 88.0
    assert entry.points_when_role_assigned is None
    assert entry.player_name == "Seven"
