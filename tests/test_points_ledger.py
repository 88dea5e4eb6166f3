import pytest

from pyleague.ledger.points import compute_squad_points, player_contribution, role_of, with_points
from pyleague.models.player import PlayerEntry
from pyleague.models.squad import SquadRole

from tests.factories import BASE_TOTAL, SQUAD_SIZE, make_squad


def test_captain_multiplier_split():
    entry = PlayerEntry(player_id="c", points=300, points_at_joining=0, points_when_role_assigned=200)

    assert player_contribution(entry, SquadRole.CAPTAIN) == pytest.approx(400.0)


def test_vice_captain_and_x_factor_multipliers():
    entry = PlayerEntry(player_id="v", points=200, points_at_joining=100, points_when_role_assigned=150)

    assert player_contribution(entry, SquadRole.VICE_CAPTAIN) == pytest.approx(125.0)
    assert player_contribution(entry, SquadRole.X_FACTOR) == pytest.approx(112.5)


def test_regular_player_counts_points_since_joining():
    entry = PlayerEntry(player_id="r", points=90, points_at_joining=35)

    assert player_contribution(entry, None) == pytest.approx(55.0)


def test_pool_correction_below_baseline_clamps_to_zero():
    entry = PlayerEntry(player_id="r", points=40, points_at_joining=50)
    holder = PlayerEntry(player_id="c", points=40, points_at_joining=50, points_when_role_assigned=50)

    assert player_contribution(entry, None) == 0.0
    assert player_contribution(holder, SquadRole.CAPTAIN) == 0.0


def test_missing_role_baseline_falls_back_to_join_baseline():
    entry = PlayerEntry(player_id="c", points=100, points_at_joining=40)

    assert player_contribution(entry, SquadRole.CAPTAIN) == pytest.approx(120.0)


def test_legacy_entry_without_join_baseline_counts_everything():
    squad = make_squad(
        players=[{"playerId": "old", "points": 75}],
        captainId=None,
        viceCaptainId=None,
        xFactorId=None,
    )

    assert compute_squad_points(squad, SQUAD_SIZE).total_points == pytest.approx(75.0)


def test_compute_squad_points_splits_role_buckets():
    points = compute_squad_points(make_squad(), SQUAD_SIZE)

    assert points.total_points == pytest.approx(BASE_TOTAL)
    assert points.captain_points == pytest.approx(120.0)
    assert points.vice_captain_points == pytest.approx(120.0)
    assert points.x_factor_points == pytest.approx(45.0)


def test_bench_players_never_contribute():
    squad = make_squad()
    bumped = [*squad.players[:SQUAD_SIZE], *(entry.model_copy(update={"points": 1000}) for entry in squad.bench(SQUAD_SIZE))]

    points = compute_squad_points(squad.model_copy(update={"players": bumped}), SQUAD_SIZE)

    assert points.total_points == pytest.approx(BASE_TOTAL)


def test_role_holder_on_bench_adds_nothing_to_buckets():
    squad = make_squad(xFactorId="p5")

    points = compute_squad_points(squad, SQUAD_SIZE)

    assert points.x_factor_points == 0.0
    # p3 loses its X-Factor bonus and counts plain: 50 - 10.
    assert points.total_points == pytest.approx(BASE_TOTAL - 45.0 + 40.0)


def test_banked_points_are_added():
    points = compute_squad_points(make_squad(bankedPoints=42.5), SQUAD_SIZE)

    assert points.total_points == pytest.approx(BASE_TOTAL + 42.5)


def test_role_precedence():
    squad = make_squad()

    assert role_of(squad, "p1") is SquadRole.CAPTAIN
    assert role_of(squad, "p2") is SquadRole.VICE_CAPTAIN
    assert role_of(squad, "p3") is SquadRole.X_FACTOR
    assert role_of(squad, "p4") is None


def test_with_points_refreshes_stored_fields():
    squad = make_squad(totalPoints=1.0)

    refreshed = with_points(squad, SQUAD_SIZE)

    assert refreshed.total_points == pytest.approx(BASE_TOTAL)
    assert refreshed.captain_points == pytest.approx(120.0)
    assert squad.total_points == 1.0
    assert compute_squad_points(refreshed, SQUAD_SIZE) == compute_squad_points(squad, SQUAD_SIZE)
