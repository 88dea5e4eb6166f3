import pytest

from pyleague.persistence import SquadStore

from tests.factories import make_pool, make_settings, make_squad


@pytest.fixture
def store(tmp_path, monkeypatch):
    monkeypatch.delenv("PYLEAGUE_DB_PATH", raising=False)
    return SquadStore(tmp_path / "ledger.sqlite")


def test_squad_round_trip(store):
    squad = make_squad(bankedPoints=12.5, totalPoints=317.5)

    store.save_squad(squad)

    assert store.get_squad("sq1") == squad
    assert store.get("sq1") == squad
    assert store.get_squad("missing") is None


def test_save_squad_overwrites(store):
    store.save(make_squad())
    store.save(make_squad(squadName="Renamed"))

    assert store.get_squad("sq1").squad_name == "Renamed"
    assert len(store.get_by_league("lg1")) == 1


def test_get_by_league_orders_by_total(store):
    store.save_squad(make_squad(id="a", totalPoints=10))
    store.save_squad(make_squad(id="b", totalPoints=30))
    store.save_squad(make_squad(id="c", totalPoints=20))
    store.save_squad(make_squad(id="d", leagueId="other", totalPoints=99))

    assert [squad.id for squad in store.get_by_league("lg1")] == ["b", "c", "a"]


def test_league_and_pool_round_trip(store):
    settings = make_settings()
    pool = make_pool()

    store.save_league(settings)
    store.save_pool(pool)

    assert store.get_league("lg1") == settings
    assert store.get_pool("pool1") == pool
    assert [league.id for league in store.list_leagues()] == ["lg1"]
    assert store.get_league("nope") is None
    assert store.get_pool("nope") is None


def test_update_pool_points(store):
    store.save_pool(make_pool())

    pool = store.update_pool_points("pool1", {"p1": 140, "p7": 61.5}, message="Match 12")

    assert pool.get_current_points("p1") == 140.0
    assert pool.get_current_points("p7") == 61.5
    assert pool.get_current_points("p2") == 80.0
    assert store.get_pool("pool1").last_update_message == "Match 12"


def test_update_unknown_pool_raises(store):
    with pytest.raises(KeyError):
        store.update_pool_points("nope", {"p1": 1})


def test_transaction_rolls_back_on_error(store):
    store.save_squad(make_squad())

    with pytest.raises(RuntimeError):
        with store.transaction():
            store.save_squad(make_squad(squadName="Half written"))
            raise RuntimeError("boom")

    assert store.get_squad("sq1").squad_name == "Deccan Dashers"


def test_env_path_takes_precedence(tmp_path, monkeypatch):
    env_path = tmp_path / "from-env.sqlite"
    monkeypatch.setenv("PYLEAGUE_DB_PATH", str(env_path))

    store = SquadStore(tmp_path / "explicit.sqlite")

    assert store.db_path == env_path
    assert env_path.exists()
