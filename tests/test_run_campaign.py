import pytest

import run_campaign
from tsl.domain.models import EntityKind
from tsl.infrastructure.config import get_settings
from tsl.infrastructure.persistence import SqliteStore


@pytest.fixture
def database(tmp_path, monkeypatch):
    path = tmp_path / "tsl.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{path}")
    monkeypatch.setenv("WHATSAPP_TOKEN", "")
    monkeypatch.setenv("WHATSAPP_PHONE_NUMBER_ID", "")
    get_settings.cache_clear()

    store = SqliteStore(str(path))
    store.init()
    yield store
    get_settings.cache_clear()


def seed(store, n):
    business = store.create(EntityKind.BUSINESS, {"name": "Maya Dental"})
    store.create_many(
        EntityKind.CUSTOMER,
        [{"business_id": business.id, "phone": f"92300000000{i}", "name": f"C{i}"} for i in range(n)],
    )
    return business


def test_runs_campaign_against_database(database, capsys):
    business = seed(database, 3)

    exit_code = run_campaign.main([business.id])

    assert exit_code == 0
    assert database.count(EntityKind.CUSTOMER, {"business_id": business.id, "status": "requested"}) == 3
    assert "Campaign Complete!" in capsys.readouterr().out


def test_dry_run_sends_nothing(database, capsys):
    business = seed(database, 2)

    exit_code = run_campaign.main([business.id, "--dry-run"])

    assert exit_code == 0
    assert database.count(EntityKind.CUSTOMER, {"status": "pending"}) == 2
    assert "2 pending customers would be messaged" in capsys.readouterr().out


def test_unknown_business_exits_with_error(database):
    assert run_campaign.main(["missing"]) == 1


def test_memory_mode_exits_with_error(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "")
    get_settings.cache_clear()
    try:
        assert run_campaign.main(["anything"]) == 1
    finally:
        get_settings.cache_clear()
