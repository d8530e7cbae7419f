"""
Store contract tests, run against both the in-memory and the SQLite backend.
"""

from datetime import date, datetime

import pytest

from tsl.domain.models import Business, Customer, CustomerStatus, EntityKind, PilotLead
from tsl.infrastructure.persistence import RecordValidationError, SqliteStore, StoreError


def add_customers(store, business_id, count, **extra):
    return store.create_many(
        EntityKind.CUSTOMER,
        [{"business_id": business_id, "phone": f"92300000{i:04d}", "name": f"C{i}", **extra}
         for i in range(count)],
    )


def test_create_business_sets_id_defaults_and_timestamps(store):
    business = store.create(
        EntityKind.BUSINESS,
        {"name": "Maya Dental Clinic", "business_type": "clinic", "pilot_start_date": "2024-05-01"},
    )

    assert isinstance(business, Business)
    assert business.id
    assert business.name == "Maya Dental Clinic"
    assert business.business_type == "clinic"
    assert business.pilot_active is False
    assert business.pilot_start_date == date(2024, 5, 1)
    assert isinstance(business.created_at, datetime)
    assert business.created_at == business.updated_at


def test_create_ignores_unknown_and_managed_fields(store):
    business = store.create(EntityKind.BUSINESS, {"name": "Gym", "id": "forced", "colour": "red"})

    assert business.id != "forced"
    assert not hasattr(business, "colour")
    assert store.find_by_id(EntityKind.BUSINESS, business.id) == business


def test_ids_are_unique(store):
    customers = add_customers(store, "b1", 50)
    assert len({c.id for c in customers}) == 50


@pytest.mark.parametrize(
    "kind, fields",
    [
        (EntityKind.BUSINESS, {"owner_name": "No Name"}),
        (EntityKind.BUSINESS, {"name": ""}),
        (EntityKind.CUSTOMER, {"business_id": "b1"}),
        (EntityKind.CUSTOMER, {"phone": "923001234567"}),
        (EntityKind.PILOT_LEAD, {"name": "Sara", "phone": "923001234567"}),
    ],
)
def test_required_fields_are_enforced(store, kind, fields):
    with pytest.raises(RecordValidationError):
        store.create(kind, fields)
    assert store.count(kind) == 0


def test_invalid_status_is_rejected(store):
    with pytest.raises(RecordValidationError):
        store.create(EntityKind.CUSTOMER, {"business_id": "b1", "phone": "1", "status": "lost"})


def test_create_many_is_all_or_nothing_on_validation(store):
    with pytest.raises(RecordValidationError):
        store.create_many(
            EntityKind.CUSTOMER,
            [{"business_id": "b1", "phone": "1"}, {"business_id": "b1", "phone": ""}],
        )
    assert store.count(EntityKind.CUSTOMER) == 0


def test_customer_defaults_to_pending(store):
    (customer,) = add_customers(store, "b1", 1)

    assert isinstance(customer, Customer)
    assert customer.status == CustomerStatus.PENDING.value
    assert customer.review_request_sent_at is None


def test_pilot_lead_is_not_converted_by_default(store):
    lead = store.create(
        EntityKind.PILOT_LEAD,
        {"name": "Sara", "business_name": "Maya Dental", "phone": "923001234567"},
    )
    assert isinstance(lead, PilotLead)
    assert lead.converted_to_business is False


def test_find_filters_exactly_and_keeps_insertion_order(store):
    first = add_customers(store, "b1", 3)
    add_customers(store, "b2", 2)

    found = store.find(EntityKind.CUSTOMER, {"business_id": "b1"})

    assert [c.id for c in found] == [c.id for c in first]
    assert store.find(EntityKind.CUSTOMER, {"business_id": "b3"}) == []


def test_find_accepts_enum_filter_values_and_limit(store):
    add_customers(store, "b1", 5)

    found = store.find(
        EntityKind.CUSTOMER,
        {"business_id": "b1", "status": CustomerStatus.PENDING},
        limit=2,
    )

    assert len(found) == 2
    assert store.find(EntityKind.CUSTOMER, limit=0) == []


def test_find_rejects_unknown_filter_fields(store):
    with pytest.raises(StoreError):
        store.find(EntityKind.CUSTOMER, {"shoe_size": 42})


def test_find_by_id_missing_returns_none(store):
    assert store.find_by_id(EntityKind.BUSINESS, "does-not-exist") is None


def test_count_by_business_and_status(store):
    customers = add_customers(store, "b1", 4)
    add_customers(store, "b2", 1)
    store.update(customers[0], status=CustomerStatus.REQUESTED)

    assert store.count(EntityKind.CUSTOMER) == 5
    assert store.count(EntityKind.CUSTOMER, {"business_id": "b1"}) == 4
    assert store.count(EntityKind.CUSTOMER, {"business_id": "b1", "status": "requested"}) == 1
    assert store.count(EntityKind.CUSTOMER, {"business_id": "b1", "status": "pending"}) == 3


def test_update_persists_and_returns_fresh_record(store):
    (customer,) = add_customers(store, "b1", 1)
    sent_at = datetime(2024, 6, 1, 12, 30)

    updated = store.update(customer, status=CustomerStatus.REQUESTED, review_request_sent_at=sent_at)

    assert updated.status == "requested"
    assert updated.review_request_sent_at == sent_at
    assert updated.updated_at >= customer.updated_at
    assert store.find_by_id(EntityKind.CUSTOMER, customer.id) == updated


def test_returned_records_are_snapshots(store):
    (customer,) = add_customers(store, "b1", 1)

    customer.status = "reviewed"

    assert store.find_by_id(EntityKind.CUSTOMER, customer.id).status == "pending"


def test_update_rejects_unknown_fields_and_bad_status(store):
    (customer,) = add_customers(store, "b1", 1)

    with pytest.raises(RecordValidationError):
        store.update(customer, colour="red")
    with pytest.raises(RecordValidationError):
        store.update(customer, status="lost")
    with pytest.raises(RecordValidationError):
        store.update(customer, phone="")


def test_update_of_unknown_record_fails(store):
    ghost = Customer(id="ghost", business_id="b1", phone="1")
    with pytest.raises(StoreError):
        store.update(ghost, status="requested")


def test_sqlite_data_survives_a_new_store_instance(tmp_path):
    path = str(tmp_path / "durable.db")
    first = SqliteStore(path)
    first.init()
    business = first.create(EntityKind.BUSINESS, {"name": "Gym", "pilot_active": True})

    second = SqliteStore(path)
    second.init()
    reloaded = second.find_by_id(EntityKind.BUSINESS, business.id)

    assert reloaded == business
    assert reloaded.pilot_active is True


def test_sqlite_init_fails_for_unreachable_path(tmp_path):
    store = SqliteStore(str(tmp_path / "missing-dir" / "tsl.db"))
    with pytest.raises(StoreError):
        store.init()
