from datetime import date

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError

from shop_service.models import Order, Product, User
from shop_service.queries import list_tables
from shop_service.schemas import Dataset, OrderIn
from shop_service.seed import (
    FULL_DATASET,
    SMOKE_DATASET,
    clear,
    drop_schema,
    reset,
    seed,
)


def _counts(db):
    return (
        db.query(User).count(),
        db.query(Product).count(),
        db.query(Order).count(),
    )


def test_full_dataset_sizes(db):
    assert _counts(db) == (5, 10, 20)


def test_smoke_dataset_is_subset_of_full():
    assert len(SMOKE_DATASET.users) == 3
    assert len(SMOKE_DATASET.products) == 3
    assert len(SMOKE_DATASET.orders) == 4
    assert SMOKE_DATASET.orders == FULL_DATASET.orders[:4]


def test_schema_has_three_tables(empty_db):
    assert list_tables(empty_db) == ["orders", "products", "users"]


def test_drop_schema_removes_tables(engine, empty_db):
    drop_schema(engine)
    assert list_tables(empty_db) == []


def test_orders_reference_existing_rows(db):
    user_ids = {u.user_id for u in db.query(User).all()}
    product_ids = {p.product_id for p in db.query(Product).all()}
    for order in db.query(Order).all():
        assert order.user_id in user_ids
        assert order.product_id in product_ids
        assert order.user.user_id == order.user_id
        assert order.product.product_id == order.product_id


def test_primary_keys_unique(db):
    for model, key in ((User, "user_id"), (Product, "product_id"), (Order, "order_id")):
        keys = [getattr(row, key) for row in db.query(model).all()]
        assert len(keys) == len(set(keys))


def test_all_quantities_positive(db):
    assert all(order.quantity >= 1 for order in db.query(Order).all())


def test_seeding_twice_fails_with_primary_key_collision(db):
    with pytest.raises(IntegrityError):
        seed(db, FULL_DATASET)
    # The failed transaction is rolled back; the first load is untouched.
    assert _counts(db) == (5, 10, 20)


def test_reset_is_idempotent(db):
    reset(db, FULL_DATASET)
    reset(db, FULL_DATASET)
    assert _counts(db) == (5, 10, 20)


def test_clear_then_seed_smoke(db):
    clear(db)
    assert _counts(db) == (0, 0, 0)
    seed(db, SMOKE_DATASET)
    assert _counts(db) == (3, 3, 4)


def test_order_with_unknown_user_rolls_back_everything(empty_db):
    broken = Dataset(
        users=SMOKE_DATASET.users,
        products=SMOKE_DATASET.products,
        orders=[
            OrderIn(order_id=1, user_id=99, product_id=1, quantity=1, order_date=date(2024, 6, 1)),
        ],
    )
    with pytest.raises(IntegrityError):
        seed(empty_db, broken)
    assert _counts(empty_db) == (0, 0, 0)


def test_order_with_unknown_product_is_rejected(empty_db):
    seed(empty_db, SMOKE_DATASET)
    extra = Dataset(
        users=[],
        products=[],
        orders=[
            OrderIn(order_id=50, user_id=1, product_id=42, quantity=1, order_date=date(2024, 6, 1)),
        ],
    )
    with pytest.raises(IntegrityError):
        seed(empty_db, extra)
    assert _counts(empty_db) == (3, 3, 4)


def test_malformed_fixture_rejected_before_sql():
    with pytest.raises(ValidationError):
        Dataset(
            users=[{"user_id": 1, "username": "x" * 51, "email": "x@example.com"}],
            products=[],
            orders=[],
        )
    with pytest.raises(ValidationError):
        Dataset(
            users=[],
            products=[{"product_id": 1, "product_name": "Cable", "price": "1.999"}],
            orders=[],
        )


def test_failed_reset_keeps_previous_rows(db):
    broken = Dataset(
        users=SMOKE_DATASET.users,
        products=SMOKE_DATASET.products,
        orders=[
            OrderIn(order_id=1, user_id=99, product_id=1, quantity=1, order_date=date(2024, 6, 1)),
        ],
    )
    with pytest.raises(IntegrityError):
        reset(db, broken)
    assert _counts(db) == (5, 10, 20)


def test_reset_replaces_rows_with_new_dataset(db):
    reset(db, SMOKE_DATASET)
    assert _counts(db) == (3, 3, 4)


def test_seed_without_schema_rolls_back(engine, empty_db):
    drop_schema(engine)
    with pytest.raises(OperationalError):
        seed(empty_db, SMOKE_DATASET)
    # The session is usable again after the rollback.
    assert list_tables(empty_db) == []


def test_clear_without_schema_rolls_back(engine, empty_db):
    drop_schema(engine)
    with pytest.raises(OperationalError):
        clear(empty_db)
    assert not empty_db.in_transaction()
