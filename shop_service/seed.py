"""Schema creation and fixture loading.

The schema has to exist before any data goes in, and users and products have
to be inserted before the orders that reference them. Each call to ``seed`` or
``clear`` is one transaction: it either fully applies or leaves the tables as
they were.
"""
from datetime import date
from decimal import Decimal

from sqlalchemy import delete, insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .database import Base
from .logger import logger
from .models import Order, Product, User
from .schemas import Dataset


def _dataset(users, products, orders) -> Dataset:
    return Dataset(
        users=[
            {"user_id": user_id, "username": username, "email": email}
            for user_id, username, email in users
        ],
        products=[
            {"product_id": product_id, "product_name": name, "price": price}
            for product_id, name, price in products
        ],
        orders=[
            {
                "order_id": order_id,
                "user_id": user_id,
                "product_id": product_id,
                "quantity": quantity,
                "order_date": order_date,
            }
            for order_id, user_id, product_id, quantity, order_date in orders
        ],
    )


FULL_DATASET = _dataset(
    users=[
        (1, "alice", "alice@example.com"),
        (2, "bob", "bob@example.com"),
        (3, "carol", "carol@example.com"),
        (4, "dave", "dave@example.com"),
        (5, "eve", "eve@example.com"),
    ],
    products=[
        (1, "Laptop", Decimal("1200.00")),
        (2, "Mouse", Decimal("25.50")),
        (3, "Keyboard", Decimal("45.00")),
        (4, "Monitor", Decimal("300.00")),
        (5, "Headphones", Decimal("80.00")),
        (6, "Webcam", Decimal("60.00")),
        (7, "Microphone", Decimal("150.00")),
        (8, "Desk", Decimal("200.00")),
        (9, "Chair", Decimal("150.00")),
        (10, "USB Hub", Decimal("20.00")),
    ],
    orders=[
        (1, 1, 1, 1, date(2024, 6, 1)),
        (2, 1, 2, 2, date(2024, 6, 2)),
        (3, 2, 3, 1, date(2024, 6, 3)),
        (4, 3, 2, 1, date(2024, 6, 4)),
        (5, 4, 4, 1, date(2024, 6, 5)),
        (6, 5, 5, 1, date(2024, 6, 6)),
        (7, 1, 6, 1, date(2024, 6, 7)),
        (8, 2, 7, 1, date(2024, 6, 8)),
        (9, 3, 8, 1, date(2024, 6, 9)),
        (10, 4, 9, 1, date(2024, 6, 10)),
        (11, 5, 10, 1, date(2024, 6, 11)),
        (12, 1, 1, 1, date(2024, 6, 12)),
        (13, 2, 2, 1, date(2024, 6, 13)),
        (14, 3, 3, 1, date(2024, 6, 14)),
        (15, 4, 4, 1, date(2024, 6, 15)),
        (16, 5, 5, 1, date(2024, 6, 16)),
        (17, 1, 6, 1, date(2024, 6, 17)),
        (18, 2, 7, 1, date(2024, 6, 18)),
        (19, 3, 8, 1, date(2024, 6, 19)),
        (20, 4, 9, 1, date(2024, 6, 20)),
    ],
)

# Small fixture for quick checks: the first three users and products and the
# first four orders of the full dataset.
SMOKE_DATASET = Dataset(
    users=FULL_DATASET.users[:3],
    products=FULL_DATASET.products[:3],
    orders=FULL_DATASET.orders[:4],
)


def create_schema(engine) -> None:
    """Creates the users, products and orders tables if they don't exist."""
    Base.metadata.create_all(bind=engine)
    logger.info("Schema ready: {}", ", ".join(Base.metadata.tables))


def drop_schema(engine) -> None:
    Base.metadata.drop_all(bind=engine)
    logger.info("Schema dropped")


def _insert(db: Session, dataset: Dataset) -> None:
    batches = [
        (User, [row.model_dump() for row in dataset.users]),
        (Product, [row.model_dump() for row in dataset.products]),
        (Order, [row.model_dump() for row in dataset.orders]),
    ]
    for model, rows in batches:
        # An empty parameter list would turn into a single INSERT of defaults.
        if not rows:
            continue
        db.execute(insert(model), rows)
        logger.debug("Inserted {} rows into {}", len(rows), model.__tablename__)


def _delete_all(db: Session) -> None:
    # Orders first so no foreign key is left dangling.
    for model in (Order, Product, User):
        db.execute(delete(model))


def seed(db: Session, dataset: Dataset = FULL_DATASET) -> None:
    """
    Inserts every row of ``dataset`` in a single transaction.

    - Users and products are written before orders.
    - A duplicate primary key or an unresolved foreign key rolls back the
      whole transaction and the IntegrityError is re-raised as is.
    """
    try:
        _insert(db, dataset)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Seeding failed, transaction rolled back: {}", e)
        raise

    logger.info(
        "Seeded {} users, {} products, {} orders",
        len(dataset.users),
        len(dataset.products),
        len(dataset.orders),
    )


def clear(db: Session) -> None:
    """Deletes all rows of the three tables in one transaction."""
    try:
        _delete_all(db)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Clearing failed, transaction rolled back: {}", e)
        raise

    logger.info("Cleared orders, products and users")


def reset(db: Session, dataset: Dataset = FULL_DATASET) -> None:
    """
    Replaces all rows with ``dataset``; safe to run repeatedly.

    Deletes and inserts share one transaction, so a failing dataset leaves
    the previous rows in place.
    """
    try:
        _delete_all(db)
        _insert(db, dataset)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Reset failed, transaction rolled back: {}", e)
        raise

    logger.info(
        "Reset to {} users, {} products, {} orders",
        len(dataset.users),
        len(dataset.products),
        len(dataset.orders),
    )
