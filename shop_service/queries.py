"""Read-only reports over users, products and orders.

Every function takes an open session, runs one SELECT and returns pydantic
rows. Ordering is always explicit so results are stable across engines.
"""
from datetime import date
from decimal import Decimal
from typing import List

from sqlalchemy import func, inspect
from sqlalchemy.orm import Session

from .logger import logger
from .models import Order, Product, User
from .schemas import (
    OrderDetail,
    OrderOut,
    ProductOut,
    ProductSales,
    Report,
    UserOrderCount,
    UserOut,
    UserSpend,
)

DEFAULT_PRICE_THRESHOLD = Decimal("30")
DEFAULT_RANGE_START = date(2024, 6, 1)
DEFAULT_RANGE_END = date(2024, 6, 30)


def list_tables(db: Session) -> List[str]:
    """Names of the tables present in the connected database."""
    return sorted(inspect(db.connection()).get_table_names())


def list_users(db: Session) -> List[UserOut]:
    users = db.query(User).order_by(User.user_id).all()
    return [UserOut.model_validate(u) for u in users]


def list_products(db: Session) -> List[ProductOut]:
    products = db.query(Product).order_by(Product.product_id).all()
    return [ProductOut.model_validate(p) for p in products]


def list_orders(db: Session) -> List[OrderOut]:
    orders = db.query(Order).order_by(Order.order_id).all()
    return [OrderOut.model_validate(o) for o in orders]


def products_above_price(db: Session, threshold: Decimal = DEFAULT_PRICE_THRESHOLD) -> List[ProductOut]:
    """Products strictly more expensive than ``threshold``."""
    products = (
        db.query(Product)
        .filter(Product.price > threshold)
        .order_by(Product.product_id)
        .all()
    )
    return [ProductOut.model_validate(p) for p in products]


def order_details(db: Session) -> List[OrderDetail]:
    rows = (
        db.query(
            Order.order_id,
            User.username,
            Product.product_name,
            Order.quantity,
            Order.order_date,
        )
        .join(User, Order.user_id == User.user_id)
        .join(Product, Order.product_id == Product.product_id)
        .order_by(Order.order_id)
        .all()
    )
    return [OrderDetail.model_validate(row._asdict()) for row in rows]


def order_counts_per_user(db: Session) -> List[UserOrderCount]:
    """Number of orders per username; users who never ordered count as 0."""
    total_orders = func.count(Order.order_id).label("total_orders")
    rows = (
        db.query(User.username, total_orders)
        .outerjoin(Order, User.user_id == Order.user_id)
        .group_by(User.username)
        .order_by(User.username)
        .all()
    )
    return [UserOrderCount.model_validate(row._asdict()) for row in rows]


def total_spent_per_user(db: Session) -> List[UserSpend]:
    """
    Sum of price * quantity over each user's orders.

    Inner joins: a user with no orders has no row here.
    """
    total_spent = func.sum(Product.price * Order.quantity).label("total_spent")
    rows = (
        db.query(User.username, total_spent)
        .join(Order, User.user_id == Order.user_id)
        .join(Product, Order.product_id == Product.product_id)
        .group_by(User.username)
        .order_by(User.username)
        .all()
    )
    return [UserSpend.model_validate(row._asdict()) for row in rows]


def total_sold_per_product(db: Session) -> List[ProductSales]:
    """Units sold per product name, best sellers first, ties by name."""
    total_sold = func.sum(Order.quantity).label("total_sold")
    rows = (
        db.query(Product.product_name, total_sold)
        .join(Order, Product.product_id == Order.product_id)
        .group_by(Product.product_name)
        .order_by(total_sold.desc(), Product.product_name)
        .all()
    )
    return [ProductSales.model_validate(row._asdict()) for row in rows]


def order_counts_in_range(
    db: Session,
    start: date = DEFAULT_RANGE_START,
    end: date = DEFAULT_RANGE_END,
) -> List[UserOrderCount]:
    """
    Orders per user placed between ``start`` and ``end``, both inclusive.

    The date filter applies after the outer join, so users without an order
    in the range are left out rather than reported with 0.
    """
    if start > end:
        raise ValueError(f"start date {start} is after end date {end}")

    total_orders = func.count(Order.order_id).label("total_orders")
    rows = (
        db.query(User.username, total_orders)
        .outerjoin(Order, User.user_id == Order.user_id)
        .filter(Order.order_date.between(start, end))
        .group_by(User.username)
        .order_by(total_orders.desc(), User.username)
        .all()
    )
    return [UserOrderCount.model_validate(row._asdict()) for row in rows]


def run_report(
    db: Session,
    threshold: Decimal = DEFAULT_PRICE_THRESHOLD,
    start: date = DEFAULT_RANGE_START,
    end: date = DEFAULT_RANGE_END,
) -> Report:
    """Runs every report inside one transaction and bundles the results."""
    if start > end:
        raise ValueError(f"start date {start} is after end date {end}")

    try:
        report = Report(
            tables=list_tables(db),
            users=list_users(db),
            products=list_products(db),
            orders=list_orders(db),
            products_above_price=products_above_price(db, threshold),
            order_details=order_details(db),
            order_counts=order_counts_per_user(db),
            total_spent=total_spent_per_user(db),
            total_sold=total_sold_per_product(db),
            order_counts_in_range=order_counts_in_range(db, start, end),
        )
    finally:
        # Nothing was written; end the read transaction either way.
        db.rollback()

    logger.info(
        "Report built: {} users, {} products, {} orders",
        len(report.users),
        len(report.products),
        len(report.orders),
    )
    return report
