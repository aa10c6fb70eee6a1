# --- Imports ---
from .database import SessionLocal, engine
from .logger import logger
from .queries import run_report
from .seed import FULL_DATASET, create_schema, reset


def main():
    """Builds the schema, reloads the fixtures and logs every report."""
    # Create database tables if they don't exist.
    create_schema(engine)

    db = SessionLocal()
    try:
        reset(db, FULL_DATASET)
        report = run_report(db)
    finally:
        db.close()

    logger.info("Tables: {}", ", ".join(report.tables))
    for section in ("users", "products", "orders", "products_above_price", "order_details"):
        logger.info("{}: {} rows", section, len(getattr(report, section)))

    for row in report.order_counts:
        logger.info("orders by {}: {}", row.username, row.total_orders)
    for row in report.total_spent:
        logger.info("spent by {}: {}", row.username, row.total_spent)
    for row in report.total_sold:
        logger.info("sold of {}: {}", row.product_name, row.total_sold)
    for row in report.order_counts_in_range:
        logger.info("orders in range by {}: {}", row.username, row.total_orders)

    return report


if __name__ == "__main__":
    main()
