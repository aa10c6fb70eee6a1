from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
import os

# Get DB connection string from environment variables.
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./shop.db")


def make_engine(url: str):
    """Creates an engine; SQLite connections get foreign key enforcement switched on."""
    new_engine = create_engine(url)

    if new_engine.dialect.name == "sqlite":
        @event.listens_for(new_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            # SQLite ignores FOREIGN KEY clauses unless asked per connection.
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


# Create the SQLAlchemy engine.
engine = make_engine(DATABASE_URL)

# Create a configured "Session" class for database interactions.
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for declarative ORM models.
Base = declarative_base()
