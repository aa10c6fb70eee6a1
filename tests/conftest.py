import pytest
from sqlalchemy.orm import sessionmaker

from shop_service.database import make_engine
from shop_service.seed import FULL_DATASET, create_schema, seed


@pytest.fixture
def engine(tmp_path):
    db_engine = make_engine(f"sqlite:///{tmp_path / 'shop.db'}")
    create_schema(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def empty_db(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def db(empty_db):
    seed(empty_db, FULL_DATASET)
    return empty_db
