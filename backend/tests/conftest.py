"""Add backend to path so 'from models import' resolves when run from project root."""
import os
import sys

_backend_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _backend_dir not in sys.path:
    sys.path.insert(0, _backend_dir)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from db import models as db_models  # noqa: E402,F401
from db.session import Base, get_db  # noqa: E402


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    from main import app

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)


def lease_extraction_payload(**sections) -> dict:
    """Stored extraction JSON for a quarterly lease starting 2024-04-05."""
    def field(value):
        return {"value": value, "confidence": "high"}

    data = {
        "calendar": {"effectiveDate": field("2024-04-05"), "endDate": field("2027-04-04")},
        "rent": {
            "quarterlyRentExclTaxExclCharges": field(912.5),
            "paymentFrequency": field("quarterly"),
        },
        "indexation": {"indexationType": field("ILAT")},
    }
    data.update(sections)
    return data


@pytest.fixture
def seed_index(db_session):
    from models import InseeRentalIndexPoint
    from services.index_series import upsert_index_series

    def _seed(index_type="ILAT", rows=((2024, 2, 100.0), (2025, 2, 110.0))):
        points = [InseeRentalIndexPoint(year=y, quarter=q, value=v) for y, q, v in rows]
        upsert_index_series(db_session, index_type, points)

    return _seed


@pytest.fixture
def seed_extraction(db_session):
    def _seed(extraction_id="ext-1", payload=None):
        row = db_models.Extraction(
            id=extraction_id,
            file_name="bail.pdf",
            extracted_data=payload if payload is not None else lease_extraction_payload(),
        )
        db_session.add(row)
        db_session.commit()
        return row

    return _seed
