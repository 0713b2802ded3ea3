import os

# Keep app startup off the on-disk database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from app.database import get_session  # noqa: E402
from app.main import app  # noqa: E402
from app.services.bracket_engine import initialize_group_predictions  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: with StaticPool so ALL sessions share the same DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. Tables are dropped and recreated per test (see session_fixture)
# 4. App dependency overridden to use test_engine (see client_fixture)
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on empty simulation/vote tables"""
    # Import all models to ensure they're registered BEFORE create_all
    from app.models.simulation import Simulation  # noqa: F401
    from app.models.vote import Vote  # noqa: F401

    SQLModel.metadata.drop_all(test_engine)
    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session

    Override is set BEFORE TestClient() and stays in place for the entire
    duration, so the app never uses its own engine.
    """
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


# ============================================================================
# Bracket fixtures
# ============================================================================


@pytest.fixture(name="group_predictions")
def group_predictions_fixture():
    """Every group in drawn order: 1st = first listed team, 3rd = third listed."""
    return initialize_group_predictions()


@pytest.fixture(name="third_place_abcd_missing")
def third_place_abcd_missing_fixture(group_predictions):
    """Third-placed teams of groups E..L advance (option 1: A, B, C, D missing)."""
    return [gp.ordered_team_ids[2] for gp in group_predictions if gp.group_id in "EFGHIJKL"]

