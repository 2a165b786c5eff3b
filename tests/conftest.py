import os

# Must be set before the app (and its engine) is imported
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

from db import Base, engine, SessionLocal
from main import app
from api.crud.user import create_user
from core.auth import create_access_token
from core.roles import UserRole
from services.catalog_service import seed_catalog

USER_ID = 1
OTHER_USER_ID = 2


def auth_headers(user_id: int) -> dict:
    token = create_access_token({"sub": user_id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def db_session():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    seed_catalog(db)
    yield db
    db.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db_session):
    return TestClient(app)


@pytest.fixture()
def headers():
    return auth_headers(USER_ID)


@pytest.fixture()
def other_headers():
    return auth_headers(OTHER_USER_ID)


@pytest.fixture()
def admin_headers(db_session):
    admin = create_user(db_session, "admin", role=UserRole.ADMIN)
    return auth_headers(admin.id)


@pytest.fixture()
def user_headers(db_session):
    """A signed-in user that exists but is not an admin"""
    user = create_user(db_session, "player", role=UserRole.USER)
    return auth_headers(user.id)
