"""Test fixtures — SQLite in-memory DB, seeded catalog + FastAPI TestClient."""
import os
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Generator, Optional

import pytest

# Force SQLite in-memory for tests BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.pop("API_WRITE_KEY", None)

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from skillbarter.auth import StaticAuth
from skillbarter.database import Base, get_db
from skillbarter.main import app
from skillbarter.models import Barter, Category, Skill, Subcategory, User

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db() -> Generator[Session, None, None]:
    """Override DB dependency with test session."""
    db = TestSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db

ALICE = "11111111-1111-1111-1111-111111111111"
BOB = "22222222-2222-2222-2222-222222222222"
CAROL = "33333333-3333-3333-3333-333333333333"
# Signed in upstream but never created a profile row
GHOST = "99999999-9999-9999-9999-999999999999"


@pytest.fixture(autouse=True)
def reset_db() -> Generator[None, None, None]:
    """Fresh tables for every test."""
    _set_foreign_keys(False)
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


def _set_foreign_keys(enabled: bool) -> None:
    with engine.connect() as conn:
        conn.exec_driver_sql(f"PRAGMA foreign_keys={'ON' if enabled else 'OFF'}")


@pytest.fixture()
def foreign_keys() -> Generator[None, None, None]:
    """Enforce foreign keys on the shared SQLite connection, as PostgreSQL does."""
    _set_foreign_keys(True)
    yield
    _set_foreign_keys(False)


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    """Provide a TestClient instance."""
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db() -> Generator[Session, None, None]:
    """Provide a test DB session."""
    session = TestSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def seed(db: Session) -> SimpleNamespace:
    """Categories, skills and three users.

    Design: Illustrator, Logo Design · Writing: Blogging
    Music: Guitar · Languages: Spanish
    """
    cats = {name: Category(name=name) for name in ("Design", "Writing", "Music", "Languages")}
    db.add_all(cats.values())
    db.flush()
    subs = {
        "Graphic Design": Subcategory(name="Graphic Design", category_id=cats["Design"].id),
        "Content": Subcategory(name="Content", category_id=cats["Writing"].id),
        "Instruments": Subcategory(name="Instruments", category_id=cats["Music"].id),
        "Spoken": Subcategory(name="Spoken", category_id=cats["Languages"].id),
    }
    db.add_all(subs.values())
    db.flush()
    skills = {
        "Illustrator": Skill(name="Illustrator", category_id=cats["Design"].id, subcategory_id=subs["Graphic Design"].id),
        "Logo Design": Skill(name="Logo Design", category_id=cats["Design"].id, subcategory_id=subs["Graphic Design"].id),
        "Blogging": Skill(name="Blogging", category_id=cats["Writing"].id, subcategory_id=subs["Content"].id),
        "Guitar": Skill(name="Guitar", category_id=cats["Music"].id, subcategory_id=subs["Instruments"].id),
        "Spanish": Skill(name="Spanish", category_id=cats["Languages"].id, subcategory_id=subs["Spoken"].id),
    }
    db.add_all(skills.values())
    db.add_all([
        User(id=ALICE, username="alice", email="Alice@Example.com "),
        User(id=BOB, username="bob", email="bob@example.com"),
        User(id=CAROL, username="carol", email=None),
    ])
    db.commit()
    return SimpleNamespace(
        categories={k: v.id for k, v in cats.items()},
        subcategories={k: v.id for k, v in subs.items()},
        skills={k: v.id for k, v in skills.items()},
        alice=ALICE,
        bob=BOB,
        carol=CAROL,
    )


def auth_for(user_id: Optional[str]) -> StaticAuth:
    return StaticAuth(user_id)


def headers_for(user_id: str) -> dict[str, str]:
    return {"X-User-Id": user_id}


def make_barter(
    db: Session,
    owner_id: str,
    teach_skill_id: int,
    learn_skill_id: int,
    created_at: Optional[datetime] = None,
    **overrides: Any,
) -> Barter:
    """Factory helper: insert a barter row directly.

    Args:
        db: Database session.
        owner_id: Owning user id.
        teach_skill_id: Skill offered.
        learn_skill_id: Skill wanted.
        created_at: Creation time, defaults to now.
        **overrides: Any other column values.

    Returns:
        The stored barter.
    """
    fields = {
        "title": "Trade lessons",
        "description": "Weekly sessions over video call",
        "mode": "online",
        "skill_rating": 3,
    }
    fields.update(overrides)
    barter = Barter(
        owner_id=owner_id,
        teach_skill_id=teach_skill_id,
        learn_skill_id=learn_skill_id,
        created_at=created_at or datetime.now(timezone.utc),
        **fields,
    )
    db.add(barter)
    db.commit()
    db.refresh(barter)
    return barter
