"""Pytest fixtures: file-backed SQLite database, fresh schema per test."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from app.auth import Principal, resolve_principal  # noqa: E402
from app.config import settings  # noqa: E402
from app.database import Base, configure_sqlite, get_db  # noqa: E402
from app.mail import mailer  # noqa: E402
from app.main import app  # noqa: E402
from app.models.event import Event, EventArtist, EventStatus  # noqa: E402
from app.models.profile import Artist, Venue  # noqa: E402
from app.models.user import User, UserRole  # noqa: E402
from app.services.side_effects import SideEffects  # noqa: E402
from app.utils.slugs import unique_slug  # noqa: E402

SQLITE_URL = "sqlite:///./test.db"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine and schema for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})
    configure_sqlite(engine)
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session bound to the test engine."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_engine):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def outbox(monkeypatch):
    """Replace outbound email with a recorder; yields the list of sent messages."""
    sent = []

    def _record(to, subject, html, text=None):
        sent.append({"to": to, "subject": subject, "html": html, "text": text})
        return mailer.EmailResult(ok=True, id=f"test-{len(sent)}", dev=True)

    monkeypatch.setattr(mailer, "send_email", _record)
    return sent


@pytest.fixture
def effects():
    """A side-effect queue for calling services directly."""
    return SideEffects()


# ---------------------------------------------------------------------------
# Helpers: tokens and API registration
# ---------------------------------------------------------------------------
def auth_headers(email: str) -> dict:
    """Bearer header carrying a token the service will accept for ``email``."""
    token = jwt.encode({"email": email}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return {"Authorization": f"Bearer {token}"}


def register(client: TestClient, email: str, role: str, name: str, **profile) -> dict:
    """Helper: POST /api/users for ``email``; returns the user JSON plus its auth headers."""
    resp = client.post("/api/users/", json={"name": name, "role": role, **profile}, headers=auth_headers(email))
    assert resp.status_code == 201, resp.text
    data = resp.json()
    data["headers"] = auth_headers(email)
    return data


def future(days: int = 30, hour: int = 20) -> datetime:
    base = datetime.now(timezone.utc) + timedelta(days=days)
    return base.replace(hour=hour, minute=0, second=0, microsecond=0)


# ---------------------------------------------------------------------------
# Helpers: direct database fixtures for service-level tests
# ---------------------------------------------------------------------------
def make_artist(db, name: str = "Ana Artist") -> Artist:
    user = User(email=f"{name.lower().replace(' ', '.')}@example.com", name=name, role=UserRole.ARTIST)
    db.add(user)
    db.flush()
    artist = Artist(user_id=user.id, name=name, slug=unique_slug(db, Artist, name))
    db.add(artist)
    db.commit()
    return artist


def make_venue(db, name: str = "Blue Room") -> Venue:
    user = User(email=f"{name.lower().replace(' ', '.')}@example.com", name=f"{name} Owner", role=UserRole.VENUE)
    db.add(user)
    db.flush()
    venue = Venue(user_id=user.id, name=name, slug=unique_slug(db, Venue, name), city="San José")
    db.add(venue)
    db.commit()
    return venue


def principal_of(db, profile) -> Principal:
    """Principal for the user owning an Artist or Venue profile."""
    user = db.query(User).filter(User.id == profile.user_id).first()
    return resolve_principal(db, user.email)


def make_event(db, creator_id: str, venue: Venue = None, status: EventStatus = EventStatus.DRAFT,
               title: str = "Friday Jazz", event_date: datetime = None, artists: list = ()) -> Event:
    """Insert an event directly (bypasses creation rules), with unconfirmed line-up entries."""
    event = Event(
        title=title,
        slug=unique_slug(db, Event, title),
        created_by=creator_id,
        venue_id=venue.id if venue else None,
        external_venue_name=None if venue else "Town Square",
        event_date=event_date or future(),
        total_hours=3,
        status=status,
    )
    db.add(event)
    db.flush()
    for artist in artists:
        db.add(EventArtist(event_id=event.id, artist_id=artist.id))
    db.commit()
    return event
