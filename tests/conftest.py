import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-showmate")

import smtplib
import threading
import pytest
from datetime import datetime, timedelta, UTC
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from jose import jwt

from showmate.database import get_db
from showmate.models.base import Base
from showmate.config import settings
# Import all model classes to ensure they're registered with SQLAlchemy
from showmate.models.user import User
from showmate.models.project import Project, Event, Post, Message
from showmate.models.project_membership import ProjectMembership
from showmate.models.notification import Notification
from showmate.services.email_service import EmailService, get_email_service
# Import FastAPI app AFTER model imports
from showmate.main import app

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

MANAGER_UID = "manager-uid"
TECHNICIAN_UID = "technician-uid"


class RecordingTransport:
    """Mail transport that keeps every message instead of sending it"""

    def __init__(self):
        self.sent: list[dict] = []

    def send_mail(self, to: str, subject: str, html: str, text: str) -> None:
        self.sent.append({"to": to, "subject": subject, "html": html, "text": text})


class FailingTransport:
    """Mail transport whose server is always down"""

    def __init__(self):
        self.attempts = 0

    def send_mail(self, to: str, subject: str, html: str, text: str) -> None:
        self.attempts += 1
        raise smtplib.SMTPServerDisconnected("Connection unexpectedly closed")


class SlowTransport:
    """Mail transport that holds the request until the test releases it"""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()
        self.finished = False

    def send_mail(self, to: str, subject: str, html: str, text: str) -> None:
        self.started.set()
        self.release.wait(timeout=5)
        self.finished = True


@pytest.fixture(scope="function")
def db_session():
    """Create fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def mail_transport():
    return RecordingTransport()


@pytest.fixture
def email_service(mail_transport):
    return EmailService(transport=mail_transport)


@pytest.fixture(scope="function")
def client(db_session, email_service):
    """FastAPI test client with test database and recorded emails"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: email_service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_test_token(user_id: str = MANAGER_UID, expired: bool = False) -> str:
    """
    Generate valid JWT token for testing.

    Args:
        user_id: User uid to embed in 'sub' claim
        expired: If True, create expired token

    Returns:
        Encoded JWT token
    """
    if expired:
        exp = datetime.now(UTC) - timedelta(minutes=5)
    else:
        exp = datetime.now(UTC) + timedelta(minutes=15)

    payload = {"sub": user_id, "exp": exp, "iat": datetime.now(UTC)}

    token = jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")
    return token


def auth_headers_for(user_id: str) -> dict:
    return {"Authorization": f"Bearer {create_test_token(user_id=user_id)}"}


@pytest.fixture
def manager_headers():
    """Authorization headers for the project manager (the inviter)"""
    return auth_headers_for(MANAGER_UID)


@pytest.fixture
def technician_headers():
    """Authorization headers for the invited technician"""
    return auth_headers_for(TECHNICIAN_UID)


@pytest.fixture
def manager(db_session):
    user = User(
        id=MANAGER_UID,
        email="marie.dupont@example.com",
        first_name="Marie",
        last_name="Dupont",
        phone="+33600000001",
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def technician(db_session):
    user = User(
        id=TECHNICIAN_UID,
        email="tom.martin@example.com",
        first_name="Tom",
        last_name="Martin",
        phone="+33600000002",
        photo_url="https://cdn.example.com/tom.png",
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def project(db_session, manager):
    project = Project(id="project-1", project_name="Festival d'été", owner_id=manager.id)
    db_session.add(project)
    db_session.commit()
    db_session.refresh(project)
    return project


@pytest.fixture
def events(db_session, project):
    """Two scheduled events of the project"""
    soundcheck = Event(id="event-soundcheck", project_id=project.id, title="Balances", members=[])
    concert = Event(id="event-concert", project_id=project.id, title="Concert", members=[])
    db_session.add_all([soundcheck, concert])
    db_session.commit()
    return [soundcheck, concert]


def invitation_payload(project_id: str = "project-1", **overrides) -> dict:
    """JSON body for POST /api/project/invite"""
    payload = {
        "projectId": project_id,
        "projectName": "Festival d'été",
        "technicianUid": TECHNICIAN_UID,
        "invitedByUid": MANAGER_UID,
        "role": {"id": "role-sound", "label": "Ingé son", "category": "Son", "priority": 1},
    }
    payload.update(overrides)
    return payload


def get_membership(db_session, project_id: str = "project-1", user_id: str = TECHNICIAN_UID):
    db_session.expire_all()
    return (
        db_session.query(ProjectMembership)
        .filter_by(project_id=project_id, user_id=user_id)
        .first()
    )


def get_notifications(db_session, user_id: str, type=None) -> list[Notification]:
    db_session.expire_all()
    query = db_session.query(Notification).filter_by(user_id=user_id)
    if type is not None:
        query = query.filter_by(type=type)
    return query.order_by(Notification.created_at).all()
