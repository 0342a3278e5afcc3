import os
from unittest.mock import AsyncMock, patch

# Environment must be in place before the application modules read it.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["JWT_EXPIRE_MINUTES"] = "60"
os.environ["OTP_EXPIRE_MINUTES"] = "10"
os.environ["MAIL_SUPPRESS_SEND"] = "1"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

from school_directory.core.database import Database
from school_directory.main import create_app
from school_directory.models.user import User
from school_directory.core.security import hash_password


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.create_schema()
    yield db
    db.dispose()


@pytest.fixture
def db_session(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def mock_mail():
    """Replace the mail transport; the plaintext OTP is the second positional arg."""
    with patch("school_directory.services.auth.send_otp_email", new_callable=AsyncMock) as mock:
        yield mock


@pytest.fixture
def client(database, mock_mail):
    app = create_app(database)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(db_session):
    def _make(email="owner@x.com", password="pw123456", verified=True):
        user = User(email=email, password_hash=hash_password(password), is_verified=verified)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make


@pytest.fixture
def school_fields():
    return {
        "name": "X",
        "address": "1 Rd",
        "city": "C",
        "state": "S",
        "contact": "5551234",
        "email_id": "x@x.com",
    }


@pytest.fixture
def sent_otp(mock_mail):
    """Returns the plaintext code passed to the most recent mail send."""
    return lambda: mock_mail.call_args.args[1]
