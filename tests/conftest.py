"""
Shared pytest fixtures for the LexiGem test suite.

The environment is configured before any lexigem module is imported so the
cached settings point at an in-memory database and a throwaway upload dir.
"""

import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["GEMINI_API_KEY"] = "test-key"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="lexigem-uploads-")
os.environ["PUBLIC_BASE_URL"] = "http://testserver"

import json
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from lexigem.database import Base, SessionLocal, engine, init_db
from lexigem.main import app
from lexigem.models.user import User
from lexigem.routes.auth import get_current_active_user
from lexigem.routes.documents import get_file_handler
from lexigem.schemas import DocumentUpload
from lexigem.services.analysis_service import AnalysisService, get_analysis_service
from lexigem.services.chat_service import LegalChatService, get_chat_service
from lexigem.services.file_handler import FileHandler
from lexigem.services.gemini_client import GeminiClient


SAMPLE_ANALYSIS = {
    "summary": "A one-year residential lease between the landlord and the tenant.",
    "pros": ["Rent is fixed for the full term."],
    "cons": ["Tenant pays for all repairs.", "Late fee of 10% per day."],
    "potentialLoopholes": ["'Reasonable wear and tear' is not defined."],
    "potentialChallenges": ["Disputes over the security deposit return."],
}


class FakeModels:
    """Stands in for ``genai.Client().models``; records every call."""

    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.calls = []

    def generate_content(self, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.responses.pop(0))


class FakeGenAIClient:
    def __init__(self, responses=None, error=None):
        self.models = FakeModels(responses, error)


def make_model_client(responses=None, error=None) -> GeminiClient:
    return GeminiClient(
        api_key="test-key",
        model="test-model",
        chat_model="test-chat-model",
        client=FakeGenAIClient(responses, error),
    )


@pytest.fixture
def sample_json():
    return json.dumps(SAMPLE_ANALYSIS)


@pytest.fixture
def pdf_upload():
    return DocumentUpload(file_name="lease.pdf", content=b"%PDF-1.7 lease", mime_type="application/pdf")


@pytest.fixture
def db():
    init_db()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def user(db):
    account = User(email="tenant@example.com", hashed_password="not-used", is_active=True)
    db.add(account)
    db.commit()
    db.refresh(account)
    return account


@pytest.fixture
def other_user(db):
    account = User(email="other@example.com", hashed_password="not-used", is_active=True)
    db.add(account)
    db.commit()
    db.refresh(account)
    return account


@pytest.fixture
def file_handler(tmp_path):
    return FileHandler(upload_dir=str(tmp_path / "uploads"), public_base_url="http://testserver")


@pytest.fixture
def model_client(sample_json):
    return make_model_client(responses=[sample_json])


@pytest.fixture
def client(db, user, file_handler, model_client):
    """API client authenticated as ``user`` with the model faked out."""
    app.dependency_overrides[get_current_active_user] = lambda: user
    app.dependency_overrides[get_file_handler] = lambda: file_handler
    app.dependency_overrides[get_analysis_service] = lambda: AnalysisService(model_client)
    app.dependency_overrides[get_chat_service] = lambda: LegalChatService(model_client)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
