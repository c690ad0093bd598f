import os
import tempfile

# Settings are read once at import time, so the environment is fixed first
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "testing"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="collabdocs-test-logs-")
os.environ["EMBEDDING_DIMENSION"] = "8"
os.environ["DEFAULT_AI_CREDITS"] = "5"
os.environ["MAX_DOCUMENTS_PER_USER"] = "3"
os.environ["RATE_LIMIT_PER_MINUTE"] = "100"
os.environ["WIPE_SECRET"] = "wipe-me"
os.environ["ENABLE_AUDIT_LOGGING"] = "true"
os.environ["GROQ_API_KEY"] = ""
os.environ["GOOGLE_API_KEY"] = ""
os.environ.pop("DEFAULT_BACKGROUND_PATH", None)
os.environ.pop("COOKIE_DOMAIN", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from collabdocs.core.exceptions import EmbeddingError, LLMError  # noqa: E402
from collabdocs.core.rate_limiter import get_rate_limiter  # noqa: E402
from collabdocs.database import Base, get_database, seed_defaults  # noqa: E402
from collabdocs.llm.client import set_llm_client  # noqa: E402
from collabdocs.rag.embeddings import set_embedder  # noqa: E402

DIMENSION = 8


# ============= Fakes =============


class FakeLLM:
    """Records every call and answers from a queue (or a default reply)."""

    def __init__(self, default_reply="Here is my suggestion."):
        self.default_reply = default_reply
        self.replies = []
        self.calls = []
        self.fail = False

    def generate(self, user_message, system_prompt=None, history=None, model=None, stop=None):
        self.calls.append({"user_message": user_message, "system_prompt": system_prompt})
        if self.fail:
            raise LLMError("All LLM providers failed. Last error: fake outage")
        if self.replies:
            return self.replies.pop(0)
        return self.default_reply


class FakeEmbedder:
    """Bag-of-words vectors: each word adds 1 to a bucket chosen by its letters."""

    def __init__(self):
        self.calls = []
        self.fail = False

    def embed(self, text, task_type="retrieval_document"):
        self.calls.append((text, task_type))
        if self.fail:
            raise EmbeddingError("fake embedding outage")
        if not text or not text.strip():
            raise EmbeddingError("Cannot embed empty text")
        vector = [0.0] * DIMENSION
        for word in text.lower().split():
            vector[sum(ord(c) for c in word) % DIMENSION] += 1.0
        return vector

    def embed_query(self, text):
        return self.embed(text, task_type="retrieval_query")


# ============= Fixtures =============


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def fake_embedder():
    return FakeEmbedder()


@pytest.fixture(autouse=True)
def database(fake_llm, fake_embedder):
    """Fresh schema and default rows for every test."""
    db = get_database()
    Base.metadata.drop_all(db.engine)
    Base.metadata.create_all(db.engine)
    seed_defaults()

    get_rate_limiter().reset()
    set_llm_client(fake_llm)
    set_embedder(fake_embedder)

    yield db

    set_llm_client(None)
    set_embedder(None)


@pytest.fixture
def app():
    from collabdocs.api.main import app as fastapi_app
    return fastapi_app


@pytest.fixture
def make_client(app):
    """Factory for independent clients, each with its own cookie jar."""
    def _make():
        return TestClient(app)
    return _make


@pytest.fixture
def client(make_client):
    return make_client()


def signup(client, name, email, password="secret-pw"):
    response = client.post("/api/users", json={"name": name, "email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["id"]


def login(client, email, password="secret-pw"):
    response = client.post("/api/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["result"]["user_id"]


@pytest.fixture
def new_user(make_client):
    """Create a user and return (logged-in client, user id)."""
    def _new_user(name="Ada", email=None):
        client = make_client()
        email = email or f"{name.lower()}@example.com"
        user_id = signup(client, name, email)
        login(client, email)
        return client, user_id
    return _new_user


@pytest.fixture
def alice(new_user):
    return new_user("Alice")


@pytest.fixture
def bob(new_user):
    return new_user("Bob")
