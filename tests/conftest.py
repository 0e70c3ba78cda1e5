import copy
import os
import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

os.environ.setdefault("LOG_FILE", os.devnull)

from fastapi.testclient import TestClient

from app import app
from dependencies import TEMPLATE_DIR, Services, get_services
from email_factory import EmailFactory
from executor.recipe_mail_executor import RecipeMailExecutor
from models.recipe import Recipe
from senders.base_sender import BaseSender
from senders.mailer import Mailer
from stores.preference_store import PreferenceStore
from stores.recipe_store import RecipeStore
from stores.recipient_store import RecipientStore


# --- In-memory Firestore ---

class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    def to_dict(self):
        return copy.deepcopy(self._data)


class FakeDocumentRef:
    def __init__(self, db, collection, doc_id):
        self.db = db
        self.collection = collection
        self.id = doc_id

    def set(self, data):
        self.db.data.setdefault(self.collection, {})[self.id] = copy.deepcopy(data)


class FakeCollection:
    def __init__(self, db, name):
        self.db = db
        self.name = name

    def document(self, document_id=None):
        return FakeDocumentRef(self.db, self.name, document_id or uuid.uuid4().hex)

    def stream(self):
        docs = self.db.data.get(self.name, {})
        return iter([FakeSnapshot(doc_id, data) for doc_id, data in docs.items()])


class FakeBatch:
    def __init__(self, db):
        self.db = db
        self.writes = []

    def set(self, ref, data):
        self.writes.append((ref, copy.deepcopy(data)))

    def commit(self):
        for ref, data in self.writes:
            ref.set(data)
        self.db.commits += 1
        self.writes = []


class FakeFirestore:
    def __init__(self):
        self.data = {}
        self.commits = 0

    def collection(self, name):
        return FakeCollection(self, name)

    def batch(self):
        return FakeBatch(self)


class RecordingSender(BaseSender):
    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    async def send(self, from_email, to_email, subject, html_body, text_body=None, from_name=None) -> bool:
        if to_email in self.fail_for:
            return False
        self.sent.append({"to": to_email, "subject": subject, "html": html_body, "text": text_body})
        return True


# --- Fixtures ---

@pytest.fixture
def firestore_db():
    return FakeFirestore()


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def email_factory():
    return EmailFactory(TEMPLATE_DIR)


@pytest.fixture
def sample_recipe():
    return Recipe(
        title="Tomato & Basil Pasta",
        description="A quick weeknight pasta.",
        ingredients=["200g spaghetti", "3 tomatoes", "basil"],
        instructions=["Boil the pasta.", "Chop the tomatoes.", "Toss everything with basil."],
    )


@pytest.fixture
def services(firestore_db, sender, email_factory):
    recipe_store = RecipeStore(firestore_db)
    recipient_store = RecipientStore(firestore_db)
    preference_store = PreferenceStore(firestore_db)
    mailer = Mailer(sender, from_email="recipes@example.com", from_name="Recipe Mailer")

    generator = MagicMock()
    generator.generate = AsyncMock(return_value=[])

    return Services(
        recipe_store=recipe_store,
        recipient_store=recipient_store,
        preference_store=preference_store,
        mailer=mailer,
        email_factory=email_factory,
        generator=generator,
        executor=RecipeMailExecutor(recipe_store, recipient_store, preference_store, mailer, email_factory),
    )


@pytest.fixture
def client(services):
    app.dependency_overrides[get_services] = lambda: services
    yield TestClient(app)
    app.dependency_overrides.clear()
