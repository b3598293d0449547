import pytest
from fastapi.testclient import TestClient

from remitos.core.deps import get_documents, get_store
from remitos.services.document_service import DocumentService
from remitos.services.storage import MemoryRepository
from remitos.services.store import Store


class FakeRenderer:
    def __init__(self):
        self.rendered = []

    def render(self, note):
        self.rendered.append(note.number)
        return b"%PDF-1.4 fake"


class BrokenRenderer:
    def render(self, note):
        raise OSError("disk full")


class MemoryFiles:
    def __init__(self):
        self.files = {}

    def put(self, name, data):
        self.files[name] = data
        return f"/pdf/{name}"


class FlakyRepository(MemoryRepository):
    """Memory repository whose next save can be made to fail."""

    def __init__(self):
        super().__init__()
        self.fail_next = False

    def save(self, snapshot):
        if self.fail_next:
            self.fail_next = False
            raise OSError("database is locked")
        super().save(snapshot)


@pytest.fixture
def repo():
    return FlakyRepository()


@pytest.fixture
def store(repo):
    return Store(repo)


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def documents(renderer):
    return DocumentService(renderer, MemoryFiles())


@pytest.fixture
def client(store, documents):
    from remitos.main import app

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_documents] = lambda: documents
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
