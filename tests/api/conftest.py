import pytest
from fastapi.testclient import TestClient

from magic_code.application.strategy import MagicCodeStrategy
from magic_code.infrastructure.memory.token_storage import MemoryTokenStorage
from magic_code.main import create_app, principal_from_user
from magic_code.presentation.dependencies import get_strategy
from magic_code.settings import Settings
from tests.fakes import FakeSender


@pytest.fixture()
def app_and_deps():
    app = create_app(Settings(storage_backend="memory"))
    storage = MemoryTokenStorage()
    sender = FakeSender()
    strategy = MagicCodeStrategy(
        {"secret": "supersecretkey123456", "code_length": 6, "storage": storage},
        sender,
        principal_from_user,
    )

    app.dependency_overrides[get_strategy] = lambda: strategy

    try:
        yield app, storage, sender
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def client(app_and_deps):
    app, _, _ = app_and_deps
    return TestClient(app, raise_server_exceptions=False)
