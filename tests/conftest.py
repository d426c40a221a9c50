from datetime import datetime, timezone

import pytest

from magic_code.application.strategy import MagicCodeStrategy
from magic_code.config import load_config
from magic_code.infrastructure.memory.token_storage import MemoryTokenStorage
from tests.fakes import SECRET, FakeCallback, FakeSender, FakeTokenStorage, FrozenClock


@pytest.fixture()
def clock():
    return FrozenClock(datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture()
def storage():
    return MemoryTokenStorage()


@pytest.fixture()
def recording_storage():
    return FakeTokenStorage()


@pytest.fixture()
def config(storage):
    return load_config(secret=SECRET, code_length=6, storage=storage)


@pytest.fixture()
def sender():
    return FakeSender()


@pytest.fixture()
def callback():
    return FakeCallback()


@pytest.fixture()
def strategy(config, sender, callback, clock):
    return MagicCodeStrategy(config, sender, callback, clock=clock)


@pytest.fixture()
def fixed_code(monkeypatch):
    """
    Make generated codes deterministic (123456).
    """
    from magic_code.domain import services as domain_services

    monkeypatch.setattr(domain_services, "generate_code", lambda length: 123456)
    yield 123456
