import os
from datetime import datetime, timedelta, timezone

import pytest

os.environ.setdefault("LOG_LEVEL", "DEBUG")

from apikey_manager.core import KeyGenerator, KeyLister, KeyRevoker, KeyStore, KeyValidator


class FakeClock:

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 1.0) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def store():
    return KeyStore()


@pytest.fixture
def generator(store, clock):
    return KeyGenerator(store, clock=clock)


@pytest.fixture
def validator(store, clock):
    return KeyValidator(store, clock=clock)


@pytest.fixture
def lister(store):
    return KeyLister(store)


@pytest.fixture
def revoker(store, clock):
    return KeyRevoker(store, clock=clock)


@pytest.fixture
def sample_ips():
    return ["1.2.3.4", "5.6.7.8", "10.0.0.1"]
