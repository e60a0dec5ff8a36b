import pytest

from lntop.models import ModelStore
from tests.fakes import FakeSource


@pytest.fixture
def source():
    return FakeSource()


@pytest.fixture
def models(source):
    store = ModelStore(source)
    store.bootstrap()
    source.calls.clear()
    return store
