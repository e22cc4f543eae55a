import pytest
from django.core.cache import cache

from frontdesk.exceptions import StoreError

from .fakes import FakeSensor, FakeStore


@pytest.fixture(autouse=True)
def _clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def media_root(settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path
    return tmp_path


@pytest.fixture
def fake_sensor():
    return FakeSensor()


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def store_down():
    return StoreError('Could not reach the patient record store')
