"""Shared pytest fixtures and factories for fieldkit tests."""

from datetime import datetime, timedelta
from datetime import timezone as dt_timezone

import pytest

from django.conf import settings

# Plain static storage for tests (the manifest needs collectstatic)
settings.STORAGES["staticfiles"] = {
    "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
}

from equipment.factories import EquipmentItemFactory, UserFactory  # noqa: E402
from equipment.repository import (  # noqa: E402
    DjangoAssetRepository,
    InMemoryAssetRepository,
)
from equipment.services.lifecycle import LifecycleService  # noqa: E402


class StepClock:
    """Deterministic clock: every reading is one minute after the last."""

    def __init__(self, start=None, step=timedelta(minutes=1)):
        self.current = start or datetime(
            2026, 1, 5, 9, 0, tzinfo=dt_timezone.utc
        )
        self.step = step

    def __call__(self):
        now = self.current
        self.current += self.step
        return now


# --- User fixtures ---


@pytest.fixture
def password():
    return "testpass123!"


@pytest.fixture
def user(db, password):
    return UserFactory(
        username="storekeeper",
        email="storekeeper@example.com",
        password=password,
    )


@pytest.fixture
def admin_user(db, password):
    return UserFactory(
        username="admin",
        email="admin@example.com",
        password=password,
        is_staff=True,
        is_superuser=True,
    )


@pytest.fixture
def client_logged_in(client, user, password):
    client.login(username=user.username, password=password)
    return client


@pytest.fixture
def admin_client(client, admin_user, password):
    client.login(username=admin_user.username, password=password)
    return client


# --- Service fixtures ---


@pytest.fixture
def owner_id():
    return "E1"


@pytest.fixture
def clock():
    return StepClock()


@pytest.fixture
def memory_repo():
    return InMemoryAssetRepository()


@pytest.fixture
def memory_service(memory_repo, clock):
    """Lifecycle service over the in-memory store (no database)."""
    return LifecycleService(memory_repo, clock=clock)


@pytest.fixture
def django_repo(db):
    return DjangoAssetRepository()


@pytest.fixture
def service(django_repo, clock):
    """Lifecycle service over the Django ORM store."""
    return LifecycleService(django_repo, clock=clock)


@pytest.fixture(params=["memory", "django"])
def any_service(request, clock):
    """The lifecycle service over each store implementation."""
    if request.param == "django":
        request.getfixturevalue("db")
        repository = DjangoAssetRepository()
    else:
        repository = InMemoryAssetRepository()
    return LifecycleService(repository, clock=clock)


# --- Model fixtures ---


@pytest.fixture
def item(db, owner_id):
    return EquipmentItemFactory(
        owner_id=owner_id,
        name="Laptop",
        serial="LPT-01",
        type="computer",
    )
