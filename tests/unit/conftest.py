from unittest.mock import AsyncMock, MagicMock

import pytest

from src.adapter.repositories.in_memory import InMemoryStore
from src.adapter.services.in_memory_unit_of_work import InMemoryUnitOfWork
from tests.fixtures.employees import FakeClock, RecordingDispatcher, make_employee


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def uow(store):
    return InMemoryUnitOfWork(store)


@pytest.fixture
def employee(store):
    employee = make_employee()
    store.employees[employee.id] = employee
    return employee


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()
