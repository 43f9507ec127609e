from datetime import datetime, timezone

import pytest

from timesheet.components import RequestContext
from timesheet.datastore import in_memory_datastores

# A moment far away from the report dates used in tests, so no day is "today"
LATER = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def stores():
    return in_memory_datastores()


@pytest.fixture
def ctx(stores):
    return RequestContext(user='U1', stores=stores, yyyymmdd='20231101')


@pytest.fixture
def later():
    return LATER
