from datetime import datetime, timedelta
from itertools import count

import pytest
from fakes import FakeLLMClient

from career_data_api.db.repository import create_career_store
from career_data_api.db.session import init_db, make_engine, make_session_factory


@pytest.fixture()
def engine(tmp_path):
    """Create a file-backed SQLite engine; context fetches run on worker threads."""
    engine = make_engine(f"sqlite:///{tmp_path / 'career.db'}")
    init_db(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def clock():
    """Deterministic clock advancing one second per call."""
    start = datetime(2024, 1, 1, 12, 0, 0)
    ticks = count()
    return lambda: start + timedelta(seconds=next(ticks))


@pytest.fixture()
def store(engine, clock):
    return create_career_store(make_session_factory(engine), clock)


@pytest.fixture()
def fake_llm():
    return FakeLLMClient()
