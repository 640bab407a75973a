import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.config import Settings
from app.core.database import create_db_engine, create_session_factory, init_db
from app.main import create_app
from app.services.events import EventBroadcaster
from app.services.sql_store import SqlStore
from app.services.store import MemoryStore
from tests.fakes import FakeClock, FakeLLM, FakeWebSocket


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def make_sql_store(clock=None, **kwargs) -> SqlStore:
    engine = create_db_engine("sqlite://")
    init_db(engine)
    return SqlStore(create_session_factory(engine), clock=clock, **kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(params=["memory", "sql"])
def store(request, clock):
    if request.param == "memory":
        store = MemoryStore(clock=clock)
    else:
        store = make_sql_store(clock=clock)
    yield store
    store.close()


@pytest.fixture
def memory_store(clock):
    return MemoryStore(clock=clock)


@pytest.fixture
def broadcaster():
    return EventBroadcaster()


@pytest_asyncio.fixture
async def observer(broadcaster):
    websocket = FakeWebSocket()
    await broadcaster.connect(websocket)
    return websocket


@pytest.fixture
def make_app():
    """Build an app around a fake model; returns the app."""
    
    def _make(llm=None, store=None, **settings_overrides):
        settings = make_settings(**settings_overrides)
        return create_app(
            settings=settings,
            store=store,
            llm=llm or FakeLLM(),
        )
    
    return _make


@pytest.fixture
def client_for(make_app):
    """Async HTTP client factory bound to a fresh app."""
    
    def _client(app):
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
    
    return _client
