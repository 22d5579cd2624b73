import pytest

from wikisearch.db import Base, make_engine, make_session_factory
from wikisearch.ingest.models import FetchedPage


@pytest.fixture
async def db_engine(tmp_path):
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'wikisearch.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return make_session_factory(db_engine)


@pytest.fixture
def make_page():
    def _make(
        url="https://en.wikipedia.org/wiki/Golang",
        title="Go (programming language)",
        content="Go is a statically typed, compiled language.\n",
        language="en",
    ):
        return FetchedPage(url=url, title=title, content=content, language=language)
    return _make
