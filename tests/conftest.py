import os
import tempfile

import pytest

# Point the app at a throwaway SQLite file before db.py is imported anywhere
_DB_DIR = tempfile.mkdtemp(prefix="math-explorer-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"

from db import Base, engine  # noqa: E402
from models import KeyValue  # noqa: E402

Base.metadata.create_all(engine)


@pytest.fixture(autouse=True)
def _empty_kv_store():
    with engine.begin() as conn:
        conn.execute(KeyValue.__table__.delete())
    yield
