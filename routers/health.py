# services/comparison/routers/health.py
from typing import Optional

from fastapi import APIRouter, HTTPException
from sqlalchemy import inspect, text

from alembic.config import Config
from alembic.script import ScriptDirectory
from db import engine
from models import KeyValue

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/db")
def health_db():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            has_store = inspect(conn).has_table(KeyValue.__tablename__)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"db_error: {type(e).__name__}: {e}")
    return {"ok": True, "kv_store": has_store}


def _alembic_heads() -> list[str]:
    script = ScriptDirectory.from_config(Config("alembic.ini"))
    return list(script.get_heads())


def _db_revision() -> Optional[str]:
    with engine.connect() as conn:
        if not inspect(conn).has_table("alembic_version"):
            return None
        return conn.execute(text("SELECT version_num FROM alembic_version")).scalar_one_or_none()


@router.get("/migrations")
def health_migrations():
    try:
        heads = _alembic_heads()
    except Exception:
        heads = []

    try:
        db_ver = _db_revision()
    except Exception as e:
        return {"ok": False, "error": f"db_connect_failed: {e}", "code_heads": heads, "db_version": None}

    synced = db_ver in heads if heads else False
    return {"ok": synced, "synced": synced, "db_version": db_ver, "code_heads": heads}
