import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")
os.environ.setdefault("BACKUP_DIR", str(Path(__file__).parent / "data" / "backups"))
os.environ.setdefault("BACKUP_SCHEDULER_ENABLED", "false")
os.environ.setdefault("SEED_USERS_ON_STARTUP", "false")
os.environ.setdefault("TASK_QUEUE_BACKEND", "inline")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from demandas.audit import AuditRecorder, get_audit_recorder
from demandas.db import SessionLocal, engine, get_db
from demandas.main import app
from demandas.models import Base
from demandas.services.backup import BackupExporter, get_backup_exporter
from demandas.services.usuarios_service import seed_usuarios


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture()
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def backup_dir(tmp_path):
    return tmp_path / "backups"


@pytest.fixture()
def exporter(backup_dir):
    return BackupExporter(SessionLocal, backup_dir, retention=10)


@pytest.fixture()
def client(exporter):
    def override_get_db():
        db = SessionLocal()
        try:
            yield db
        finally:
            db.close()

    recorder = AuditRecorder(SessionLocal)
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_backup_exporter] = lambda: exporter
    app.dependency_overrides[get_audit_recorder] = lambda: recorder
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def usuarios(db_session):
    seed_usuarios(db_session)
