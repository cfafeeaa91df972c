import json
import time
from datetime import date, timedelta

from fastapi import BackgroundTasks

from demandas.db import engine
from demandas.models import Base
from demandas.services import queue
from demandas.services.backup import BackupExporter, safe_tipo
from demandas.services.scheduler import BackupScheduler
from demandas.settings import settings
from demandas.workers import backup_worker


def demanda_payload(**overrides):
    payload = {
        "nomeDemanda": "Revisar extintores",
        "categoria": "Seguranca",
        "prioridade": "Relevante",
        "complexidade": "Difícil",
        "descricao": "Revisar a validade dos extintores do predio",
        "local": "Predio administrativo",
        "dataLimite": (date.today() + timedelta(days=3)).isoformat(),
        "funcionarioId": 6,
    }
    payload.update(overrides)
    return payload


def create(client, **overrides):
    response = client.post("/api/demandas", json=demanda_payload(**overrides))
    assert response.status_code == 201, response.text
    return response.json()["demanda"]


def write_backup(directory, name):
    path = directory / name
    path.write_text("{}", encoding="utf-8")
    return path


def test_criar_backup_writes_file(client, exporter, backup_dir):
    created = create(client, diasSemana=[1, 2], isRotina=True)

    filename = exporter.criar_backup("manual")
    assert filename.startswith("backup_manual_")
    assert filename.endswith(".json")
    assert ":" not in filename

    payload = json.loads((backup_dir / filename).read_text(encoding="utf-8"))
    assert payload["versao"] == "1.0.0"
    assert payload["tipo"] == "manual"
    assert payload["totalDemandas"] == 1
    assert payload["demandas"][0]["id"] == created["id"]
    assert payload["demandas"][0]["diasSemana"] == [1, 2]
    assert payload["demandas"][0]["isRotina"] is True


def test_safe_tipo():
    assert safe_tipo("../../etc") == "______etc"
    assert safe_tipo(None) == "auto"
    assert safe_tipo("  ") == "auto"
    assert safe_tipo("status_change") == "status_change"


def test_backup_with_unsafe_tipo_stays_in_directory(exporter, backup_dir):
    filename = exporter.criar_backup("../fora")
    assert (backup_dir / filename).exists()
    assert "/" not in filename


def test_criar_backup_seguro_swallows_errors(backup_dir):
    def broken_session():
        raise RuntimeError("banco indisponivel")

    exporter = BackupExporter(broken_session, backup_dir)
    assert exporter.criar_backup_seguro("manual") is None
    assert not list(backup_dir.iterdir())


def test_retention_keeps_newest_auto_backups(exporter, backup_dir):
    auto = [
        write_backup(backup_dir, f"backup_auto_2024-01-{day:02d}T00-00-00-000Z.json")
        for day in range(1, 16)
    ]
    manual = write_backup(backup_dir, "backup_manual_2023-01-01T00-00-00-000Z.json")
    delete = write_backup(backup_dir, "backup_delete_2023-01-01T00-00-00-000Z.json")

    removed = exporter.limpar_backups_antigos()

    assert removed == [path.name for path in auto[:5]]
    remaining = sorted(path.name for path in backup_dir.glob("backup_auto_*.json"))
    assert remaining == [path.name for path in auto[5:]]
    assert manual.exists()
    assert delete.exists()


def test_retention_below_limit(exporter, backup_dir):
    write_backup(backup_dir, "backup_auto_2024-01-01T00-00-00-000Z.json")
    assert exporter.limpar_backups_antigos() == []


def test_api_create_backup(client, backup_dir):
    response = client.post("/api/backup", json={"tipo": "manual"})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Backup criado com sucesso"
    assert (backup_dir / body["filename"]).exists()

    default = client.post("/api/backup")
    assert default.json()["filename"].startswith("backup_manual_")


def test_api_download_backup(client, backup_dir):
    create(client)
    response = client.get("/api/backup")
    assert response.status_code == 200
    assert "attachment" in response.headers["content-disposition"]
    assert response.headers["content-disposition"].endswith('.json"')
    payload = response.json()
    assert payload["totalDemandas"] == 1
    assert "tipo" not in payload
    assert not list(backup_dir.iterdir())


def test_export_restore_round_trip(client):
    for index in range(3):
        create(client, nomeDemanda=f"Demanda {index}", atribuidos=[f"pessoa{index}"])
    client.put("/api/demandas/2", json={"status": "aprovada", "usuarioId": 99})
    exported = client.get("/api/backup").json()

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    assert client.get("/api/demandas").json()["data"] == []

    response = client.post("/api/restore", json={"demandas": exported["demandas"]})
    assert response.status_code == 200
    body = response.json()
    assert body["restauradas"] == 3
    assert body["erros"] == 0
    assert "errors" not in body

    restored = client.get("/api/backup").json()
    assert restored["demandas"] == exported["demandas"]


def test_restore_is_an_upsert(client):
    created = create(client)
    entry = dict(created, status="reprovada", comentarioGestor="fora do escopo")

    body = client.post("/api/restore", json={"demandas": [entry]}).json()
    assert body["restauradas"] == 1

    current = client.get(f"/api/demandas/{created['id']}").json()["demanda"]
    assert current["status"] == "reprovada"
    assert current["comentarioGestor"] == "fora do escopo"
    assert len(client.get("/api/demandas").json()["data"]) == 1


def test_restore_reports_bad_entries(client):
    entries = [
        {**demanda_payload(nomeDemanda=f"Restaurada {index}"), "id": 10 + index}
        for index in range(4)
    ]
    entries.insert(2, {"id": 50, "nomeDemanda": "Sem campos obrigatorios"})

    response = client.post("/api/restore", json={"demandas": entries})
    assert response.status_code == 200
    body = response.json()
    assert body["restauradas"] == 4
    assert body["erros"] == 1
    assert len(body["errors"]) == 1
    assert "demanda 3" in body["errors"][0]
    assert len(client.get("/api/demandas").json()["data"]) == 4


def test_restore_error_list_is_capped(client):
    response = client.post("/api/restore", json={"demandas": ["invalida"] * 12})
    body = response.json()
    assert body["restauradas"] == 0
    assert body["erros"] == 12
    assert len(body["errors"]) == 10


def test_restore_requires_list(client):
    response = client.post("/api/restore", json={"demandas": {"id": 1}})
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Formato invalido"}


def test_dispatch_inline_uses_background_task(exporter):
    tasks = BackgroundTasks()
    queue.dispatch_backup(tasks, exporter, "status_change")
    assert len(tasks.tasks) == 1


def test_dispatch_rq(monkeypatch, exporter):
    calls = []
    monkeypatch.setattr(settings, "TASK_QUEUE_BACKEND", "rq")
    monkeypatch.setattr(queue, "enqueue_backup", lambda tipo: calls.append(tipo))

    tasks = BackgroundTasks()
    queue.dispatch_backup(tasks, exporter, "status_change")
    assert calls == ["status_change"]
    assert tasks.tasks == []


def test_enqueue_backup_targets_worker(monkeypatch):
    enqueued = []

    class FakeQueue:
        def enqueue(self, func, *args, **kwargs):
            enqueued.append((func, args))

    monkeypatch.setattr(queue, "get_queue", lambda: FakeQueue())
    queue.enqueue_backup("delete")
    assert enqueued == [(backup_worker.run_backup_job, ("delete",))]


def test_worker_job(monkeypatch, exporter, backup_dir):
    monkeypatch.setattr(backup_worker, "get_backup_exporter", lambda: exporter)
    filename = backup_worker.run_backup_job("status_change")
    assert (backup_dir / filename).exists()


def test_scheduler_runs_backups(exporter, backup_dir):
    scheduler = BackupScheduler(exporter, interval_seconds=0.05, cleanup_interval_seconds=60)
    scheduler.start()
    try:
        assert scheduler.running
        deadline = time.monotonic() + 5
        while not list(backup_dir.glob("backup_auto_*.json")) and time.monotonic() < deadline:
            time.sleep(0.02)
    finally:
        scheduler.stop()

    assert list(backup_dir.glob("backup_auto_*.json"))
    assert not scheduler.running
