import os
import signal
import sys
import threading

import uvicorn

from demandas import __version__
from demandas.server import DemandasServer, install_crash_hooks, shutdown_backup


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert body["demandas"] == 0
    assert body["version"] == __version__
    assert body["uptime"] >= 0
    assert "max_rss_kb" in body["memory"]


def test_server_records_first_signal():
    server = DemandasServer(uvicorn.Config("demandas.main:app"))
    server.handle_exit(signal.SIGINT, None)
    server.handle_exit(signal.SIGTERM, None)
    assert server.exit_signal == signal.SIGINT
    assert server.should_exit


def test_shutdown_backup(exporter, backup_dir):
    shutdown_backup(exporter)
    assert len(list(backup_dir.glob("backup_shutdown_*.json"))) == 1


def test_crash_hook_takes_backup_and_exits(monkeypatch, exporter, backup_dir):
    exits = []
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    monkeypatch.setattr(threading, "excepthook", threading.excepthook)
    monkeypatch.setattr(os, "_exit", exits.append)

    install_crash_hooks(exporter)
    try:
        raise RuntimeError("falha fatal")
    except RuntimeError as exc:
        sys.excepthook(type(exc), exc, exc.__traceback__)

    assert exits == [1]
    assert len(list(backup_dir.glob("backup_crash_*.json"))) == 1
