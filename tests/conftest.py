"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Ensure src/ is on the import path (for local imports without installing as package)
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from chat_rpc.server import create_app  # noqa: E402
from chat_rpc.store import MessageStore  # noqa: E402


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the root directory of the project."""
    return Path(__file__).resolve().parent.parent


@pytest.fixture(scope="session")
def config_path(project_root: Path) -> Path:
    """Shipped config/default.yaml."""
    return project_root / "config" / "default.yaml"


@pytest.fixture(scope="function")
def clean_env(monkeypatch: pytest.MonkeyPatch):
    """Ensure tests run with a clean environment (no leftover vars)."""
    for var in list(os.environ):
        if var == "CHAT_RPC_CONFIG" or var.startswith("CHAT_RPC__"):
            monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture(scope="function")
def store() -> MessageStore:
    """A fresh, empty store per test."""
    return MessageStore()


@pytest.fixture(scope="function")
def client(clean_env, config_path: Path, store: MessageStore) -> TestClient:
    app = create_app(str(config_path), store=store)
    with TestClient(app) as c:
        yield c
