import asyncio
import os
import sys
import tempfile
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault(
    "SESSION_FILE",
    str(Path(tempfile.gettempdir()) / "campus-access-tests" / "current_user.json"),
)

from campus_access.database import DatabaseManager
from campus_access.main import create_app


ANA = {
    "nombre": "Ana",
    "correo": "ana@campus.edu",
    "codigo_barra": "A1B2C3",
    "carrera": "Ingeniería",
    "rol": "member",
    "contrasena": "ana-password-1",
}


@pytest.fixture()
def database() -> DatabaseManager:
    db = DatabaseManager("sqlite://")
    db.initialize()
    yield db
    db.dispose()


@pytest.fixture()
def client(database: DatabaseManager) -> TestClient:
    app = create_app(database=database)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def registered_user(client: TestClient) -> dict:
    response = client.post("/api/registro", json=ANA)
    assert response.status_code == 200, response.text
    return dict(ANA)


class FakeDecoder:
    """Stands in for the camera: tests push detections by hand."""

    def __init__(self, failure: Optional[Exception] = None):
        self.failure = failure
        self.on_detect: Optional[Callable[[str, float], None]] = None
        self.on_error = None
        self.start_calls = 0
        self.stop_calls = 0
        self.running = False

    async def start(self, on_detect, on_error) -> None:
        self.start_calls += 1
        if self.failure is not None:
            raise self.failure
        self.on_detect = on_detect
        self.on_error = on_error
        self.running = True

    def stop(self) -> None:
        self.stop_calls += 1
        self.running = False

    def emit(self, code: str, detected_at: float):
        # Late callbacks after stop() are still delivered, as real decoders do.
        return self.on_detect(code, detected_at)


class FakeGateway:
    """Records calls and answers from canned results."""

    def __init__(self, users: Optional[dict] = None, record_error: Optional[Exception] = None,
                 lookup_error: Optional[Exception] = None):
        self.users = users or {}
        self.record_error = record_error
        self.lookup_error = lookup_error
        self.lookups: List[str] = []
        self.records: List[Tuple[str, str]] = []

    async def get_user_by_code(self, code: str):
        from campus_access.models.schemas import UserOut
        from campus_access.utils.exceptions import NotFoundError

        self.lookups.append(code)
        await asyncio.sleep(0)
        if self.lookup_error is not None:
            raise self.lookup_error
        if code not in self.users:
            raise NotFoundError("User not found.", status=404, data={"error": "User not found."})
        return UserOut(**self.users[code])

    async def record_access(self, code: str, kind: str):
        self.records.append((code, kind))
        await asyncio.sleep(0)
        if self.record_error is not None:
            raise self.record_error
        return {"success": True, "message": "Access recorded successfully."}


@pytest.fixture()
def fake_decoder() -> FakeDecoder:
    return FakeDecoder()
