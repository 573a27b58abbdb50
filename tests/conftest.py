import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from pathlib import Path

import pytest
from starlette.requests import Request

from authgate.auth.config import MemoryConfigStore
from authgate.auth.credentials import MemoryCredentialStore
from authgate.auth.gate import AuthGate
from authgate.auth.secret import MemorySecretStore
from authgate.auth.session import SessionTokenService


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    """Empty data directory, as on a first run."""
    d = tmp_path / "data"
    d.mkdir()
    return d


@pytest.fixture()
def memory_gate(clock) -> AuthGate:
    secret_store = MemorySecretStore()
    secret_store.ensure_key()
    return AuthGate(
        secret_store=secret_store,
        credentials=MemoryCredentialStore(),
        config=MemoryConfigStore(secure_cookie=True),
        tokens=SessionTokenService(secret_store, clock=clock),
    )


def _request_with_cookie(cookie: str = "") -> Request:
    headers = []
    if cookie:
        headers.append((b"cookie", cookie.encode("latin-1")))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


@pytest.fixture()
def make_request():
    return _request_with_cookie
