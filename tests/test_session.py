import pytest

from authgate.auth.secret import MemorySecretStore
from authgate.auth.session import SessionTokenService
from authgate.errors import StorageError

WEEK = 60 * 60 * 24 * 7


def _service(clock, key=None):
    store = MemorySecretStore(key)
    store.ensure_key()
    return SessionTokenService(store, clock=clock)


def test_issue_then_verify_returns_claims(clock):
    svc = _service(clock)
    token = svc.issue("alice")
    claims = svc.verify(token)
    assert claims is not None
    assert claims.username == "alice"
    assert claims.expires_at == int(clock.now) + WEEK
    assert claims.subject


def test_each_issue_gets_a_new_subject(clock):
    svc = _service(clock)
    a = svc.verify(svc.issue("alice"))
    b = svc.verify(svc.issue("alice"))
    assert a.subject != b.subject


def test_token_valid_until_expiry(clock):
    svc = _service(clock)
    token = svc.issue("alice")

    clock.advance(WEEK - 1)
    assert svc.verify(token) is not None

    clock.advance(1)
    assert svc.verify(token) is None


def test_tampered_token_is_rejected(clock):
    svc = _service(clock)
    token = svc.issue("alice")

    for pos in (0, len(token) // 2, len(token) - 5):
        ch = token[pos]
        swapped = "A" if ch != "A" else "B"
        tampered = token[:pos] + swapped + token[pos + 1:]
        assert svc.verify(tampered) is None


def test_token_signed_with_other_key_is_rejected(clock):
    issuer = _service(clock, key=b"k" * 32)
    verifier = _service(clock, key=b"z" * 32)
    assert verifier.verify(issuer.issue("alice")) is None


@pytest.mark.parametrize("token", [None, "", "garbage", "a.b", "eyJzdWIiOiJ4In0"])
def test_malformed_tokens_are_invalid(clock, token):
    assert _service(clock).verify(token) is None


def test_signed_payload_with_wrong_shape_is_invalid(clock):
    svc = _service(clock)
    s = svc._serializer()
    assert svc.verify(s.dumps(["alice"])) is None
    assert svc.verify(s.dumps({"sub": "x", "un": "alice", "exp": "never"})) is None
    assert svc.verify(s.dumps({"sub": "x", "un": "", "exp": int(clock.now) + 10})) is None


def test_missing_key_is_a_storage_error(clock):
    svc = SessionTokenService(MemorySecretStore(), clock=clock)
    with pytest.raises(StorageError):
        svc.issue("alice")
    with pytest.raises(StorageError):
        svc.verify("anything")
