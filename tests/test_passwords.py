import asyncio
import threading

import pytest

from authgate.auth import passwords
from authgate.auth.passwords import hash_password, hash_password_async, verify_password, verify_password_async
from authgate.errors import MalformedHash


def test_hash_then_verify():
    h = hash_password("correct-horse")
    assert h.startswith("$argon2id$")
    assert verify_password(h, "correct-horse") is True


def test_wrong_password_does_not_verify():
    h = hash_password("pw1")
    assert verify_password(h, "pw2") is False
    assert verify_password(h, "") is False


def test_salt_is_fresh_per_call():
    a = hash_password("same")
    b = hash_password("same")
    assert a != b
    assert verify_password(a, "same")
    assert verify_password(b, "same")


def test_empty_password_cannot_be_hashed():
    with pytest.raises(ValueError):
        hash_password("")


@pytest.mark.parametrize("bad", ["", "not-a-hash", "bcrypt$2b$12$abc", "ñ$argon2"])
def test_malformed_hash_raises(bad):
    with pytest.raises(MalformedHash):
        verify_password(bad, "pw")


def test_async_wrappers_run_off_loop():
    async def _run():
        h = await hash_password_async("pw")
        ok, bad = await asyncio.gather(
            verify_password_async(h, "pw"),
            verify_password_async(h, "nope"),
        )
        return ok, bad

    assert asyncio.run(_run()) == (True, False)


def test_hash_and_verify_run_on_the_hash_pool(monkeypatch):
    seen = []
    real_hash, real_verify = passwords.hash_password, passwords.verify_password

    def spy_hash(plain):
        seen.append(threading.current_thread().name)
        return real_hash(plain)

    def spy_verify(hash_value, plain):
        seen.append(threading.current_thread().name)
        return real_verify(hash_value, plain)

    monkeypatch.setattr(passwords, "hash_password", spy_hash)
    monkeypatch.setattr(passwords, "verify_password", spy_verify)

    async def _run():
        h = await passwords.hash_password_async("pw")
        return await passwords.verify_password_async(h, "pw")

    assert asyncio.run(_run()) is True
    assert len(seen) == 2
    for name in seen:
        assert name.startswith("authgate-hash")


def test_event_loop_keeps_running_while_hashing():
    async def _run():
        ticks = 0
        task = asyncio.ensure_future(passwords.hash_password_async("pw"))
        while not task.done():
            ticks += 1
            await asyncio.sleep(0)
        await task
        return ticks

    assert asyncio.run(_run()) > 1
