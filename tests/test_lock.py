"""Tests for clawsecrets.lock — one run at a time."""

from pathlib import Path

import pytest

from clawsecrets.errors import LockHeld
from clawsecrets.lock import RotationLock


class TestRotationLock:
    def test_acquire_and_release(self, tmp_path: Path):
        lock = RotationLock(tmp_path / ".rotation.lock")
        with lock:
            assert lock.held
            assert (tmp_path / ".rotation.lock").exists()
        assert not lock.held

    def test_second_holder_fails_fast(self, tmp_path: Path):
        path = tmp_path / ".rotation.lock"
        with RotationLock(path):
            with pytest.raises(LockHeld, match="Another clawsecrets run"):
                RotationLock(path).acquire()

    def test_reacquire_after_release(self, tmp_path: Path):
        path = tmp_path / ".rotation.lock"
        with RotationLock(path):
            pass
        with RotationLock(path) as lock:
            assert lock.held

    def test_released_on_exception(self, tmp_path: Path):
        path = tmp_path / ".rotation.lock"
        with pytest.raises(RuntimeError):
            with RotationLock(path):
                raise RuntimeError("boom")
        with RotationLock(path) as lock:
            assert lock.held
