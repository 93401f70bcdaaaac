"""
Tests for the request deadline.
"""
import threading
import time

import pytest

from docstore.errors import DeadlineExceeded
from docstore.pipeline.deadline import Deadline


class TestDeadline:
    def test_no_deadline_never_expires(self):
        deadline = Deadline.none()
        assert deadline.remaining() is None
        deadline.check("anything")

    def test_expires_after_timeout(self):
        now = [0.0]
        deadline = Deadline(5.0, clock=lambda: now[0])
        deadline.check("first")
        assert deadline.remaining() == 5.0
        now[0] = 5.0
        assert deadline.expired()
        with pytest.raises(DeadlineExceeded) as exc:
            deadline.check("save document")
        assert exc.value.step == "save document"
        assert exc.value.status == 500

    def test_call_returns_result_in_time(self):
        assert Deadline(5.0).call("quick", lambda x: x * 2, 21) == 42

    def test_call_without_deadline_runs_inline(self):
        assert Deadline.none().call("inline", threading.current_thread) is threading.current_thread()

    def test_call_abandons_slow_work(self):
        release = threading.Event()
        started = time.monotonic()
        try:
            with pytest.raises(DeadlineExceeded) as exc:
                Deadline(0.2).call("save file", release.wait, 5.0)
            assert time.monotonic() - started < 2.0
            assert exc.value.step == "save file"
        finally:
            release.set()
