"""
Unit tests for latest-wins cancellation.
"""

import threading

import pytest

from src.common.errors import FrameSupersededError
from src.pipeline.cancellation import CancellationToken, LatestFrameGate


class TestCancellationToken:
    """Tests for CancellationToken."""

    def test_initially_active(self):
        token = CancellationToken(frame_id=7)

        assert not token.is_cancelled
        token.raise_if_cancelled("detection")

    def test_cancel(self):
        token = CancellationToken(frame_id=7)
        token.cancel()

        assert token.is_cancelled
        with pytest.raises(FrameSupersededError, match="Frame 7 superseded before detection"):
            token.raise_if_cancelled("detection")

    def test_superseded_is_runtime_error(self):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(RuntimeError):
            token.raise_if_cancelled()


class TestLatestFrameGate:
    """Tests for LatestFrameGate."""

    def test_new_frame_cancels_previous(self):
        gate = LatestFrameGate()
        first = gate.next_token()
        second = gate.next_token()

        assert first.is_cancelled
        assert not second.is_cancelled
        assert second.frame_id == first.frame_id + 1

    def test_is_latest(self):
        gate = LatestFrameGate()
        first = gate.next_token()
        assert gate.is_latest(first)

        second = gate.next_token()
        assert not gate.is_latest(first)
        assert gate.is_latest(second)

    def test_close(self):
        gate = LatestFrameGate()
        token = gate.next_token()

        gate.close()

        assert token.is_cancelled
        assert not gate.is_latest(token)

    def test_concurrent_frames_leave_one_active(self):
        """Test that exactly one token survives a burst from many threads."""
        gate = LatestFrameGate()
        tokens = []
        lock = threading.Lock()

        def issue():
            for _ in range(50):
                token = gate.next_token()
                with lock:
                    tokens.append(token)

        threads = [threading.Thread(target=issue) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        active = [t for t in tokens if not t.is_cancelled]
        assert len(tokens) == 200
        assert len(active) == 1
        assert gate.is_latest(active[0])
