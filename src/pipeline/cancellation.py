"""
Latest-wins cancellation for live preview.

Camera frames arrive continuously; a frame still being analysed when a newer
one arrives is stale. The pipeline checks a token between its stages and
abandons the run once the token is cancelled.
"""

import logging
import threading
from typing import Optional

from src.common.errors import FrameSupersededError

logger = logging.getLogger(__name__)


class CancellationToken:
    """Thread-safe, one-way cancellation flag for a single pipeline run."""

    def __init__(self, frame_id: int = 0):
        self.frame_id = frame_id
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    def raise_if_cancelled(self, stage: str = "") -> None:
        """
        Raises:
            FrameSupersededError: If the token has been cancelled.
        """
        if self.is_cancelled:
            message = f"Frame {self.frame_id} superseded before {stage or 'next stage'}"
            logger.debug(message)
            raise FrameSupersededError(message)


class LatestFrameGate:
    """
    Issues one token per frame and cancels the previous frame's token.

    The gate holds no frame data; scheduling (at most one in-flight run per
    camera stream) stays with the caller.

    Example:
        >>> gate = LatestFrameGate()
        >>> first = gate.next_token()
        >>> second = gate.next_token()
        >>> first.is_cancelled, second.is_cancelled
        (True, False)
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._frame_id = 0
        self._current: Optional[CancellationToken] = None

    def next_token(self) -> CancellationToken:
        """Start a new frame, superseding the one in flight (if any)."""
        with self._lock:
            if self._current is not None:
                self._current.cancel()
            self._frame_id += 1
            self._current = CancellationToken(self._frame_id)
            return self._current

    def is_latest(self, token: CancellationToken) -> bool:
        """True if no newer frame has been issued since ``token``."""
        with self._lock:
            return token is self._current

    def close(self) -> None:
        """Cancel the frame in flight, e.g. when the camera stream stops."""
        with self._lock:
            if self._current is not None:
                self._current.cancel()
            self._current = None
