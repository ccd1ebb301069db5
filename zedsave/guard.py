import sys
import atexit
import threading
from contextlib import contextmanager
from typing import Iterator, Optional
from .abstract import zedsave_capture_abstract

__all__ = [
    "CaptureGuard"
]

class CaptureGuard:
    """Owner of the process-wide capture object.

    release() frees the capture exactly once, also when called from an atexit handler.
    Code running in other threads (the save worker) uses access(), and release() waits
    until such access has finished.
    """

    def __init__(self, capture : zedsave_capture_abstract, verbose : bool=False):
        self._capture : Optional[zedsave_capture_abstract] = capture
        self._lock = threading.RLock()
        self.verbose = verbose
        atexit.register(self._release_at_exit)

    def released(self) -> bool:
        return self._capture is None

    @contextmanager
    def access(self) -> Iterator[Optional[zedsave_capture_abstract]]:
        """Use the capture object. Yields None if it has already been released."""
        with self._lock:
            yield self._capture

    def _release_at_exit(self) -> None:
        # Interpreter exit does not wait for a save that is still using the capture
        self.release(timeout=0)

    def release(self, timeout : Optional[float]=None) -> bool:
        """Free the capture. Returns False if it is still in use after timeout seconds.
        A timeout of 0 does not wait at all.
        """
        if timeout is None:
            acquired = self._lock.acquire()
        elif timeout <= 0:
            acquired = self._lock.acquire(blocking=False)
        else:
            acquired = self._lock.acquire(timeout=timeout)
        if not acquired:
            print(f"capture: still in use after {timeout} seconds, not released", file=sys.stderr)
            return False
        try:
            if self._capture is None:
                return True
            capture = self._capture
            self._capture = None
            capture.free()
            if self.verbose: print("capture: released", flush=True)
        finally:
            self._lock.release()
        atexit.unregister(self._release_at_exit)
        return True
