import sys
import time
import queue
import threading
from typing import Optional, List, Union, NamedTuple, Tuple, Dict
import numpy as np
from .. import encoder
from ..util import ZedsaveError, zedsave_depth_scale_factor
from ..abstract import zedsave_sink_abstract
from ..guard import CaptureGuard

__all__ = [
    "SaveRequest",
    "SaveWorker",
]

class SaveRequest(NamedTuple):
    """One depth map or point cloud to be written.
    kind is "depth" or "pointcloud", filename has no extension, data is the measurement
    snapshot (a depth array, or a tuple of coordinate and color arrays).
    """
    kind : str
    filename : str
    format : str
    data : Union[np.ndarray, Tuple[np.ndarray, np.ndarray]]

class SaveWorker(zedsave_sink_abstract):
    """Write depth maps and point clouds in a separate thread, so the interactive loop
    never waits for the disk.

    Requests are passed through a single-slot queue. feed() never blocks: if a request is still
    waiting to be handled the new one is dropped.
    """

    KINDS = ("depth", "pointcloud")

    def __init__(self, guard : CaptureGuard, verbose : int=0):
        self.guard = guard
        self.verbose = verbose
        self.input_queue : queue.Queue[Optional[SaveRequest]] = queue.Queue(maxsize=1)
        self.thread : Optional[threading.Thread] = None
        self.stop_requested = False
        self.sentinel_sent = False
        self.times_save : Dict[str, List[float]] = {kind : [] for kind in self.KINDS}
        self.count_failed = 0
        self.count_dropped = 0

    def start(self) -> None:
        assert self.thread is None
        self.thread = threading.Thread(target=self.run, args=(), name="zedsave.SaveWorker", daemon=True)
        self.thread.start()

    def stop(self, timeout : float=10.0) -> bool:
        """Ask the worker to stop after handling any pending request, and wait for it."""
        self.stop_requested = True
        if not self.sentinel_sent:
            try:
                self.input_queue.put(None, timeout=timeout)
            except queue.Full:
                print(f"save: still busy after {timeout} seconds, not waiting for it", file=sys.stderr)
                return False
            self.sentinel_sent = True
        if self.thread is None:
            return True
        self.thread.join(timeout)
        if self.thread.is_alive():
            print(f"save: did not stop within {timeout} seconds, continuing", file=sys.stderr)
            return False
        if self.verbose: print("save: stopped", flush=True)
        return True

    def is_alive(self) -> bool:
        return self.thread is not None and self.thread.is_alive()

    def feed(self, request : SaveRequest) -> bool:
        """Hand a request to the worker. Returns False if it was dropped."""
        if request.kind not in self.KINDS:
            raise ZedsaveError(f"unknown save request kind {request.kind}")
        if self.stop_requested:
            print(f"save: stopping, dropped {request.filename}")
            self.count_dropped += 1
            return False
        try:
            self.input_queue.put_nowait(request)
        except queue.Full:
            print(f"save: busy, dropped {request.filename}")
            self.count_dropped += 1
            return False
        if self.verbose: print(f"save: queued {request.kind} {request.filename}", flush=True)
        return True

    def wait_idle(self) -> None:
        """Wait until all requests that have been fed are handled"""
        self.input_queue.join()

    def run(self) -> None:
        if self.verbose: print("save: started", flush=True)
        while True:
            request = self.input_queue.get()
            try:
                if request is None:
                    break
                self.save(request)
            finally:
                self.input_queue.task_done()

    def save(self, request : SaveRequest) -> bool:
        """Write a single request. Errors are reported but not raised."""
        t0 = time.time()
        with self.guard.access() as capture:
            if capture is None:
                print(f"save: camera released, not saving {request.filename}", file=sys.stderr)
                self.count_failed += 1
                return False
            if request.kind == "depth":
                label = "Depth Map"
            else:
                label = "Point Cloud"
            print(f"Saving {label} {request.filename} in {request.format} ...", end='', flush=True)
            try:
                if request.kind == "depth":
                    assert isinstance(request.data, np.ndarray)
                    scale_factor = zedsave_depth_scale_factor(capture.depth_clamp())
                    filename = encoder.write_depth(request.filename, request.data, request.format, scale_factor)
                else:
                    xyz, rgb = request.data
                    filename = encoder.write_point_cloud(request.filename, xyz, rgb, request.format, with_color=True, keep_occluded=False)
            except (ZedsaveError, OSError) as e:
                print("failed")
                print(f"save: error: {e}", file=sys.stderr)
                self.count_failed += 1
                return False
            print("done", flush=True)
        self.times_save[request.kind].append(time.time() - t0)
        if self.verbose: print(f"save: wrote {filename}", flush=True)
        return True

    def statistics(self) -> None:
        self.print1stat('save_depth_duration', self.times_save["depth"])
        self.print1stat('save_pointcloud_duration', self.times_save["pointcloud"])
        print(f'save: failed={self.count_failed}, dropped={self.count_dropped}')

    def print1stat(self, name : str, values : List[float]) -> None:
        count = len(values)
        if count == 0:
            print('save: {}: count=0'.format(name))
            return
        minValue = min(values)
        maxValue = max(values)
        avgValue = sum(values) / count
        print('save: {}: count={}, average={:.3f}, min={:.3f}, max={:.3f}'.format(name, count, avgValue, minValue, maxValue))
