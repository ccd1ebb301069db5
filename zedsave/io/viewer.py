from typing import Optional
import numpy as np
import cv2
from ..abstract import zedsave_capture_abstract, zedsave_sink_abstract, zedsave_view_array
from ..util import ZedsaveError, DEPTH_FORMATS, POINT_CLOUD_FORMATS, PREFIX_DEPTH, PREFIX_POINT_CLOUD, zedsave_format_name
from .saver import SaveRequest

__all__ = [
    "DepthWindow",
    "DepthViewer",
]

KEY_ESCAPE = 27

class DepthWindow:
    """OpenCV window showing the depth image and reading the keyboard."""

    def __init__(self, title : str="Depth"):
        self.title = title

    def show(self, image : zedsave_view_array) -> None:
        cv2.imshow(self.title, image)

    def poll_key(self, delay_ms : int) -> int:
        """Wait at most delay_ms for a keypress. Returns the key code or -1."""
        key = cv2.waitKey(delay_ms)
        if key < 0:
            return -1
        return key & 0xff

    def close(self) -> None:
        cv2.destroyAllWindows()

class DepthViewer:
    """Interactive loop: grab frames, show the depth image, and turn keypresses into save requests."""

    HELP = "[d] save Depth, [P] Save Point Cloud, [m] change format PC, [n] change format Depth, [q] quit"
    INSTRUCTIONS = """ Press 'p' to save Point Cloud
 Press 'd' to save Depth image
 Press 'm' to switch Point Cloud format
 Press 'n' to switch Depth format
 Press 'q' to exit"""
    KEY_DELAY_MS = 5

    def __init__(self, capture : zedsave_capture_abstract, saver : zedsave_sink_abstract, path : str="./", window : Optional[DepthWindow]=None, verbose : int=0):
        self.capture = capture
        self.saver = saver
        self.path = path
        self.window = window if window is not None else DepthWindow()
        self.verbose = verbose
        self.display : Optional[zedsave_view_array] = None
        self.show_help = False
        self.stop_requested = False
        self.count = 0
        self.pc_format_index = 0
        self.depth_format_index = 0

    def pc_format(self) -> str:
        fmt = zedsave_format_name(POINT_CLOUD_FORMATS, self.pc_format_index)
        assert fmt
        return fmt

    def depth_format(self) -> str:
        fmt = zedsave_format_name(DEPTH_FORMATS, self.depth_format_index)
        assert fmt
        return fmt

    def stop(self) -> None:
        self.stop_requested = True

    def _continue_running(self) -> bool:
        if self.stop_requested:
            return False
        nframes = self.capture.nframes()
        if nframes > 0 and self.capture.position() > nframes:
            return False
        return True

    def run(self) -> None:
        print(self.INSTRUCTIONS, flush=True)
        try:
            while self._continue_running():
                self.step()
        finally:
            self.window.close()

    def step(self) -> None:
        """One iteration: grab, draw, handle one key."""
        if self.capture.grab():
            view = self.capture.get_depth_view()
            if self.display is None or self.display.shape != view.shape:
                self.display = np.empty_like(view)
            np.copyto(self.display, view)
            if self.show_help:
                cv2.putText(self.display, self.HELP, (20, 20), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (111, 111, 111, 255), 2)
        elif self.capture.eof():
            self.stop()
        if self.display is not None:
            self.window.show(self.display)
        key = self.window.poll_key(self.KEY_DELAY_MS)
        self.handle_key(key)
        self.count += 1

    def handle_key(self, key : int) -> None:
        if key < 0:
            return
        if key == KEY_ESCAPE:
            self.stop()
            return
        cmd = chr(key).lower()
        if cmd == 'q':
            self.stop()
        elif cmd == 'p':
            self.save_point_cloud()
        elif cmd == 'd':
            self.save_depth()
        elif cmd == 'm':
            self.pc_format_index = (self.pc_format_index + 1) % len(POINT_CLOUD_FORMATS)
            print(f"Format Point Cloud {self.pc_format()}", flush=True)
        elif cmd == 'n':
            self.depth_format_index = (self.depth_format_index + 1) % len(DEPTH_FORMATS)
            print(f"Format Depth {self.depth_format()}", flush=True)
        elif cmd == 'h':
            self.show_help = not self.show_help
            print(self.HELP, flush=True)
        elif self.verbose:
            print(f"Unknown command {repr(cmd)}")

    def save_point_cloud(self) -> bool:
        """Snapshot the current point cloud and pass it to the saver"""
        filename = f"{self.path}{PREFIX_POINT_CLOUD}{self.count}"
        try:
            data = self.capture.get_point_cloud()
        except ZedsaveError as e:
            print(f"save: cannot get point cloud: {e}")
            return False
        return self.saver.feed(SaveRequest("pointcloud", filename, self.pc_format(), data))

    def save_depth(self) -> bool:
        """Snapshot the current depth map and pass it to the saver"""
        filename = f"{self.path}{PREFIX_DEPTH}{self.count}"
        try:
            data = self.capture.get_depth()
        except ZedsaveError as e:
            print(f"save: cannot get depth map: {e}")
            return False
        return self.saver.feed(SaveRequest("depth", filename, self.depth_format(), data))
