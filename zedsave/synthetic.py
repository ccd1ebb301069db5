import time
import math
from typing import Tuple
import numpy as np
import cv2
from .abstract import zedsave_capture_abstract, zedsave_depth_array, zedsave_view_array, zedsave_xyz_array, zedsave_rgb_array
from .util import ZedsaveError, DEFAULT_DEPTH_CLAMP

__all__ = [
    "zedsave_synthetic"
]

class zedsave_synthetic(zedsave_capture_abstract):
    """Capture source that generates a scene in stead of grabbing from a camera.

    The scene is a tilted floor with a sphere moving in front of it. A border of a few
    pixels has no valid depth, like the left edge of a real stereo depth map.
    With nframes > 0 it behaves like a recording of that many frames.
    """

    BORDER = 4

    def __init__(self, width : int=672, height : int=376, nframes : int=0, fps : int=0, depth_clamp : float=DEFAULT_DEPTH_CLAMP):
        if width <= 2*self.BORDER or height <= 2*self.BORDER:
            raise ZedsaveError(f"synthetic capture: image size {width}x{height} too small")
        self.width = width
        self.height = height
        self._nframes = nframes
        self._position = 0
        self._clamp = float(depth_clamp)
        self._freed = False
        self.delta_t = 0.0
        if fps:
            self.delta_t = 1/fps
        self.earliest_return = time.time()
        # Pinhole camera with a horizontal field of view of about 90 degrees
        self.focal = width / 2
        u = np.arange(width, dtype=np.float32) - (width-1)/2
        v = np.arange(height, dtype=np.float32) - (height-1)/2
        self._u, self._v = np.meshgrid(u, v)
        self._depth = np.full((height, width), np.nan, dtype=np.float32)

    def free(self) -> None:
        self._freed = True

    def eof(self) -> bool:
        return self._nframes > 0 and self._position > self._nframes

    def position(self) -> int:
        return self._position

    def nframes(self) -> int:
        return self._nframes

    def depth_clamp(self) -> float:
        return self._clamp

    def grab(self) -> bool:
        if self._freed:
            raise ZedsaveError("synthetic capture: grab() after free()")
        if time.time() < self.earliest_return:
            time.sleep(self.earliest_return - time.time())
        self.earliest_return = time.time() + self.delta_t
        self._position += 1
        if self.eof():
            return False
        self._depth = self._render(self._position)
        return True

    def _render(self, frame : int) -> zedsave_depth_array:
        # Floor: depth increases towards the top of the image
        depth = 1500.0 + (self.height/2 - self._v) * (4000.0 / self.height)
        # Sphere in front of the floor, moving left to right
        angle = frame * 0.05
        cx = math.sin(angle) * self.width / 4
        radius = self.height / 5
        d2 = (self._u - cx)**2 + self._v**2
        inside = d2 < radius*radius
        bump = np.sqrt(np.maximum(radius*radius - d2, 0)) * (600.0 / radius)
        depth = np.where(inside, np.minimum(depth, 1200.0 - bump), depth).astype(np.float32)
        depth[depth > self._clamp] = np.nan
        b = self.BORDER
        depth[:b, :] = np.nan
        depth[-b:, :] = np.nan
        depth[:, :b] = np.nan
        depth[:, -b:] = np.nan
        return depth

    def get_depth(self) -> zedsave_depth_array:
        return self._depth.copy()

    def get_depth_view(self) -> zedsave_view_array:
        # Near is bright, invalid is black
        valid = np.isfinite(self._depth)
        view = np.zeros(self._depth.shape, dtype=np.uint8)
        if valid.any():
            normalized = cv2.normalize(-self._depth[valid], None, 1, 255, cv2.NORM_MINMAX)
            view[valid] = normalized.reshape(-1).astype(np.uint8)
        return view

    def get_point_cloud(self) -> Tuple[zedsave_xyz_array, zedsave_rgb_array]:
        z = self._depth
        x = self._u * z / self.focal
        y = -self._v * z / self.focal
        xyz = np.dstack((x, y, z)).astype(np.float32)
        rgb = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        rgb[..., 0] = np.linspace(0, 255, self.width, dtype=np.float32).astype(np.uint8)[np.newaxis, :]
        rgb[..., 1] = np.linspace(0, 255, self.height, dtype=np.float32).astype(np.uint8)[:, np.newaxis]
        rgb[..., 2] = 128
        return xyz, rgb
