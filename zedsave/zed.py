import numpy as np
import cv2
import pyzed.sl as sl
from typing import Optional, Tuple
from .abstract import zedsave_capture_abstract, zedsave_depth_array, zedsave_view_array, zedsave_xyz_array, zedsave_rgb_array
from .util import ZedsaveError, DEFAULT_DEPTH_CLAMP

__all__ = [
    "zedsave_zed",
    "zed_sdk_version",
]

# Index is the --resolution argument
_RESOLUTION_MAP = [
    sl.RESOLUTION.HD2K,
    sl.RESOLUTION.HD1080,
    sl.RESOLUTION.HD720,
    sl.RESOLUTION.VGA,
]

# Key is the --mode argument. The SDK no longer has a MEDIUM mode, so everything shifts up one level.
_DEPTH_MODE_MAP = {
    1 : sl.DEPTH_MODE.PERFORMANCE,
    2 : sl.DEPTH_MODE.QUALITY,
    3 : sl.DEPTH_MODE.ULTRA,
}

def zed_sdk_version() -> str:
    return str(sl.Camera.get_sdk_version())

class zedsave_zed(zedsave_capture_abstract):
    """Capture source that grabs from a ZED camera, or from an SVO recording if filename is given."""

    def __init__(self, filename : Optional[str]=None, resolution : int=2, mode : int=1, device : int=-1, depth_clamp : float=DEFAULT_DEPTH_CLAMP, verbose : bool=False):
        if mode not in _DEPTH_MODE_MAP:
            raise ZedsaveError(f"depth mode {mode} is not available")
        init = sl.InitParameters()
        if filename:
            init.set_from_svo_file(filename)
        else:
            if resolution < 0 or resolution >= len(_RESOLUTION_MAP):
                raise ZedsaveError(f"resolution {resolution} is not available")
            init.camera_resolution = _RESOLUTION_MAP[resolution]
        init.depth_mode = _DEPTH_MODE_MAP[mode]
        init.coordinate_units = sl.UNIT.MILLIMETER
        init.depth_maximum_distance = depth_clamp
        init.sdk_gpu_id = device
        init.sdk_verbose = 1 if verbose else 0
        self._camera : Optional[sl.Camera] = sl.Camera()
        err = self._camera.open(init)
        if err != sl.ERROR_CODE.SUCCESS:
            self._camera.close()
            self._camera = None
            raise ZedsaveError(str(err))
        self.filename = filename
        self._clamp = float(depth_clamp)
        self._end_reached = False
        self._nframes = 0
        if filename:
            self._nframes = self._camera.get_svo_number_of_frames()
        self._runtime = sl.RuntimeParameters()
        self._view_mat = sl.Mat()
        self._depth_mat = sl.Mat()
        self._cloud_mat = sl.Mat()

    def _as_camera(self) -> sl.Camera:
        assert self._camera
        return self._camera

    def free(self) -> None:
        if self._camera:
            self._camera.close()
        self._camera = None

    def grab(self) -> bool:
        err = self._as_camera().grab(self._runtime)
        if err == sl.ERROR_CODE.SUCCESS:
            return True
        if err == sl.ERROR_CODE.END_OF_SVOFILE_REACHED:
            self._end_reached = True
        return False

    def eof(self) -> bool:
        return self._end_reached

    def position(self) -> int:
        if not self.filename:
            return 0
        return self._as_camera().get_svo_position()

    def nframes(self) -> int:
        return self._nframes

    def depth_clamp(self) -> float:
        return self._clamp

    def get_depth_view(self) -> zedsave_view_array:
        err = self._as_camera().retrieve_image(self._view_mat, sl.VIEW.DEPTH)
        if err != sl.ERROR_CODE.SUCCESS:
            raise ZedsaveError(f"retrieve depth view: {err}")
        bgra = self._view_mat.get_data()
        return cv2.cvtColor(bgra, cv2.COLOR_BGRA2GRAY)

    def get_depth(self) -> zedsave_depth_array:
        err = self._as_camera().retrieve_measure(self._depth_mat, sl.MEASURE.DEPTH)
        if err != sl.ERROR_CODE.SUCCESS:
            raise ZedsaveError(f"retrieve depth: {err}")
        return np.array(self._depth_mat.get_data(), dtype=np.float32, copy=True)

    def get_point_cloud(self) -> Tuple[zedsave_xyz_array, zedsave_rgb_array]:
        err = self._as_camera().retrieve_measure(self._cloud_mat, sl.MEASURE.XYZRGBA)
        if err != sl.ERROR_CODE.SUCCESS:
            raise ZedsaveError(f"retrieve point cloud: {err}")
        data = self._cloud_mat.get_data()
        xyz = np.array(data[..., :3], dtype=np.float32, copy=True)
        # The fourth channel holds the color as 4 packed bytes R, G, B, A
        packed = np.ascontiguousarray(data[..., 3], dtype=np.float32)
        rgba = packed.view(np.uint8).reshape(packed.shape + (4,))
        rgb = np.array(rgba[..., :3], copy=True)
        return xyz, rgb
