from abc import ABC, abstractmethod
from typing import Any, Tuple, Callable
import numpy.typing

zedsave_depth_array = numpy.typing.NDArray[numpy.float32]
zedsave_view_array = numpy.typing.NDArray[numpy.uint8]
zedsave_xyz_array = numpy.typing.NDArray[numpy.float32]
zedsave_rgb_array = numpy.typing.NDArray[numpy.uint8]

class zedsave_capture_abstract(ABC):
    """A stereo camera (live or recorded) that produces depth and point cloud measurements.
    grab() advances to the next frame, the get_...() methods return copies of the measurements
    of the most recently grabbed frame.
    """

    @abstractmethod
    def free(self) -> None:
        """Release the camera (or recording). No other methods may be called after this."""
        ...

    @abstractmethod
    def grab(self) -> bool:
        """Capture the next frame. Returns False if no new frame is available."""
        ...

    @abstractmethod
    def eof(self) -> bool:
        """Return True if no more frames will be forthcoming"""
        ...

    @abstractmethod
    def position(self) -> int:
        """Return the current playback position (for recordings)"""
        ...

    @abstractmethod
    def nframes(self) -> int:
        """Return the number of frames in the recording, or 0 for a live camera"""
        ...

    @abstractmethod
    def depth_clamp(self) -> float:
        """Return the maximum depth (millimeters) reported"""
        ...

    @abstractmethod
    def get_depth_view(self) -> zedsave_view_array:
        """Return the depth map normalized for display, as a HxW uint8 image"""
        ...

    @abstractmethod
    def get_depth(self) -> zedsave_depth_array:
        """Return the depth map in millimeters as a HxW float32 array. Invalid measurements are NaN."""
        ...

    @abstractmethod
    def get_point_cloud(self) -> Tuple[zedsave_xyz_array, zedsave_rgb_array]:
        """Return HxWx3 float32 coordinates (millimeters) and HxWx3 uint8 RGB colors. Invalid points are NaN."""
        ...

zedsave_capture_factory_abstract = Callable[[], zedsave_capture_abstract]

class zedsave_sink_abstract(ABC):
    """A consumer of save requests. The intention is that this class is implemented in a multi-threaded
    way with a queue so the producer (the interactive loop) does not have to wait for the sink.
    """

    @abstractmethod
    def start(self) -> None:
        """Start the sink."""
        ...

    @abstractmethod
    def stop(self, timeout : float) -> bool:
        """Stop the sink, waiting at most timeout seconds. Returns False if the sink did not stop in time."""
        ...

    @abstractmethod
    def feed(self, request : Any) -> bool:
        """Hand a save request to the sink. Returns False if it was not accepted."""
        ...

    @abstractmethod
    def statistics(self) -> None:
        """Print statistics."""
        ...
