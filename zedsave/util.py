import importlib.metadata
from typing import List, Optional

__all__ = [
    'ZedsaveError',

    'DEPTH_FORMATS',
    'POINT_CLOUD_FORMATS',
    'DEPTH_FORMAT_EXTENSIONS',
    'POINT_CLOUD_FORMAT_EXTENSIONS',
    'RESOLUTIONS',
    'RESOLUTION_SIZES',
    'DEPTH_MODES',
    'DEFAULT_DEPTH_CLAMP',
    'MAX_DEPTH_SAMPLE',
    'PREFIX_POINT_CLOUD',
    'PREFIX_DEPTH',

    'zedsave_get_version',
    'zedsave_depth_scale_factor',
    'zedsave_format_name',
]

class ZedsaveError(RuntimeError):
    pass

#
# Format lists are in the order they are cycled through by the interactive commands.
#
DEPTH_FORMATS : List[str] = ['PNG', 'PFM', 'PGM']
POINT_CLOUD_FORMATS : List[str] = ['XYZ', 'PCD', 'PLY', 'VTK']

DEPTH_FORMAT_EXTENSIONS = {
    'PNG' : '.png',
    'PFM' : '.pfm',
    'PGM' : '.pgm',
}

POINT_CLOUD_FORMAT_EXTENSIONS = {
    'XYZ' : '.xyz',
    'PCD' : '.pcd',
    'PLY' : '.ply',
    'VTK' : '.vtk',
}

# Index is the --resolution argument
RESOLUTIONS : List[str] = ['HD2K', 'HD1080', 'HD720', 'VGA']
RESOLUTION_SIZES = {
    'HD2K' : (2208, 1242),
    'HD1080' : (1920, 1080),
    'HD720' : (1280, 720),
    'VGA' : (672, 376),
}

# Key is the --mode argument
DEPTH_MODES = {
    1 : 'PERFORMANCE',
    2 : 'MEDIUM',
    3 : 'QUALITY',
}

DEFAULT_DEPTH_CLAMP = 5000 # millimeters
MAX_DEPTH_SAMPLE = 65535 # largest value in a 16-bit depth image

PREFIX_POINT_CLOUD = "PC_"
PREFIX_DEPTH = "Depth_"

def zedsave_get_version() -> str:
    """Return version information"""
    try:
        return importlib.metadata.version("zedsave")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"

def zedsave_depth_scale_factor(depth_clamp : float, max_value : int=MAX_DEPTH_SAMPLE) -> float:
    """Return the factor that maps depth (in millimeters) up to depth_clamp onto the full sample range"""
    if depth_clamp <= 0:
        raise ZedsaveError(f"depth clamp must be positive, not {depth_clamp}")
    return float(max_value) / depth_clamp

def zedsave_format_name(formats : List[str], index : int) -> Optional[str]:
    """Return the name of format number index (modulo the number of formats)"""
    if not formats:
        return None
    return formats[index % len(formats)]
