"""
Write depth maps and point clouds to files.

Depth images are written with OpenCV, point clouds with Open3D. The file extension is
determined by the format and appended to the basename passed in.
"""
import os
from typing import Optional
import numpy as np
import cv2
import open3d
from .util import ZedsaveError, DEPTH_FORMAT_EXTENSIONS, POINT_CLOUD_FORMAT_EXTENSIONS, MAX_DEPTH_SAMPLE
from .abstract import zedsave_depth_array, zedsave_xyz_array, zedsave_rgb_array

__all__ = [
    'write_depth',
    'write_point_cloud',
]

def _imwrite(filename : str, image : np.ndarray) -> None:
    try:
        ok = cv2.imwrite(filename, image)
    except cv2.error as e:
        raise ZedsaveError(f"{filename}: {e}")
    if not ok:
        raise ZedsaveError(f"{filename}: could not write image")

def _scaled_depth(depth : zedsave_depth_array, scale_factor : float) -> np.ndarray:
    """Convert millimeters to 16-bit samples. Invalid depths become 0."""
    scaled = np.nan_to_num(depth.astype(np.float64) * scale_factor, nan=0.0, posinf=0.0, neginf=0.0)
    scaled = np.clip(np.rint(scaled), 0, MAX_DEPTH_SAMPLE)
    return scaled.astype(np.uint16)

def write_depth(basename : str, depth : zedsave_depth_array, fmt : str, scale_factor : float=1.0) -> str:
    """Write a depth map (millimeters) to basename plus the extension for fmt. Returns the filename.

    PNG and PGM store 16-bit samples of depth*scale_factor, PFM stores the unscaled floats.
    """
    ext = DEPTH_FORMAT_EXTENSIONS.get(fmt)
    if ext is None:
        raise ZedsaveError(f"Unknown depth format {fmt}")
    if depth.ndim != 2:
        raise ZedsaveError(f"depth map must be 2-dimensional, got shape {depth.shape}")
    filename = basename + ext
    if fmt == 'PFM':
        _imwrite(filename, depth.astype(np.float32))
    else:
        _imwrite(filename, _scaled_depth(depth, scale_factor))
    return filename

def write_point_cloud(basename : str, xyz : zedsave_xyz_array, rgb : Optional[zedsave_rgb_array], fmt : str, with_color : bool=True, keep_occluded : bool=False) -> str:
    """Write a point cloud to basename plus the extension for fmt. Returns the filename.

    Points with non-finite coordinates are skipped unless keep_occluded is True.
    """
    ext = POINT_CLOUD_FORMAT_EXTENSIONS.get(fmt)
    if ext is None:
        raise ZedsaveError(f"Unknown point cloud format {fmt}")
    filename = basename + ext
    points = xyz.reshape(-1, 3)
    colors = None
    if with_color and rgb is not None:
        colors = rgb.reshape(-1, 3)
        if len(colors) != len(points):
            raise ZedsaveError(f"point cloud has {len(points)} points but {len(colors)} colors")
    if not keep_occluded:
        valid = np.isfinite(points).all(axis=1)
        points = points[valid]
        if colors is not None:
            colors = colors[valid]
    if fmt == 'VTK':
        _write_vtk(filename, points, colors)
    else:
        _write_o3d(filename, points, colors)
    return filename

def _write_o3d(filename : str, points : np.ndarray, colors : Optional[np.ndarray]) -> None:
    o3d_pc = open3d.geometry.PointCloud()
    o3d_pc.points = open3d.utility.Vector3dVector(points.astype(np.float64))
    if colors is not None:
        o3d_pc.colors = open3d.utility.Vector3dVector(colors.astype(np.float64) / 255.0)
    ok = open3d.io.write_point_cloud(filename, o3d_pc)
    if not ok:
        raise ZedsaveError(f"{filename}: could not write point cloud")

def _write_vtk(filename : str, points : np.ndarray, colors : Optional[np.ndarray]) -> None:
    """Write legacy ASCII VTK polydata, one vertex per point"""
    npoints = len(points)
    try:
        with open(filename, 'w') as fp:
            fp.write("# vtk DataFile Version 3.0\n")
            fp.write(f"{os.path.basename(filename)}\n")
            fp.write("ASCII\n")
            fp.write("DATASET POLYDATA\n")
            fp.write(f"POINTS {npoints} float\n")
            np.savetxt(fp, points, fmt="%.6g")
            fp.write(f"VERTICES {npoints} {2*npoints}\n")
            if npoints:
                vertices = np.column_stack((np.ones(npoints, dtype=np.int64), np.arange(npoints, dtype=np.int64)))
                np.savetxt(fp, vertices, fmt="%d")
            if colors is not None:
                fp.write(f"POINT_DATA {npoints}\n")
                fp.write("COLOR_SCALARS rgb 3\n")
                np.savetxt(fp, colors.astype(np.float64) / 255.0, fmt="%.4f")
    except OSError as e:
        raise ZedsaveError(f"{filename}: {e}")
