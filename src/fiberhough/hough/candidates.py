"""
Hough point cloud generation from a skeleton raster.

Anchors are drawn uniformly (with replacement) among the foreground
pixels; each anchor contributes the robust local line fitted through its
neighbors. This is the O(samples x foreground) part of the pipeline and
runs one task per anchor on the worker pool.
"""

import numpy as np
from scipy.spatial import KDTree

from fiberhough.geometry.foreground import get_foreground_points, points_to_array
from fiberhough.geometry.points import center_point_of_image
from fiberhough.hough.local_line import estimate_local_line
from fiberhough.parallel import get_pool
from fiberhough.tracer import get_tracer, trace


def neighborhood_of(anchor_index, tree, coords, window_size):
    """
    Foreground points strictly closer than window_size to the anchor.
    
    The anchor itself is excluded. Returns an (n, 2) array of x, y in
    foreground order.
    """
    anchor = coords[anchor_index]
    candidates = np.array(sorted(tree.query_ball_point(anchor, r=window_size)), dtype=np.intp)
    candidates = candidates[candidates != anchor_index]
    
    offsets = coords[candidates] - anchor
    squared = np.einsum("ij,ij->i", offsets, offsets)
    return coords[candidates[squared < window_size * window_size]]


@trace(label="build_hough_space")
def build_hough_space(raster, roi, number_of_samples, window_size, origin=None, rng=None, pool=None):
    """
    Build the raw Hough point cloud of a skeleton raster.
    
    Args:
        raster: 2-D array, foreground where > 0
        roi: Roi restricting eligible pixels (None for the whole raster)
        number_of_samples: number of anchors to draw
        window_size: neighborhood radius in pixels
        origin: ImagePoint origin of the coordinates (image center by default)
        rng: numpy Generator or seed for the anchor draws
        pool: WorkerPool (the shared pool by default)
    
    Returns:
        list of HoughPoint, one per anchor with a non-empty neighborhood
    """
    tracer = get_tracer()
    raster = np.asarray(raster)
    
    if origin is None:
        origin = center_point_of_image(raster.shape[1], raster.shape[0])
    
    foreground = get_foreground_points(raster, roi, origin)
    tracer.event(f"Foreground points: {len(foreground)}")
    
    if not foreground or number_of_samples <= 0:
        return []
    
    coords = points_to_array(foreground)
    tree = KDTree(coords)
    
    rng = np.random.default_rng(rng)
    anchors = rng.integers(0, len(foreground), size=number_of_samples)
    
    def estimate(i):
        anchor_index = int(anchors[i])
        neighborhood = neighborhood_of(anchor_index, tree, coords, window_size)
        return estimate_local_line(foreground[anchor_index], neighborhood)
    
    pool = pool or get_pool()
    results = pool.map(estimate, number_of_samples, stage="build_hough_space")
    
    hough_points = [p for p in results if p is not None]
    skipped = len(results) - len(hough_points)
    if skipped:
        tracer.event(f"Skipped {skipped} anchors with empty neighborhood", level="DEBUG")
    tracer.event(f"Hough points: {len(hough_points)}")
    
    return hough_points
