"""
Selection of candidate lines among the modes of the Hough point cloud.

A mode is kept when its basin holds more than a given fraction of the
most populated basin. Modes outside the open interval (-pi/2, pi/2) only
exist because of border replicas and are dropped.
"""

import math

import numpy as np

from fiberhough.clustering.kernels import GaussianKernel
from fiberhough.clustering.mean_shift import (
    DEFAULT_MAX_ITERATIONS, DEFAULT_MERGE_EPSILON, DEFAULT_TOLERANCE, MeanShift,
)
from fiberhough.geometry.points import HALF_PI, HoughPoint
from fiberhough.hough.borders import replicate_borders
from fiberhough.tracer import get_tracer, trace


def mode_populations(labels, n_modes):
    """Number of points converging to each mode."""
    return np.bincount(np.asarray(labels, dtype=np.intp), minlength=n_modes)[:n_modes]


@trace(label="select_peaks")
def select_peaks(
    points,
    selection_sensitivity,
    angular_bandwidth_deg,
    rho_bandwidth,
    kernel=None,
    tolerance=DEFAULT_TOLERANCE,
    max_iterations=DEFAULT_MAX_ITERATIONS,
    merge_epsilon=DEFAULT_MERGE_EPSILON,
    pool=None,
    with_counts=False,
):
    """
    Select the dominant lines of a Hough point cloud.
    
    Args:
        points: raw HoughPoints
        selection_sensitivity: fraction of the maximal basin population a
            mode must strictly exceed, in (0, 1)
        angular_bandwidth_deg: bandwidth on theta, in degrees
        rho_bandwidth: bandwidth on rho, in pixels
        with_counts: also return the basin population of each selected line
    
    Returns:
        list of HoughPoint, or list of (HoughPoint, count) with with_counts
    """
    tracer = get_tracer()
    
    theta_bandwidth = angular_bandwidth_deg * math.pi / 180.0
    
    replicated = replicate_borders(points, theta_bandwidth, HALF_PI, -HALF_PI, True)
    tracer.event(f"Replicated points: {len(replicated)} from {len(points)}")
    
    finder = MeanShift(
        kernel=kernel or GaussianKernel(),
        bandwidth=HoughPoint(theta_bandwidth, rho_bandwidth),
        tolerance=tolerance,
        max_iterations=max_iterations,
        merge_epsilon=merge_epsilon,
        pool=pool,
    )
    modes, labels = finder.run(replicated)
    
    if not modes:
        return []
    
    counts = mode_populations(labels, len(modes))
    maximal_count = int(counts.max())
    
    selected = []
    for mode, count in zip(modes, counts):
        if count > selection_sensitivity * maximal_count and -HALF_PI < mode.theta < HALF_PI:
            selected.append((mode, int(count)))
    
    tracer.event(f"Selected lines: {len(selected)} of {len(modes)} modes (max count {maximal_count})")
    
    if with_counts:
        return selected
    return [mode for mode, _ in selected]
