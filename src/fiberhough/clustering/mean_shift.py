"""
Anisotropic mean-shift mode seeking in Hough space.

Every input point climbs the kernel density estimate independently (one
task per point on the worker pool); the converged positions are then
merged into a list of distinct modes by a single sequential pass in
input order, so that the canonical representative of near-duplicate
modes does not depend on thread scheduling.
"""

from typing import List, NamedTuple

import numpy as np

from fiberhough.clustering.kernels import GaussianKernel
from fiberhough.errors import ParallelTaskError
from fiberhough.geometry.points import HoughPoint
from fiberhough.parallel import get_pool
from fiberhough.tracer import get_tracer, trace


DEFAULT_TOLERANCE = 1e-10
DEFAULT_MAX_ITERATIONS = 1000
DEFAULT_MERGE_EPSILON = 1e-2


class MeanShiftResult(NamedTuple):
    """Distinct modes and, for each input point, the index of its mode."""
    modes: List[HoughPoint]
    labels: List[int]


def merge_or_add_mode(modes, point, merge_epsilon):
    """
    Index of the first mode closer than merge_epsilon to point.
    
    Appends point as a new mode when none is close enough. Mutates modes.
    """
    for index, mode in enumerate(modes):
        if mode.distance(point) < merge_epsilon:
            return index
    
    modes.append(point)
    return len(modes) - 1


class MeanShift:
    """
    Mean-shift clustering of 2-D Hough points with per-axis bandwidths.
    
    Results of the last run are kept in modes and labels; both are None
    before the first run and empty after a failed one.
    """
    
    def __init__(
        self,
        kernel=None,
        bandwidth=HoughPoint(1.0, 1.0),
        tolerance=DEFAULT_TOLERANCE,
        max_iterations=DEFAULT_MAX_ITERATIONS,
        merge_epsilon=DEFAULT_MERGE_EPSILON,
        pool=None,
    ):
        self.kernel = kernel or GaussianKernel()
        self.bandwidth = HoughPoint(*bandwidth)
        self.tolerance = tolerance
        self.max_iterations = max_iterations
        self.merge_epsilon = merge_epsilon
        self.pool = pool
        
        self.modes = None
        self.labels = None
    
    def shift_point(self, start, data):
        """
        Follow the mean-shift trajectory of start over data until convergence.
        
        data is an (n, 2) array of (theta, rho). The start value is never
        modified; the final position is returned as a new HoughPoint.
        """
        h = np.array(self.bandwidth, dtype=np.float64)
        position = np.array(start, dtype=np.float64)
        support2 = None
        if self.kernel.has_finite_support:
            support2 = self.kernel.max_domain * self.kernel.max_domain
        
        for _ in range(self.max_iterations):
            scaled = (data - position) / h
            u2 = np.einsum("ij,ij->i", scaled, scaled)
            
            if support2 is not None:
                inside = u2 <= support2
                weights = self.kernel.evaluate_squared(u2[inside])
                neighbors = data[inside]
            else:
                weights = self.kernel.evaluate_squared(u2)
                neighbors = data
            
            total = weights.sum()
            if total <= 0.0:
                break
            
            mean = weights @ neighbors / total
            displacement = mean - position
            position = mean
            
            if displacement @ displacement < self.tolerance:
                break
        
        return HoughPoint(float(position[0]), float(position[1]))
    
    @trace(label="mean_shift")
    def run(self, data):
        """
        Cluster data (a sequence of HoughPoint) and return a MeanShiftResult.
        
        A failing task aborts the run: modes and labels are reset to empty
        lists and the ParallelTaskError propagates.
        """
        tracer = get_tracer()
        points = [HoughPoint(*p) for p in data]
        
        if not points:
            self.modes, self.labels = [], []
            return MeanShiftResult([], [])
        
        array = np.array(points, dtype=np.float64)
        array.setflags(write=False)
        pool = self.pool or get_pool()
        
        try:
            finals = pool.map(
                lambda i: self.shift_point(points[i], array),
                len(points),
                stage="mean_shift",
            )
        except ParallelTaskError:
            self.modes, self.labels = [], []
            raise
        
        # sequential merge, in input order
        modes = []
        labels = [merge_or_add_mode(modes, final, self.merge_epsilon) for final in finals]
        
        self.modes, self.labels = modes, labels
        tracer.event(f"Modes: {len(modes)} from {len(points)} points")
        return MeanShiftResult(modes, labels)
