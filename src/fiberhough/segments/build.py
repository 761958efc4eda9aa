"""
Segment assembly along selected lines.

For each line, the foreground pixels lying within the width tolerance are
ordered along the line's dominant axis and split wherever two consecutive
pixels are farther apart than the maximum gap. Runs long enough become
segments, in raster coordinates.
"""

import math

import numpy as np

from fiberhough.geometry.foreground import get_foreground_points
from fiberhough.geometry.points import center_point_of_image
from fiberhough.models import Segment
from fiberhough.parallel import get_pool
from fiberhough.tracer import get_tracer, trace


def associated_points(line, foreground, width_tolerance):
    """Foreground points whose distance to line is at most width_tolerance."""
    cos_theta = math.cos(line.theta)
    sin_theta = math.sin(line.theta)
    
    return [
        p for p in foreground
        if abs(p.x * cos_theta + p.y * sin_theta - line.rho) <= width_tolerance
    ]


def sort_along_major_axis(points):
    """Sort points along the axis of largest extent (major first, minor second)."""
    if not points:
        return []
    
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    
    if max(xs) - min(xs) >= max(ys) - min(ys):
        return sorted(points, key=lambda p: (p.x, p.y))
    return sorted(points, key=lambda p: (p.y, p.x))


def split_on_gaps(points, max_gap):
    """Split an ordered point sequence into runs with no step above max_gap."""
    max_gap2 = max_gap * max_gap
    runs = []
    current = []
    
    for p in points:
        if current and current[-1].squared_distance(p) > max_gap2:
            runs.append(current)
            current = []
        current.append(p)
    
    if current:
        runs.append(current)
    return runs


def segments_for_line(line, foreground, origin, max_gap, min_length, width_tolerance):
    """Segments contributed by a single line."""
    points = sort_along_major_axis(associated_points(line, foreground, width_tolerance))
    if len(points) < 2:
        return []
    
    min_length2 = min_length * min_length
    segments = []
    for run in split_on_gaps(points, max_gap):
        first, last = run[0], run[-1]
        if first.squared_distance(last) >= min_length2:
            segments.append(Segment.from_points(first + origin, last + origin))
    return segments


@trace(label="build_segments")
def build_segments(raster, roi, selected_lines, max_gap, min_length, width_tolerance, origin=None, pool=None):
    """
    Build the segments supported by each selected line.
    
    Lines are processed independently; the result is the concatenation
    of their segments in line order, without deduplication across lines.
    """
    tracer = get_tracer()
    raster = np.asarray(raster)
    
    if origin is None:
        origin = center_point_of_image(raster.shape[1], raster.shape[0])
    
    foreground = get_foreground_points(raster, roi, origin)
    if not foreground or not selected_lines:
        return []
    
    pool = pool or get_pool()
    per_line = pool.map(
        lambda k: segments_for_line(
            selected_lines[k], foreground, origin, max_gap, min_length, width_tolerance
        ),
        len(selected_lines),
        stage="build_segments",
    )
    
    segments = [segment for line_segments in per_line for segment in line_segments]
    tracer.event(f"Segments: {len(segments)} from {len(selected_lines)} lines")
    return segments
