"""
Foreground pixel extraction from a binary skeleton raster.

The raster is indexed [row, column] = [y, x] like any numpy image; a
pixel is foreground when its value is strictly positive.
"""

from typing import NamedTuple

import numpy as np

from fiberhough.geometry.points import ImagePoint


class Roi(NamedTuple):
    """Axis-aligned region of interest with half-open pixel ranges."""
    x: int
    y: int
    width: int
    height: int
    
    @classmethod
    def full(cls, raster):
        height, width = raster.shape[:2]
        return cls(0, 0, width, height)
    
    def clip(self, width, height):
        """Intersection with the raster extent (may be empty)."""
        x0 = min(max(self.x, 0), width)
        y0 = min(max(self.y, 0), height)
        x1 = min(max(self.x + self.width, 0), width)
        y1 = min(max(self.y + self.height, 0), height)
        return Roi(x0, y0, x1 - x0, y1 - y0)


def get_foreground_points(raster, roi=None, origin=ImagePoint(0, 0)):
    """
    List the foreground pixels of raster lying inside roi.
    
    Coordinates are returned relative to origin, in row-major order so
    that repeated calls on the same input enumerate identically.
    """
    raster = np.asarray(raster)
    height, width = raster.shape[:2]
    if roi is None:
        roi = Roi(0, 0, width, height)
    roi = roi.clip(width, height)
    
    if roi.width == 0 or roi.height == 0:
        return []
    
    window = raster[roi.y:roi.y + roi.height, roi.x:roi.x + roi.width]
    ys, xs = np.nonzero(window > 0)
    
    off_x = roi.x - origin.x
    off_y = roi.y - origin.y
    return [ImagePoint(int(x) + off_x, int(y) + off_y) for y, x in zip(ys, xs)]


def points_to_array(points):
    """Stack image points into an (n, 2) float array of x, y."""
    if not points:
        return np.empty((0, 2), dtype=np.float64)
    return np.array(points, dtype=np.float64)
