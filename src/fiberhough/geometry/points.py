"""
Image-space and Hough-space points.

Image points are integer pixel coordinates relative to a caller-chosen
origin (usually the image center). Hough points are lines in Hesse normal
form: (x, y) lies on (theta, rho) iff x*cos(theta) + y*sin(theta) == rho,
with theta in [-pi/2, pi/2).
"""

import math
from typing import NamedTuple


HALF_PI = math.pi / 2.0


class ImagePoint(NamedTuple):
    """Integer point in image space."""
    x: int
    y: int
    
    def __add__(self, other):
        return ImagePoint(self.x + other.x, self.y + other.y)
    
    def __sub__(self, other):
        return ImagePoint(self.x - other.x, self.y - other.y)
    
    def squared_distance(self, other):
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy
    
    def distance(self, other):
        return math.sqrt(self.squared_distance(other))
    
    def to_hough_point(self, other):
        """Line through this point and other, see convert_image_points_to_hough_point."""
        return convert_image_points_to_hough_point(self, other)


class HoughPoint(NamedTuple):
    """Line (theta, rho) in Hesse normal form."""
    theta: float
    rho: float
    
    def squared_distance(self, other):
        dt = self.theta - other.theta
        dr = self.rho - other.rho
        return dt * dt + dr * dr
    
    def distance(self, other):
        return math.sqrt(self.squared_distance(other))
    
    def offset_of(self, point):
        """Signed offset of the parallel line going through point."""
        return point.x * math.cos(self.theta) + point.y * math.sin(self.theta)


def pairwise_angle(p1, p2):
    """
    Normal angle of the line through two distinct image points.
    
    Vertical lines give 0 and horizontal lines give -pi/2, so the result
    always lies in [-pi/2, pi/2).
    """
    a = p1.x - p2.x
    b = p1.y - p2.y
    
    if a == 0:
        return 0.0
    if b == 0:
        return -HALF_PI
    return -math.atan(a / b)


def convert_image_points_to_hough_point(p1, p2):
    """
    Compute the Hough point of the line going through two image points.
    
    Two points are enough to define a line, so this is exact. The offset
    is the mean of both projections, which makes the result independent
    of argument order.
    """
    theta = pairwise_angle(p1, p2)
    
    if p1.x == p2.x:
        return HoughPoint(theta, float(p1.x))
    if p1.y == p2.y:
        return HoughPoint(theta, float(p1.y))
    
    cos_theta = math.cos(theta)
    sin_theta = math.sin(theta)
    # integer sums are exact, hence independent of argument order
    rho = ((p1.x + p2.x) * cos_theta + (p1.y + p2.y) * sin_theta) / 2.0
    return HoughPoint(theta, rho)


def center_point_of_image(width, height):
    """Integer center of a width x height raster."""
    return ImagePoint(width // 2, height // 2)
