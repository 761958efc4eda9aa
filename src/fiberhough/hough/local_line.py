"""
Robust local line estimation around an anchor pixel.

The slope is the circular median of the angles from the anchor to each of
its neighbors (a Theil-Sen estimator on undirected lines). Angles of
undirected lines have period pi, so the median is only meaningful once
the angles are re-centered on their own circular center of mass.

Everything runs on numpy arrays so that worker threads spend their time
outside the interpreter lock.
"""

import math

import numpy as np

from fiberhough.geometry.points import HALF_PI, HoughPoint


# Below this magnitude both resultant components are treated as zero
RESULTANT_EPSILON = 1e-12


def pairwise_angles(anchor, neighbors):
    """
    Element-wise pairwise_angle from anchor to each row of an (n, 2) array.
    
    Vertical pairs give 0 and horizontal pairs give -pi/2.
    """
    a = anchor.x - neighbors[:, 0]
    b = anchor.y - neighbors[:, 1]
    
    angles = np.full(len(neighbors), -HALF_PI)
    oblique = b != 0
    angles[oblique] = -np.arctan(a[oblique] / b[oblique])
    angles[a == 0] = 0.0
    return angles


def circular_mass_center(angles):
    """
    Center of mass of axial angles (period pi).
    
    Angles are mapped onto the full circle by doubling and shifting by pi;
    the direction of the mean resultant is then halved back. When the
    resultant vanishes (perfectly balanced directions) the center falls
    back to 0.
    """
    doubled = 2.0 * np.asarray(angles, dtype=np.float64) + math.pi
    sum_sin = float(np.sin(doubled).sum())
    sum_cos = float(np.cos(doubled).sum())
    
    if abs(sum_sin) < RESULTANT_EPSILON and abs(sum_cos) < RESULTANT_EPSILON:
        return 0.0
    
    return math.atan2(-sum_sin, -sum_cos) / 2.0


def estimate_local_line(anchor, neighborhood):
    """
    Estimate the line through anchor that best fits its neighborhood.
    
    neighborhood is a sequence of image points or an (n, 2) array of x, y.
    Returns a HoughPoint, or None when the neighborhood is empty (the
    estimate is undefined and the caller skips the anchor).
    """
    neighbors = np.asarray(neighborhood, dtype=np.float64).reshape(-1, 2)
    if len(neighbors) == 0:
        return None
    
    angles = pairwise_angles(anchor, neighbors)
    theta_mass = circular_mass_center(angles)
    
    # Each undirected line has two representatives on the 2*pi circle
    values = np.concatenate([angles, angles + math.pi])
    originals = np.concatenate([angles, angles])
    
    centered = theta_mass + (values - theta_mass + math.pi) % (2.0 * math.pi) - math.pi
    inside = (centered >= theta_mass - HALF_PI) & (centered <= theta_mass + HALF_PI)
    centered = centered[inside]
    originals = originals[inside]
    
    # the window always holds one representative of each angle
    order = np.lexsort((originals, centered))
    # representatives keep their source angle, already in [-pi/2, pi/2)
    theta = float(originals[order[len(order) // 2]])
    
    rho = anchor.x * math.cos(theta) + anchor.y * math.sin(theta)
    return HoughPoint(theta, rho)
