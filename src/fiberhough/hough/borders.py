"""
Border replication on the circular angle axis of Hough space.

Density estimation near theta = -pi/2 or pi/2 would otherwise miss the
points just across the wrap-around. Points within five bandwidths of a
bound are copied to the other side.
"""

from fiberhough.geometry.points import HoughPoint


# Margin, in bandwidths, of the region influenced by the wrap-around
BORDER_MARGIN = 5.0


def replicate_borders(points, angular_bandwidth, sup_bound, inf_bound, inverse_sign):
    """
    Return points plus their replicas across the angular bounds.
    
    A point near the upper bound is copied at theta - range and a point
    near the lower bound at theta + range, where range = sup - inf. With
    inverse_sign the replica's rho is negated, since (theta, rho) and
    (theta +/- pi, -rho) describe the same undirected line.
    """
    replicated = list(points)
    
    angular_range = sup_bound - inf_bound
    factor = -1.0 if inverse_sign else 1.0
    upper = sup_bound - BORDER_MARGIN * angular_bandwidth
    lower = inf_bound + BORDER_MARGIN * angular_bandwidth
    
    for p in points:
        if p.theta >= upper:
            replicated.append(HoughPoint(p.theta - angular_range, factor * p.rho))
        
        if p.theta <= lower:
            replicated.append(HoughPoint(p.theta + angular_range, factor * p.rho))
    
    return replicated
