"""Tests for the robust local line estimator."""

import math

import pytest


class TestCircularMassCenter:
    """Tests for the axial center of mass."""
    
    def test_single_angle(self):
        """The center of one angle is that angle."""
        from fiberhough.hough.local_line import circular_mass_center
        
        assert circular_mass_center([0.3]) == pytest.approx(0.3)
    
    def test_wraps_around_half_pi(self):
        """Angles on both sides of +/-pi/2 average to the boundary, not to 0."""
        from fiberhough.hough.local_line import circular_mass_center
        
        center = circular_mass_center([-1.5, 1.5])
        
        assert abs(center) == pytest.approx(math.pi / 2, abs=1e-9)
    
    def test_balanced_directions_fall_back_to_zero(self):
        """Perpendicular directions cancel out and give 0."""
        from fiberhough.hough.local_line import circular_mass_center
        
        assert circular_mass_center([0.0, -math.pi / 2]) == 0.0


class TestEstimateLocalLine:
    """Tests for estimate_local_line."""
    
    def test_empty_neighborhood(self):
        """No neighbor means no estimate."""
        from fiberhough.geometry.points import ImagePoint
        from fiberhough.hough.local_line import estimate_local_line
        
        assert estimate_local_line(ImagePoint(3, 4), []) is None
    
    def test_vertical_neighbors(self):
        """Neighbors straight above and below give a vertical line through the anchor."""
        from fiberhough.geometry.points import ImagePoint
        from fiberhough.hough.local_line import estimate_local_line
        
        anchor = ImagePoint(7, 2)
        line = estimate_local_line(anchor, [ImagePoint(7, 0), ImagePoint(7, 5), ImagePoint(7, 9)])
        
        assert line.theta == 0.0
        assert line.rho == pytest.approx(7.0)
    
    def test_outlier_is_ignored(self):
        """The median angle is not pulled by a single outlier."""
        from fiberhough.geometry.points import ImagePoint
        from fiberhough.hough.local_line import estimate_local_line
        
        anchor = ImagePoint(0, 0)
        neighbors = [ImagePoint(1, 1), ImagePoint(2, 2), ImagePoint(3, 3), ImagePoint(-1, -1), ImagePoint(1, -3)]
        line = estimate_local_line(anchor, neighbors)
        
        assert line.theta == pytest.approx(-math.pi / 4)
        assert line.rho == pytest.approx(0.0, abs=1e-12)
    
    def test_near_horizontal_neighbors_across_the_wrap(self):
        """Angles straddling +/-pi/2 are ordered around their own center."""
        from fiberhough.geometry.points import ImagePoint
        from fiberhough.hough.local_line import estimate_local_line
        
        anchor = ImagePoint(0, 0)
        neighbors = [
            ImagePoint(10, 1), ImagePoint(-10, 1),
            ImagePoint(20, 1), ImagePoint(-20, 1),
            ImagePoint(30, 0),
        ]
        line = estimate_local_line(anchor, neighbors)
        
        # a linear median over the raw angles would return about -1.47
        assert line.theta == pytest.approx(-math.pi / 2)
    
    def test_anchor_lies_on_estimated_line(self):
        """Rho is deduced from the anchor, which is therefore on the line."""
        from fiberhough.geometry.points import ImagePoint
        from fiberhough.hough.local_line import estimate_local_line
        
        anchor = ImagePoint(12, -5)
        line = estimate_local_line(anchor, [ImagePoint(14, -1), ImagePoint(10, -9), ImagePoint(15, 0)])
        
        assert line.offset_of(anchor) == pytest.approx(line.rho)
        assert -math.pi / 2 <= line.theta < math.pi / 2
    
    def test_perpendicular_neighbors_do_not_crash(self):
        """A vanishing resultant still yields one of the neighbor angles."""
        from fiberhough.geometry.points import ImagePoint
        from fiberhough.hough.local_line import estimate_local_line
        
        line = estimate_local_line(ImagePoint(0, 0), [ImagePoint(0, 5), ImagePoint(5, 0)])
        
        assert line.theta in (0.0, -math.pi / 2)


class TestPairwiseAngles:
    """Tests for the vectorized pairwise angles."""
    
    def test_matches_scalar_pairwise_angle(self):
        """Array angles agree with the two-point rule, special cases exactly."""
        import numpy as np
        
        from fiberhough.geometry.points import ImagePoint, pairwise_angle
        from fiberhough.hough.local_line import pairwise_angles
        
        anchor = ImagePoint(2, -3)
        others = [ImagePoint(2, 9), ImagePoint(-7, -3), ImagePoint(5, 1), ImagePoint(-4, 8), ImagePoint(11, -20)]
        
        angles = pairwise_angles(anchor, np.array(others, dtype=np.float64))
        
        assert angles[0] == 0.0
        assert angles[1] == -math.pi / 2
        for angle, other in zip(angles, others):
            assert angle == pytest.approx(pairwise_angle(anchor, other), abs=1e-15)
    
    def test_array_neighborhood(self):
        """An (n, 2) array and a list of points give the same estimate."""
        import numpy as np
        
        from fiberhough.geometry.points import ImagePoint
        from fiberhough.hough.local_line import estimate_local_line
        
        anchor = ImagePoint(12, -5)
        neighbors = [ImagePoint(14, -1), ImagePoint(10, -9), ImagePoint(15, 0), ImagePoint(9, -12)]
        
        from_list = estimate_local_line(anchor, neighbors)
        from_array = estimate_local_line(anchor, np.array(neighbors, dtype=np.float64))
        
        assert from_list == from_array
        assert estimate_local_line(anchor, np.empty((0, 2))) is None
