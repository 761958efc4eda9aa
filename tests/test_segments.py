"""Tests for segment assembly."""

import math

import numpy as np
import pytest


HORIZONTAL = (-math.pi / 2, 0.0)  # y == 50 with the origin at (50, 50)


class TestBuildSegments:
    """Tests for build_segments."""
    
    def test_gap_below_limit_is_bridged(self, gapped_line_raster, pool):
        """A hole shorter than the maximum gap keeps one segment."""
        from fiberhough.geometry.points import HoughPoint
        from fiberhough.segments.build import build_segments
        
        segments = build_segments(gapped_line_raster, None, [HoughPoint(*HORIZONTAL)], 30.0, 20.0, 1.0, pool=pool)
        
        assert [s.as_tuple() for s in segments] == [(10, 50, 89, 50)]
    
    def test_gap_above_limit_splits(self, gapped_line_raster, pool):
        """A hole longer than the maximum gap splits the line."""
        from fiberhough.geometry.points import HoughPoint
        from fiberhough.segments.build import build_segments
        
        segments = build_segments(gapped_line_raster, None, [HoughPoint(*HORIZONTAL)], 10.0, 20.0, 1.0, pool=pool)
        
        assert [s.as_tuple() for s in segments] == [(10, 50, 39, 50), (60, 50, 89, 50)]
    
    def test_min_length_boundary(self, gapped_line_raster, pool):
        """A run exactly min_length long is kept, a longer minimum drops it."""
        from fiberhough.geometry.points import HoughPoint
        from fiberhough.segments.build import build_segments
        
        line = [HoughPoint(*HORIZONTAL)]
        
        kept = build_segments(gapped_line_raster, None, line, 10.0, 29.0, 1.0, pool=pool)
        dropped = build_segments(gapped_line_raster, None, line, 10.0, 29.5, 1.0, pool=pool)
        
        assert len(kept) == 2
        for segment in kept:
            assert segment.length >= 29.0
        assert dropped == []
    
    def test_vertical_line(self, pool):
        """Vertical lines are ordered along y."""
        from fiberhough.geometry.points import HoughPoint
        from fiberhough.segments.build import build_segments
        
        raster = np.zeros((100, 100), dtype=np.uint8)
        raster[5:61, 20] = 1
        
        segments = build_segments(raster, None, [HoughPoint(0.0, -30.0)], 5.0, 10.0, 0.5, pool=pool)
        
        assert [s.as_tuple() for s in segments] == [(20, 5, 20, 60)]
    
    def test_width_tolerance(self, pool):
        """Pixels one row off the line are associated only within the tolerance."""
        from fiberhough.geometry.points import HoughPoint
        from fiberhough.segments.build import build_segments
        
        raster = np.zeros((100, 100), dtype=np.uint8)
        raster[50, 10:30] = 1
        raster[51, 30:60] = 1
        line = [HoughPoint(*HORIZONTAL)]
        
        tight = build_segments(raster, None, line, 5.0, 10.0, 0.5, pool=pool)
        loose = build_segments(raster, None, line, 5.0, 10.0, 1.5, pool=pool)
        
        assert [s.as_tuple() for s in tight] == [(10, 50, 29, 50)]
        assert [s.as_tuple() for s in loose] == [(10, 50, 59, 51)]
    
    def test_single_point_gives_nothing(self, pool):
        """One associated pixel cannot make a segment."""
        from fiberhough.geometry.points import HoughPoint
        from fiberhough.segments.build import build_segments
        
        raster = np.zeros((100, 100), dtype=np.uint8)
        raster[50, 70] = 1
        
        assert build_segments(raster, None, [HoughPoint(*HORIZONTAL)], 5.0, 0.5, 1.0, pool=pool) == []
    
    def test_lines_are_not_deduplicated(self, gapped_line_raster, pool):
        """The same line selected twice yields its segments twice."""
        from fiberhough.geometry.points import HoughPoint
        from fiberhough.segments.build import build_segments
        
        lines = [HoughPoint(*HORIZONTAL), HoughPoint(*HORIZONTAL)]
        
        segments = build_segments(gapped_line_raster, None, lines, 30.0, 20.0, 1.0, pool=pool)
        
        assert len(segments) == 2
        assert segments[0] == segments[1]
    
    def test_no_lines(self, gapped_line_raster, pool):
        """Without a selected line there is nothing to build."""
        from fiberhough.segments.build import build_segments
        
        assert build_segments(gapped_line_raster, None, [], 30.0, 20.0, 1.0, pool=pool) == []


class TestSegmentHelpers:
    """Tests for the per-line helpers."""
    
    def test_split_on_gaps(self):
        """Steps strictly above the maximum gap cut the sequence."""
        from fiberhough.geometry.points import ImagePoint
        from fiberhough.segments.build import split_on_gaps
        
        points = [ImagePoint(0, 0), ImagePoint(2, 0), ImagePoint(5, 0), ImagePoint(9, 0)]
        
        runs = split_on_gaps(points, 3.0)
        
        assert runs == [points[:3], points[3:]]
    
    def test_sort_along_major_axis(self):
        """The axis with the larger extent drives the order."""
        from fiberhough.geometry.points import ImagePoint
        from fiberhough.segments.build import sort_along_major_axis
        
        steep = [ImagePoint(1, 9), ImagePoint(0, 0), ImagePoint(2, 4)]
        
        assert sort_along_major_axis(steep) == [ImagePoint(0, 0), ImagePoint(2, 4), ImagePoint(1, 9)]
