"""Pytest fixtures for fiber detection tests."""

import cv2
import numpy as np
import pytest


@pytest.fixture
def blank_raster():
    """A 16x16 raster without any foreground."""
    return np.zeros((16, 16), dtype=np.uint8)


@pytest.fixture
def three_pixel_raster(blank_raster):
    """Three isolated foreground pixels at (8,1), (13,10) and (2,13)."""
    raster = blank_raster.copy()
    for x, y in [(8, 1), (13, 10), (2, 13)]:
        raster[y, x] = 1
    return raster


@pytest.fixture
def gapped_line_raster():
    """A horizontal skeleton line at y=50 with a 20 pixel hole in the middle."""
    raster = np.zeros((100, 100), dtype=np.uint8)
    raster[50, 10:40] = 255
    raster[50, 60:90] = 255
    return raster


@pytest.fixture
def diagonal_line_raster():
    """A one pixel wide oblique line, as a skeletonizer would output."""
    raster = np.zeros((200, 200), dtype=np.uint8)
    cv2.line(raster, (20, 30), (180, 150), 255, 1)
    return raster


@pytest.fixture
def default_config():
    """Create default pipeline configuration."""
    from fiberhough.config import PipelineConfig
    return PipelineConfig()


@pytest.fixture
def pool():
    """A small private worker pool, closed after the test."""
    from fiberhough.parallel import WorkerPool
    
    with WorkerPool(max_workers=2) as worker_pool:
        yield worker_pool
