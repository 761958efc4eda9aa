"""
Fiber detection pipeline orchestrator.

Runs the stages in order on a binary skeleton raster:
candidate generation, peak selection in Hough space, segment building.
Parameters are validated before any computation starts.
"""

import numbers
from dataclasses import asdict

import numpy as np

from fiberhough.clustering.kernels import KERNELS, get_kernel
from fiberhough.config import PipelineConfig, load_config
from fiberhough.errors import InvalidParameterError
from fiberhough.geometry.foreground import Roi, get_foreground_points
from fiberhough.geometry.points import center_point_of_image
from fiberhough.hough.candidates import build_hough_space
from fiberhough.hough.selection import select_peaks
from fiberhough.models import DetectionResult, HoughLine
from fiberhough.parallel import configure_pool
from fiberhough.segments.build import build_segments
from fiberhough.tracer import get_tracer, trace


def _is_int(value):
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _is_number(value):
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _require_positive(name, value):
    if not _is_number(value) or not value > 0:
        raise InvalidParameterError(name, f"must be greater than zero, got {value!r}")


def validate_parameters(config, raster=None, roi=None):
    """
    Check every parameter against its domain.
    
    Raises InvalidParameterError naming the first offending parameter.
    """
    detection = config.detection
    
    if not _is_int(detection.number_of_samples) or detection.number_of_samples < 1:
        raise InvalidParameterError(
            "number_of_samples", f"must be a positive integer, got {detection.number_of_samples!r}"
        )
    if not _is_int(detection.local_window_half_size) or detection.local_window_half_size < 2:
        raise InvalidParameterError(
            "local_window_half_size", f"must be an integer of at least 2 pixels, got {detection.local_window_half_size!r}"
        )
    _require_positive("angular_sensitivity", detection.angular_sensitivity)
    _require_positive("thickness_sensitivity", detection.thickness_sensitivity)
    
    sensitivity = detection.selection_sensitivity
    if not _is_number(sensitivity) or not 0.0 < sensitivity < 1.0:
        raise InvalidParameterError(
            "selection_sensitivity", f"must lie strictly between 0 and 1, got {sensitivity!r}"
        )
    
    _require_positive("max_segment_gap", detection.max_segment_gap)
    _require_positive("min_segment_length", detection.min_segment_length)
    _require_positive("width_tolerance", detection.width_tolerance)
    
    mean_shift = config.mean_shift
    if str(mean_shift.kernel).lower() not in KERNELS:
        raise InvalidParameterError("kernel", f"must be one of {sorted(KERNELS)}, got {mean_shift.kernel!r}")
    _require_positive("tolerance", mean_shift.tolerance)
    _require_positive("merge_epsilon", mean_shift.merge_epsilon)
    if not _is_int(mean_shift.max_iterations) or mean_shift.max_iterations < 1:
        raise InvalidParameterError(
            "max_iterations", f"must be a positive integer, got {mean_shift.max_iterations!r}"
        )
    
    if raster is not None:
        if raster.ndim != 2:
            raise InvalidParameterError("raster", f"must be a 2-D array, got shape {raster.shape}")
        
        if roi is not None:
            height, width = raster.shape
            if roi.width <= 0 or roi.height <= 0:
                raise InvalidParameterError("roi", f"must not be empty, got {tuple(roi)}")
            if roi.x < 0 or roi.y < 0 or roi.x + roi.width > width or roi.y + roi.height > height:
                raise InvalidParameterError(
                    "roi", f"{tuple(roi)} does not fit in a {width}x{height} raster"
                )


@trace(label="run_detection")
def run_detection(raster, roi=None, config=None, config_path=None, pool=None):
    """
    Detect straight fiber segments in a binary skeleton raster.
    
    Args:
        raster: 2-D array, foreground where > 0
        roi: Roi restricting eligible pixels (whole raster when None)
        config: PipelineConfig (optional)
        config_path: path to YAML config file (optional)
        pool: WorkerPool (built from the sampling config when None)
    
    Returns:
        DetectionResult
    """
    tracer = get_tracer()
    
    if config is None:
        config = load_config(config_path)
    
    raster = np.asarray(raster)
    validate_parameters(config, raster, roi)
    
    if roi is None:
        roi = Roi.full(raster)
    
    detection = config.detection
    mean_shift = config.mean_shift
    pool = pool or configure_pool(config.sampling.max_workers)
    
    origin = center_point_of_image(raster.shape[1], raster.shape[0])
    foreground_count = len(get_foreground_points(raster, roi, origin))
    tracer.event(f"Detecting in {raster.shape[1]}x{raster.shape[0]} raster", roi=roi, foreground=foreground_count)
    
    with tracer.span("stage1_candidates", module="pipeline"):
        hough_points = build_hough_space(
            raster, roi,
            detection.number_of_samples,
            detection.local_window_half_size,
            origin=origin,
            rng=config.sampling.seed,
            pool=pool,
        )
    
    with tracer.span("stage2_selection", module="pipeline"):
        selected = select_peaks(
            hough_points,
            detection.selection_sensitivity,
            detection.angular_sensitivity,
            detection.thickness_sensitivity,
            kernel=get_kernel(mean_shift.kernel),
            tolerance=mean_shift.tolerance,
            max_iterations=mean_shift.max_iterations,
            merge_epsilon=mean_shift.merge_epsilon,
            pool=pool,
            with_counts=True,
        )
    
    with tracer.span("stage3_segments", module="pipeline"):
        segments = build_segments(
            raster, roi,
            [line for line, _ in selected],
            detection.max_segment_gap,
            detection.min_segment_length,
            detection.width_tolerance,
            origin=origin,
            pool=pool,
        )
    
    return DetectionResult(
        segments=segments,
        selected_lines=[
            HoughLine(theta=line.theta, rho=line.rho, population=count)
            for line, count in selected
        ],
        hough_point_count=len(hough_points),
        foreground_count=foreground_count,
        origin=[origin.x, origin.y],
        parameters=asdict(detection),
    )


def detect_fibers(raster, roi=None, config=None, pool=None):
    """Detect fibers and return only the list of Segment."""
    return run_detection(raster, roi=roi, config=config, pool=pool).segments


def make_config(**detection_params):
    """Default PipelineConfig with some detection parameters overridden."""
    config = PipelineConfig()
    for key, value in detection_params.items():
        if not hasattr(config.detection, key):
            raise InvalidParameterError(key, "unknown detection parameter")
        setattr(config.detection, key, value)
    return config
