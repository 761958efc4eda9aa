"""
Configuration management for fiber detection.

Loads YAML configuration with sensible defaults for every stage. The
detection defaults are the ones a user starts from on a typical
fluorescence fiber image.
"""

import os
from dataclasses import asdict, dataclass, field

import yaml


@dataclass
class DetectionConfig:
    """Parameters of the detection pipeline proper."""
    number_of_samples: int = 1000
    local_window_half_size: int = 25  # pixels
    angular_sensitivity: float = 2.5  # degrees, bandwidth on theta
    thickness_sensitivity: float = 5.0  # pixels, bandwidth on rho
    selection_sensitivity: float = 0.33  # in (0, 1)
    max_segment_gap: float = 30.0
    min_segment_length: float = 50.0
    width_tolerance: float = 1.0


@dataclass
class MeanShiftConfig:
    """Configuration for mode seeking in Hough space."""
    kernel: str = "gaussian"  # "gaussian", "epanechnikov" or "uniform"
    tolerance: float = 1e-10  # squared displacement
    max_iterations: int = 1000
    merge_epsilon: float = 1e-2


@dataclass
class SamplingConfig:
    """Randomness and worker pool settings."""
    seed: int = None
    max_workers: int = None


@dataclass
class TracingConfig:
    """Configuration for runtime tracing."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False


@dataclass
class PipelineConfig:
    """Complete pipeline configuration."""
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    mean_shift: MeanShiftConfig = field(default_factory=MeanShiftConfig)
    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)


SECTIONS = ("detection", "mean_shift", "sampling", "tracing")


def load_config(config_path=None):
    """
    Load configuration from YAML file.
    
    Falls back to defaults for any missing values.
    """
    config = PipelineConfig()
    
    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}
        
        config = _merge_config(config, yaml_data)
    
    return config


def _merge_config(config, yaml_data):
    """Merge YAML data into config dataclass, ignoring unknown keys."""
    for section in SECTIONS:
        values = yaml_data.get(section)
        if not isinstance(values, dict):
            continue
        target = getattr(config, section)
        for key, value in values.items():
            if hasattr(target, key):
                setattr(target, key, value)
    
    return config


def save_default_config(path):
    """Save default configuration to YAML file for reference."""
    config = PipelineConfig()
    
    yaml_data = {section: asdict(getattr(config, section)) for section in SECTIONS}
    # file handles are runtime-only
    yaml_data["tracing"].pop("file_path")
    
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(yaml_data, f, default_flow_style=False, sort_keys=False)
