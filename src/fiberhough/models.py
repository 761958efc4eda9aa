"""
Pydantic models for detection outputs.

Segments are what collaborators consume (rendering, ROI storage,
geometric analysis); the full DetectionResult also carries the
selected lines and the sizes of the intermediate clouds for inspection.
"""

import math
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class Segment(BaseModel):
    """A detected straight fiber fragment, endpoints in raster coordinates."""
    x1: int
    y1: int
    x2: int
    y2: int
    
    model_config = ConfigDict(extra="forbid", frozen=True)
    
    @classmethod
    def from_points(cls, p1, p2):
        return cls(x1=int(p1.x), y1=int(p1.y), x2=int(p2.x), y2=int(p2.y))
    
    @property
    def length(self):
        return math.hypot(self.x2 - self.x1, self.y2 - self.y1)
    
    def as_tuple(self):
        return (self.x1, self.y1, self.x2, self.y2)


class HoughLine(BaseModel):
    """A selected line in Hesse normal form with its basin population."""
    theta: float = Field(..., gt=-math.pi / 2, lt=math.pi / 2)
    rho: float
    population: int = Field(default=0, ge=0)
    
    model_config = ConfigDict(extra="forbid")


class DetectionResult(BaseModel):
    """Everything a detection run produced."""
    segments: List[Segment] = Field(default_factory=list)
    selected_lines: List[HoughLine] = Field(default_factory=list)
    hough_point_count: int = 0
    foreground_count: int = 0
    origin: List[int] = Field(default_factory=lambda: [0, 0])
    parameters: Dict[str, Any] = Field(default_factory=dict)
    
    model_config = ConfigDict(extra="forbid")
    
    @property
    def is_empty(self):
        """True when no segment was found (a legitimate outcome)."""
        return not self.segments
