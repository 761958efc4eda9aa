"""
Exception types raised by the fiber detection pipeline.

Degenerate anchors and empty rasters are not errors: they degrade to
empty results. Only bad parameters and failing worker tasks raise.
"""


class FiberHoughError(Exception):
    """Base class for all pipeline errors."""


class InvalidParameterError(FiberHoughError, ValueError):
    """A numeric input is outside of its documented domain."""
    
    def __init__(self, parameter, reason):
        self.parameter = parameter
        self.reason = reason
        super().__init__(f"Invalid parameter '{parameter}': {reason}")


class ParallelTaskError(FiberHoughError, RuntimeError):
    """A worker task failed; the whole stage is aborted."""
    
    def __init__(self, stage, index, cause):
        self.stage = stage
        self.index = index
        self.cause = cause
        super().__init__(
            f"Stage '{stage}' failed in task {index}: {type(cause).__name__}: {cause}"
        )
