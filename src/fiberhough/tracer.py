"""
Runtime tracing for the detection stages.

Stages run inside timed spans; counts (foreground, Hough points, modes,
selected lines, segments) are emitted as events. Disabled by default.
"""

import functools
import json
import sys
import threading
import time
from contextlib import contextmanager
from datetime import datetime

import numpy as np
from pydantic import BaseModel


class TracerConfig:
    """Configuration for the tracer."""
    
    def __init__(self):
        self.enabled = False
        self.level = "INFO"
        self.file_path = None
        self.json_output = False
        self._file_handle = None
    
    def configure(self, enabled=False, level="INFO", file_path=None, json_output=False):
        """Configure tracer settings."""
        self.enabled = enabled
        self.level = level.upper()
        self.file_path = file_path
        self.json_output = json_output
        
        if self._file_handle:
            self._file_handle.close()
            self._file_handle = None
        
        if file_path and enabled:
            self._file_handle = open(file_path, "w", encoding="utf-8")
    
    def close(self):
        """Close file handle if open."""
        if self._file_handle:
            self._file_handle.close()
            self._file_handle = None


class Tracer:
    """
    Hierarchical tracer for structured pipeline logging.
    
    Spans nest per calling thread; worker threads of the parallel stages
    only ever emit events, which are attributed to the span that was
    open when the stage was dispatched.
    """
    
    LEVELS = {"ERROR": 0, "WARN": 1, "INFO": 2, "DEBUG": 3}
    
    def __init__(self):
        self.config = TracerConfig()
        self._depth = 0
        self._span_stack = []
        self._lock = threading.Lock()
    
    def _should_log(self, level):
        """Check if this level should be logged."""
        if not self.config.enabled:
            return False
        return self.LEVELS.get(level, 2) <= self.LEVELS.get(self.config.level, 2)
    
    def _format_timestamp(self):
        """Format current time as HH:MM:SS.mmm."""
        now = datetime.now()
        return now.strftime("%H:%M:%S.") + f"{now.microsecond // 1000:03d}"
    
    def _write(self, level, module, func, message, meta=None):
        """Write a log line."""
        if not self._should_log(level):
            return
        
        timestamp = self._format_timestamp()
        indent = "  " * self._depth
        location = f"{module}:{func}" if func else module
        
        text_line = f"{timestamp} {level:<5} {indent}{location}  {message}"
        
        with self._lock:
            print(text_line, file=sys.stderr)
            
            if self.config._file_handle:
                self.config._file_handle.write(text_line + "\n")
                self.config._file_handle.flush()
            
            if self.config.json_output:
                json_record = {
                    "timestamp": timestamp,
                    "level": level,
                    "depth": self._depth,
                    "module": module,
                    "function": func,
                    "message": message,
                    "meta": {k: summarize(v) for k, v in (meta or {}).items()},
                }
                json_line = json.dumps(json_record)
                print(json_line, file=sys.stderr)
                if self.config._file_handle:
                    self.config._file_handle.write(json_line + "\n")
    
    @contextmanager
    def span(self, name, module="", **meta):
        """
        Context manager for a traced span.
        
        Logs start and end with timing information. A failing span logs
        the exception at ERROR level and re-raises it unchanged.
        """
        if not self.config.enabled:
            yield
            return
        
        start_time = time.perf_counter()
        meta_str = " ".join(f"{k}={summarize(v)}" for k, v in meta.items())
        self._write("INFO", module, name, f"start {meta_str}".strip())
        self._depth += 1
        self._span_stack.append((name, module, start_time))
        
        try:
            yield
        except Exception as e:
            elapsed = (time.perf_counter() - start_time) * 1000
            self._depth -= 1
            self._span_stack.pop()
            self._write("ERROR", module, name, f"failed dt={elapsed:.0f}ms error={type(e).__name__}: {str(e)[:100]}")
            raise
        
        elapsed = (time.perf_counter() - start_time) * 1000
        self._depth -= 1
        self._span_stack.pop()
        self._write("INFO", module, name, f"end ok dt={elapsed:.0f}ms")
    
    def event(self, message, level="INFO", **meta):
        """Log a one-off event within the current span."""
        if not self._should_log(level):
            return
        
        module = ""
        func = ""
        if self._span_stack:
            func, module, _ = self._span_stack[-1]
        
        meta_str = " ".join(f"{k}={summarize(v)}" for k, v in meta.items())
        full_message = f"{message} {meta_str}".strip()
        self._write(level, module, func, full_message, meta)


def summarize(obj, max_len=200):
    """Compact rendering of an event value, at most max_len characters."""
    try:
        result = _summarize_impl(obj)
    except Exception:
        return f"<{type(obj).__name__}>"
    if len(result) > max_len:
        return result[:max_len - 3] + "..."
    return result


def _summarize_impl(obj):
    if obj is None:
        return "None"
    
    if isinstance(obj, np.ndarray):
        shape_str = "x".join(str(s) for s in obj.shape)
        return f"ndarray({obj.dtype},{shape_str})"
    if isinstance(obj, np.generic):
        return str(obj.item())
    
    if isinstance(obj, BaseModel):
        return f"{type(obj).__name__}({len(type(obj).model_fields)} fields)"
    
    # points and ROIs print as their fields
    if isinstance(obj, tuple) and hasattr(obj, "_fields"):
        return repr(obj)
    
    # point clouds and segment lists by size only
    if isinstance(obj, (list, tuple)):
        first = type(obj[0]).__name__ if obj else "-"
        return f"{type(obj).__name__}(len={len(obj)},first={first})"
    
    if isinstance(obj, float):
        return f"{obj:.6g}"
    
    return str(obj)


def trace(label=None):
    """Decorator running the wrapped stage function inside a span."""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if not _tracer.config.enabled:
                return func(*args, **kwargs)
            
            func_module = func.__module__.split(".")[-1] if func.__module__ else ""
            with _tracer.span(label or func.__name__, module=func_module):
                return func(*args, **kwargs)
        
        return wrapper
    return decorator


# Global tracer instance
_tracer = Tracer()


def get_tracer():
    """Get the global tracer instance."""
    return _tracer


def configure_tracer(enabled=False, level="INFO", file_path=None, json_output=False):
    """Configure the global tracer."""
    _tracer.config.configure(
        enabled=enabled,
        level=level,
        file_path=file_path,
        json_output=json_output,
    )
