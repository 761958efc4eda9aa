"""
Skeleton raster loading for the command line.

The detection core works on in-memory arrays; this module only reads an
already skeletonized image from disk. No enhancement is applied: any
pixel value above zero is foreground.
"""

import os

import cv2
import numpy as np

from fiberhough.tracer import get_tracer, trace


SUPPORTED_EXTENSIONS = [".png", ".tif", ".tiff", ".bmp", ".pgm"]


@trace(label="load_raster")
def load_raster(path):
    """
    Load a skeleton image from disk as a 2-D uint8 array.
    
    Multi-channel images are reduced to their per-pixel maximum so that
    a skeleton drawn in any channel is kept.
    
    Raises FileNotFoundError if path does not exist.
    Raises ValueError if the file is not a readable image.
    """
    tracer = get_tracer()
    
    if not os.path.exists(path):
        raise FileNotFoundError(f"Image not found: {path}")
    
    ext = os.path.splitext(path)[1].lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise ValueError(f"Unsupported image format: {path}")
    
    img = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise ValueError(f"Failed to load image: {path}")
    
    if img.ndim == 3:
        img = img.max(axis=2)
    
    raster = (img > 0).astype(np.uint8)
    
    tracer.event(f"Loaded raster: {raster.shape[1]}x{raster.shape[0]}, foreground={int(raster.sum())}")
    return raster
