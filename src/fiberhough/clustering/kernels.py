"""
Radially symmetric kernels for density estimation.

All methods accept a scalar or a numpy array and evaluate element-wise.
Kernels with finite support report it through max_domain so callers can
skip points that cannot contribute.
"""

import math

import numpy as np


class Kernel:
    """Base class for kernels of a scalar argument u."""
    
    name = "kernel"
    norm_const = 1.0
    max_domain = None  # no finite support
    
    def evaluate(self, u):
        raise NotImplementedError
    
    def evaluate_squared(self, u2):
        """Kernel value at u given u squared."""
        return self.evaluate(np.sqrt(u2))
    
    def derivative(self, u):
        raise NotImplementedError
    
    @property
    def has_finite_support(self):
        return self.max_domain is not None
    
    def __repr__(self):
        return f"{type(self).__name__}()"


class GaussianKernel(Kernel):
    """Standard normal profile exp(-u^2 / 2)."""
    
    name = "gaussian"
    norm_const = 1.0 / math.sqrt(2.0 * math.pi)
    
    def evaluate(self, u):
        return self.evaluate_squared(np.multiply(u, u))
    
    def evaluate_squared(self, u2):
        return np.exp(-0.5 * np.asarray(u2, dtype=np.float64))
    
    def derivative(self, u):
        return -np.asarray(u, dtype=np.float64) * self.evaluate(u)


class EpanechnikovKernel(Kernel):
    """Parabolic profile 1 - u^2 on |u| <= 1."""
    
    name = "epanechnikov"
    norm_const = 0.75
    max_domain = 1.0
    
    def evaluate(self, u):
        u = np.asarray(u, dtype=np.float64)
        return np.where(np.abs(u) <= 1.0, 1.0 - u * u, 0.0)
    
    def evaluate_squared(self, u2):
        u2 = np.asarray(u2, dtype=np.float64)
        return np.where(u2 <= 1.0, 1.0 - u2, 0.0)
    
    def derivative(self, u):
        u = np.asarray(u, dtype=np.float64)
        return np.where(np.abs(u) <= 1.0, -2.0 * u, 0.0)


class UniformKernel(Kernel):
    """Flat profile on |u| <= 1."""
    
    name = "uniform"
    norm_const = 0.5
    max_domain = 1.0
    
    def evaluate(self, u):
        u = np.asarray(u, dtype=np.float64)
        return np.where(np.abs(u) <= 1.0, 1.0, 0.0)
    
    def evaluate_squared(self, u2):
        u2 = np.asarray(u2, dtype=np.float64)
        return np.where(u2 <= 1.0, 1.0, 0.0)
    
    def derivative(self, u):
        return np.zeros_like(np.asarray(u, dtype=np.float64))


KERNELS = {
    GaussianKernel.name: GaussianKernel,
    EpanechnikovKernel.name: EpanechnikovKernel,
    UniformKernel.name: UniformKernel,
}


def get_kernel(name):
    """Instantiate a kernel by name."""
    try:
        return KERNELS[name.lower()]()
    except KeyError:
        raise ValueError(f"Unknown kernel '{name}', expected one of {sorted(KERNELS)}") from None
