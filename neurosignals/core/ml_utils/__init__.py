# neurosignals/core/ml_utils/__init__.py

"""
Machine-learning helpers (scikit-learn wrappers) used by the analytics.
"""

from .scaling import scale_channels, unscale_channels

__all__ = ["scale_channels", "unscale_channels"]
