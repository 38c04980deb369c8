# neurosignals/core/errors.py

"""
Exception hierarchy of the analytics engine.

Explicit channel/epoch indices out of range raise the built-in IndexError and
invalid numeric parameters raise ValueError; the classes below cover the
engine-specific failure kinds.
"""


class NeurosignalsError(Exception):
    """Base class for neurosignals errors."""
    pass


class PreconditionError(NeurosignalsError):
    """The recording contains non-physiological channels where only physiological ones are allowed."""
    pass


class ConfigurationError(NeurosignalsError, ValueError):
    """Invalid symbolic argument: unknown band, pick tag, method or component, or missing labels."""
    pass
