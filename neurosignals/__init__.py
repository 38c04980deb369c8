# neurosignals/__init__.py

"""
neurosignals: spectral, statistical and information-theoretic analytics for
multichannel, epoched biosignal recordings, with a per-recording component
store that caches derived artifacts and logs how they were produced.
"""

from .version import __version__
from .core.errors import NeurosignalsError, PreconditionError, ConfigurationError
from .core.recording import Recording, ChannelKind, Component, ComponentStore

__all__ = [
    "__version__",
    "NeurosignalsError",
    "PreconditionError",
    "ConfigurationError",
    "Recording",
    "ChannelKind",
    "Component",
    "ComponentStore",
]
