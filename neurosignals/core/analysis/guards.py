# neurosignals/core/analysis/guards.py

"""
Shared plumbing for the analytics: the physiological-channel precondition,
index validation, the single-epoch output contract and store writes.
"""

import logging
from typing import Any, Dict, Mapping, Union

import numpy as np
from numpy.typing import NDArray

from neurosignals.core.errors import PreconditionError
from neurosignals.core.recording import Component, Recording

logger = logging.getLogger(__name__)


def require_physiological(*recordings: Recording) -> None:
    """Raises PreconditionError unless every channel of every recording is physiological."""
    for rec in recordings:
        n_physiological = sum(1 for kind in rec.channel_kinds if kind.is_physiological)
        if n_physiological != rec.channel_count():
            raise PreconditionError(
                f"Recording contains {rec.channel_count() - n_physiological} non-physiological channel(s); "
                "remove non-eeg channels before processing."
            )


def require_same_layout(rec1: Recording, rec2: Recording) -> None:
    """Raises ValueError unless both recordings share channel, sample and epoch counts."""
    if rec1.signals.shape != rec2.signals.shape:
        raise ValueError(f"Recordings must have the same (channels, samples, epochs) shape, "
                         f"got {rec1.signals.shape} and {rec2.signals.shape}.")


def check_index(index: int, size: int, name: str) -> int:
    """Validates a 0-based ordinal; negative or out-of-range values raise IndexError."""
    if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
        raise IndexError(f"{name} must be an integer, got {index!r}.")
    if index < 0 or index >= size:
        raise IndexError(f"{name} {index} out of range [0, {size - 1}].")
    return int(index)


def squeeze_epochs(result: NDArray) -> NDArray:
    """Drops the trailing epoch axis when it has length 1."""
    if result.ndim > 1 and result.shape[-1] == 1:
        return result[..., 0]
    return result


def _format_value(value: Any) -> str:
    if isinstance(value, Recording):
        return "<recording>"
    if hasattr(value, "value") and isinstance(getattr(value, "value"), str):
        return repr(value.value)
    return repr(value)


def format_invocation(analytic: str, params: Mapping[str, Any]) -> str:
    """Builds a history line such as "band_power!(band='alpha')"."""
    arguments = ", ".join(f"{key}={_format_value(value)}" for key, value in params.items())
    return f"{analytic}!({arguments})"


def store_components(
    rec: Recording,
    analytic: str,
    params: Mapping[str, Any],
    components: Dict[Union[str, Component], Any]
) -> None:
    """Upserts every artifact and appends exactly one history line."""
    for name, value in components.items():
        rec.components.upsert(name, value)
    entry = format_invocation(analytic, params)
    rec.components.record(entry)
    logger.info(f"Stored {', '.join(Component.resolve(n).value for n in components)} via {entry}")
