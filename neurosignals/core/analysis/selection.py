# neurosignals/core/analysis/selection.py

"""
Electrode selection by 10-20 region/hemisphere tags and time <-> sample conversion.
"""

import logging
import re
from enum import Enum
from typing import Iterable, List, Union

import numpy as np

from neurosignals.core.errors import ConfigurationError
from neurosignals.core.recording import Recording

logger = logging.getLogger(__name__)


class Region(str, Enum):
    """Scalp regions and hemispheres understood by `pick`."""
    CENTRAL = "central"
    FRONTAL = "frontal"
    TEMPORAL = "temporal"
    PARIETAL = "parietal"
    OCCIPITAL = "occipital"
    LEFT = "left"
    RIGHT = "right"


# Characters a label must contain to belong to a region
REGION_CHARACTERS = {
    Region.CENTRAL: "z",
    Region.FRONTAL: "F",
    Region.TEMPORAL: "T",
    Region.PARIETAL: "P",
    Region.OCCIPITAL: "O",
    Region.LEFT: "13579",
    Region.RIGHT: "2468",
}

REGION_ALIASES = {
    "c": Region.CENTRAL,
    "f": Region.FRONTAL,
    "t": Region.TEMPORAL,
    "p": Region.PARIETAL,
    "o": Region.OCCIPITAL,
    "l": Region.LEFT,
    "r": Region.RIGHT,
}

_NOT_RIGHT = re.compile(r"[z13579]$")
_NOT_LEFT = re.compile(r"[z02468]$")

RegionSpec = Union[str, Region]


def _resolve_region(tag: RegionSpec) -> Region:
    if isinstance(tag, Region):
        return tag
    if isinstance(tag, str):
        if tag in REGION_ALIASES:
            return REGION_ALIASES[tag]
        try:
            return Region(tag)
        except ValueError:
            pass
    raise ConfigurationError(
        f"Unknown pick tag '{tag}'. Choose one of: {', '.join(r.value for r in Region)} "
        f"or an alias ({', '.join(REGION_ALIASES)})."
    )


def _matching(labels: List[str], region: Region) -> List[int]:
    characters = REGION_CHARACTERS[region]
    return [idx for idx, label in enumerate(labels) if any(c in label for c in characters)]


def pick(rec: Recording, region: Union[RegionSpec, Iterable[RegionSpec]]) -> List[int]:
    """
    0-based indices of the channels whose labels fall in the requested region(s).

    A single tag keeps channels whose label contains any character of the tag.
    Several tags take the union of the per-tag matches; unless both hemispheres
    are requested, 'right' then drops labels ending in 'z' or an odd digit and
    'left' drops labels ending in 'z' or an even digit. Requesting both left
    and right returns the union without hemisphere filtering.

    Raises:
        ConfigurationError: If the recording has no labels or a tag is unknown.

    Example:
        >>> pick(rec, "left")  # labels Fp1, Fp2, Fz, F3, F4, T3, T4
        [0, 3, 5]
    """
    labels = rec.channel_labels
    if not labels:
        raise ConfigurationError("Recording does not contain channel labels.")

    if isinstance(region, (str, Region)):
        return _matching(labels, _resolve_region(region))

    regions = [_resolve_region(tag) for tag in region]
    if not regions:
        raise ConfigurationError("At least one pick tag is required.")
    selected = sorted(set(idx for r in regions for idx in _matching(labels, r)))

    has_left = Region.LEFT in regions
    has_right = Region.RIGHT in regions
    if has_left and has_right:
        return selected

    for r in regions:
        if r is Region.RIGHT:
            selected = [idx for idx in selected if not _NOT_RIGHT.search(labels[idx])]
        elif r is Region.LEFT:
            selected = [idx for idx in selected if not _NOT_LEFT.search(labels[idx])]
    logger.debug(f"Picked channels {selected} for {[r.value for r in regions]}.")
    return selected


# --- Time conversion ---

def t2s(rec: Recording, t: float) -> int:
    """Time in seconds to a 1-based sample number, floor(t * fs) + 1."""
    if t < 0:
        raise ValueError(f"t must be non-negative, got {t}.")
    return int(np.floor(t * rec.sampling_rate)) + 1


def s2t(rec: Recording, s: int) -> float:
    """Sample number to seconds, rounded to 2 decimals."""
    if s < 0:
        raise ValueError(f"s must be non-negative, got {s}.")
    return round(s / rec.sampling_rate, 2)
