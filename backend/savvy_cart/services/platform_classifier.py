"""
Platform classification.

Maps the raw platform names the aggregator returns ("BlinkIt", "Swiggy",
"Big Basket") onto the closed PlatformId enumeration. This is the only
place raw platform strings are interpreted.
"""

import difflib
import logging
from typing import Dict, Optional

from savvy_cart.models.platform import PlatformId
from savvy_cart.utils.constants import PLATFORM_ALIASES

logger = logging.getLogger(__name__)

# Close-match cutoff for names missing from the alias table
_NEAREST_MATCH_CUTOFF = 0.75


def _lookup_keys() -> Dict[str, PlatformId]:
    keys = dict(PLATFORM_ALIASES)
    for platform in PlatformId:
        keys.setdefault(platform.value.lower(), platform)
    return keys


_KEYS = _lookup_keys()


def classify(raw_platform_name: Optional[str]) -> Optional[PlatformId]:
    """
    Resolve a raw platform name to a PlatformId.

    Lookup is case-insensitive against the alias table and the canonical
    names. Unknown names resolve to the nearest known name when one is
    close enough; otherwise None is returned and the caller drops the
    product.

    Args:
        raw_platform_name: Platform name as returned by the aggregator

    Returns:
        Optional[PlatformId]: The canonical platform, or None if unrecognized

    Example:
        >>> classify("BLINKIT")
        <PlatformId.BLINKIT: 'Blinkit'>
    """
    if not raw_platform_name or not raw_platform_name.strip():
        return None

    key = " ".join(raw_platform_name.lower().split())
    platform = _KEYS.get(key)
    if platform is not None:
        return platform

    # Only spelling slips are corrected: an extra or missing word ("BigBasket Now")
    # may name a different platform.
    word_count = len(key.split())
    same_shape = [k for k in _KEYS if len(k.split()) == word_count]
    nearest = difflib.get_close_matches(key, same_shape, n=1, cutoff=_NEAREST_MATCH_CUTOFF)
    if nearest:
        platform = _KEYS[nearest[0]]
        logger.warning(f"Platform '{raw_platform_name}' resolved to nearest match {platform}")
        return platform

    logger.warning(f"Unrecognized platform '{raw_platform_name}'")
    return None
