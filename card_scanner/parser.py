"""Turn recognized text fragments into a checksum-valid card number."""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .checksum import CARD_NUMBER_LENGTH, DIGITS, is_valid
from .config import MAX_CANDIDATES
from .entities import RawTextFragment

logger = logging.getLogger(__name__)

GROUP_LENGTH = 4
GROUP_COUNT = CARD_NUMBER_LENGTH // GROUP_LENGTH


def digit_string(fragment: RawTextFragment, max_candidates: int = MAX_CANDIDATES) -> Optional[str]:
    """First digit-only reading among the fragment's top candidates, trimmed."""
    for candidate in fragment.candidates[:max_candidates]:
        text = candidate.strip()
        if text and DIGITS.issuperset(text):
            return text
    return None


def parse(fragments: Iterable[RawTextFragment], max_candidates: int = MAX_CANDIDATES) -> Optional[str]:
    """Assemble a 16-digit number from one full fragment or four 4-digit groups.

    Returns None when the text does not have either shape or the result fails
    the mod-10 check. Never raises.
    """
    full = None
    quads: List[str] = []

    for fragment in fragments:
        text = digit_string(fragment, max_candidates)
        if text is None:
            continue
        if len(text) == CARD_NUMBER_LENGTH and full is None:
            full = text
        elif len(text) == GROUP_LENGTH:
            quads.append(text)

    if full is not None:
        number = full
    elif len(quads) == GROUP_COUNT:
        number = ''.join(quads)
    else:
        logger.debug("No card number shape in fragments (quads=%d)", len(quads))
        return None

    if not is_valid(number):
        logger.debug("Candidate of %d digits failed checksum", len(number))
        return None
    return number
