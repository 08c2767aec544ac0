"""Bid legality.

Bids are ordered by (quantity, face). Face 1 is wild and can never be bid.
"""
from typing import Optional

from liarsdice.models import Bid

MIN_FACE = 2
MAX_FACE = 6


def is_legal(proposed: Bid, current: Optional[Bid], dice_in_play: int) -> bool:
    """Return True if ``proposed`` may replace ``current``.

    ``dice_in_play`` caps the quantity; a claim about more dice than exist
    on the table is never legal.
    """
    if not MIN_FACE <= proposed.face <= MAX_FACE:
        return False
    if proposed.quantity < 1 or proposed.quantity > dice_in_play:
        return False
    if current is None:
        return True
    if proposed.quantity > current.quantity:
        return True
    return proposed.quantity == current.quantity and proposed.face > current.face
