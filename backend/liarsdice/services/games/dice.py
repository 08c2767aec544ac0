import random
from typing import List, Optional

DIE_FACES = 6


def roll(count: int, rng: Optional[random.Random] = None) -> List[int]:
    """Roll ``count`` six-sided dice and return them sorted ascending.

    A count of zero yields an empty hand.
    """
    if count < 0:
        raise ValueError(f"cannot roll a negative number of dice: {count}")
    rng = rng or random
    return sorted(rng.randint(1, DIE_FACES) for _ in range(count))


def count_matches(hands, face: int) -> int:
    """Count dice showing ``face`` across all hands, with 1s counted as wild."""
    return sum(1 for hand in hands for d in hand if d == face or d == 1)
