"""Error taxonomy shared by the round engine and the socket gateway."""


class LiarsDiceError(Exception):
    """Base class for all game errors."""


class ValidationError(LiarsDiceError):
    """Bad input at the boundary (blank username or room, duplicate name).

    Reported back to the caller; never reaches the round engine.
    """


class IllegalAction(LiarsDiceError):
    """An action that has no effect: out of turn, bid too low, no bid to challenge.

    The gateway drops these silently.
    """


class InvariantViolation(LiarsDiceError):
    """Room state the engine cannot continue from, e.g. no player holds dice.

    The gateway logs it and force-resets the affected room.
    """
