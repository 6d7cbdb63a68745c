"""Game error taxonomy."""


class RackoError(Exception):
    """Base class for game errors. None of them is fatal."""


class IllegalMove(RackoError):
    """Move rejected: wrong turn, nothing held, forced discard, bad index, round over."""


class PileExhausted(RackoError):
    """Neither the draw pile nor the discard pile can supply a card."""


class RoomFull(RackoError):
    """Join attempted after every seat was filled."""


class ConnectivityFailure(RackoError):
    """Publishing or polling a snapshot failed."""
