class BoundRandError(Exception):
    """Base class for boundrand errors."""


# Caller mistakes, raised at entry before any byte is drawn
class InvalidArgumentError(BoundRandError, TypeError):
    pass


class OutOfRangeError(BoundRandError, ValueError):
    pass


# Raised by the bundled byte sources when they cannot deliver
class SourceError(BoundRandError):
    pass


class SourceExhaustedError(SourceError):
    pass


class ShortFillError(SourceError):
    pass
