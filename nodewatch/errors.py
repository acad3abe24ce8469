"""Exception types raised while evaluating a watchdog cycle.

None of these are fatal to the process.  Each one ends the current cycle
and the next scheduled cycle starts from scratch.
"""


class WatchdogError(Exception):
    """Base class for cycle-terminating failures."""


class TransportError(WatchdogError):
    """The endpoint could not be reached (connection error, timeout, …)."""

    def __init__(self, url, reason):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class ExtractionError(WatchdogError):
    """The endpoint answered but the index field could not be read."""


class IndicesUnavailable(WatchdogError):
    """Either the local or the reference index could not be obtained."""

    def __init__(self, side, cause):
        super().__init__(f"{side} index unavailable: {cause}")
        self.side = side
        self.cause = cause
