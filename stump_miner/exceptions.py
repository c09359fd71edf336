"""
Error types raised by the stump miner
"""


class MinerError(Exception):
    """Base class for all miner errors"""


class InvalidInputError(MinerError, ValueError):
    """Rejected input: raised before the search starts"""


class ConsistencyViolation(MinerError):
    """
    Support recomputed by the isomorphism oracle differs from the
    support a stump carries from the search engine.

    Fatal: results of the run must not be used.
    """

    def __init__(self, stump, reported: int, observed: int):
        self.stump = stump
        self.reported = reported
        self.observed = observed
        super().__init__(
            f"Support mismatch for pattern {stump.pattern.describe()}: "
            f"reported={reported}, observed={observed}"
        )
