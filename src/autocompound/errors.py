"""Exception taxonomy for the auto-compounder engine.

Every engine error derives from CompounderError and, where one fits, from the
closest builtin so callers can catch either.
"""


class CompounderError(Exception):
    """Base class for all engine errors."""


class InvalidArgument(CompounderError, ValueError):
    """A caller-supplied value violates an invariant."""


class Unauthorized(CompounderError, PermissionError):
    """Sender is not the account owner or not the admin."""


class NotInitialized(CompounderError, RuntimeError):
    """Operation attempted before initialize()."""


class AlreadyInitialized(CompounderError, RuntimeError):
    """initialize() called twice."""


class Paused(CompounderError, RuntimeError):
    """Mutating call attempted while compounding is paused."""


class NotEligible(CompounderError):
    """Compound preconditions (enabled, timing, threshold) not met."""

    def __init__(self, account: str, reason: str, detail: str = None):
        self.account = account
        self.reason = reason
        message = f"Account {account!r} not eligible for compound: {reason}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class CostExceeded(NotEligible):
    """Operational cost estimate exceeds the account's cap at execution time."""

    def __init__(self, account: str, estimated_cost: int, max_cost: int):
        self.estimated_cost = estimated_cost
        self.max_cost = max_cost
        super().__init__(
            account,
            "cost_exceeded",
            f"estimated cost {estimated_cost} > cap {max_cost}",
        )


class ArithmeticOverflow(CompounderError, OverflowError):
    """An intermediate or result left the supported integer width."""
