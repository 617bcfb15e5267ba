"""Errors raised by the evaluation engine.

All of them are local and recoverable: the operation is aborted and the
workspace is left exactly as it was before the call.
"""


class PropDeskError(Exception):
    """Base class for engine errors."""
    pass


class ValidationError(PropDeskError, ValueError):
    """Raised when account-creation input is missing or invalid."""
    pass


class NoActiveAccount(PropDeskError):
    """Raised when an operation has no resolvable target account."""
    pass


class TradeNotFound(PropDeskError, KeyError):
    """Raised when an edit references an unknown trade id."""

    def __init__(self, trade_id: str):
        super().__init__(trade_id)
        self.trade_id = trade_id

    def __str__(self) -> str:
        return f"Trade not found: {self.trade_id!r}"
