"""
Exception taxonomy for the valuation engine.

Only conditions the caller must act on are raised. Thin history and missing
optional fields degrade to documented defaults instead.
"""


class ValuationError(Exception):
    """Base class for valuation engine errors."""


class EmptyCompSetError(ValuationError, ValueError):
    """Raised when a valuation is requested with no comparable sales."""

    def __init__(self, message: str = "No comps provided for ARV calculation"):
        super().__init__(message)


class InvalidDealInput(ValuationError, ValueError):
    """Raised when deal figures cannot produce a margin."""


class InvalidStatusTransition(ValuationError):
    """Raised when a tracked deal is moved to a status it cannot reach."""

    def __init__(self, deal_id: str, current: str, requested: str):
        self.deal_id = deal_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Deal {deal_id} cannot move from {current} to {requested}"
        )
