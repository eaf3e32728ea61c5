from __future__ import annotations


class BudgetError(Exception):
    """Base error for budget reconciliation with a retry hint for callers."""

    retryable: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class IdentityNotFound(BudgetError):
    """No profile resolves for the given user id."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"User profile not found: {user_id}")
        self.user_id = user_id


class StoreUnavailable(BudgetError):
    """A read or write against a backing store failed."""

    retryable = True

    def __init__(self, *, store: str, message: str) -> None:
        super().__init__(message)
        self.store = store


class InvalidLimit(BudgetError):
    """A budget ceiling is NaN, negative, zero where disallowed, or too large."""


class InvalidAmount(BudgetError):
    """A monetary input such as an estimated cost is not usable."""


class InvalidTripCost(BudgetError):
    """A trip record carries a negative or non-numeric cost."""

    def __init__(self, trip_id: str, cost: object) -> None:
        super().__init__(f"Trip {trip_id} has invalid cost: {cost}")
        self.trip_id = trip_id
        self.cost = cost


class RoleMismatch(BudgetError):
    """An operation was applied to a profile of the wrong role."""


class TripGroupMismatch(BudgetError):
    """A driver's trip is tagged with a business group the driver does not belong to."""

    def __init__(self, user_id: str, expected: str, given: str) -> None:
        super().__init__(
            f"Trip for driver {user_id} must be tagged with business group {expected}, got {given}"
        )
        self.user_id = user_id
        self.expected = expected
        self.given = given
