from __future__ import annotations


class OrderNotFoundError(Exception):
    """Absent order, or a conditional update that matched no row.

    Both cases surface identically so callers cannot probe for order existence.
    """


class RestaurantNotFoundError(Exception):
    pass


class UserNotFoundError(Exception):
    pass


class OrderAccessForbiddenError(Exception):
    pass


class InvalidOrderRequestError(Exception):
    pass


class InvalidOrderTransitionError(Exception):
    pass
