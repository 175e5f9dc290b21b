"""Rejections raised by storefront operations.

Validation rejections are raised before the store document is touched.
``StoreUnavailable`` is raised after a failed save has been rolled back, so
catching any of them means nothing was mutated or persisted.
"""


class StorefrontError(ValueError):
    """Base class for user-facing operation rejections."""


class InvalidInput(StorefrontError):
    pass


class DuplicateEmail(StorefrontError):
    pass


class InvalidCredentials(StorefrontError):
    pass


class ReviewNotAllowed(StorefrontError):
    pass


class EmptyCart(StorefrontError):
    pass


class StoreUnavailable(StorefrontError):
    """The durable document could not be written."""
