"""Exceptions raised by :mod:`cardbase.crowdsource.services.catalog`."""


class CatalogBaseException(RuntimeError):
    """Base for catalog service exceptions."""


class NoSuchSubmission(CatalogBaseException):
    """A request was made for a submission that does not exist."""


class NoSuchEntity(CatalogBaseException):
    """A request was made for a catalog entity that does not exist."""


class TransactionFailed(CatalogBaseException):
    """Raised when there was a problem committing changes to the database."""


class Unavailable(CatalogBaseException):
    """The catalog data store is not available."""


class PendingConflict(CatalogBaseException):
    """Another pending submission already holds the same pending key."""


class AlreadyReviewed(CatalogBaseException):
    """The conditional status update did not match a pending submission."""
