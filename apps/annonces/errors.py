"""Errors raised by the annonces services and mapped to HTTP responses by the API."""


class AnnonceError(Exception):
    """Base class; ``status_code`` is the HTTP status the API answers with."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(AnnonceError):
    """Missing or non-numeric path/query parameter."""
    status_code = 400


class NotFoundError(AnnonceError):
    status_code = 404


class UpstreamError(AnnonceError):
    """The listing store query failed. Not retried."""
    status_code = 500
