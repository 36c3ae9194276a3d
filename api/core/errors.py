"""
Error taxonomy shared by providers, the manager and the persistence layer.
"""

from __future__ import annotations


class JokesError(RuntimeError):
    pass


class UpstreamError(JokesError):
    """
    An upstream joke API failed: transport error, non-2xx status, or a body
    that cannot be mapped onto the Joke shape.
    """

    def __init__(self, message: str, *, provider: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class NotFoundError(JokesError):
    pass


class PersistenceError(JokesError):
    pass
