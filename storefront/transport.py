from abc import ABC, abstractmethod

from fastapi import Response

from .auth import COOKIE_MAX_AGE, COOKIE_NAME


class CredentialTransport(ABC):
    """Client-side credential surface of the request/response transport."""

    @abstractmethod
    def set_credential(self, token: str, http_only: bool = True, max_age: int = COOKIE_MAX_AGE) -> None:
        ...

    @abstractmethod
    def clear_credential(self) -> None:
        ...


class CookieTransport(CredentialTransport):
    """Stores the session token as the ``token`` cookie on a FastAPI response."""

    def __init__(self, response: Response) -> None:
        self.response = response

    def set_credential(self, token: str, http_only: bool = True, max_age: int = COOKIE_MAX_AGE) -> None:
        self.response.set_cookie(COOKIE_NAME, token, httponly=http_only, max_age=max_age)

    def clear_credential(self) -> None:
        self.response.delete_cookie(COOKIE_NAME)
