"""
Practice Clients - How a driver reaches the session and word stores.

A client is bound to one owner and exposes:
- session calls: get / create / update / remove
- word-store reads used by the session initializer

Two transports:
- LocalPracticeClient: calls a PracticeService in-process
- HttpPracticeClient: calls the REST API with httpx and maps status
  codes back to drill errors
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any
import logging

import httpx

from ..engine_core.state import SessionState, Word, Progress
from ..errors import (
    DrillError,
    ConflictError,
    NotFoundError,
    UnitNotFoundError,
    ValidationError,
    TransientIOError,
    AuthenticationError,
)

if TYPE_CHECKING:
    from ..api.service import PracticeService

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


class PracticeClient(ABC):
    """
    Interface for session and word access on behalf of one owner.
    """

    @abstractmethod
    def get_session(self) -> SessionState | None:
        pass

    @abstractmethod
    def create_session(
        self,
        list_selector: str,
        queue: list[Word] | tuple[Word, ...],
        progress: Progress,
    ) -> SessionState:
        pass

    @abstractmethod
    def update_session(self, queue: list[Word] | tuple[Word, ...], progress: Progress):
        pass

    @abstractmethod
    def remove_session(self):
        pass

    @abstractmethod
    def list_unit_ids(self) -> list[int]:
        pass

    @abstractmethod
    def get_unit_words(self, unit_id: int) -> list[Word]:
        pass

    @abstractmethod
    def get_words(self, unit_ids: list[int]) -> list[Word]:
        pass


class LocalPracticeClient(PracticeClient):
    """Client calling a PracticeService in the same process."""

    def __init__(self, service: PracticeService, owner: str):
        self.service = service
        self.owner = owner

    def get_session(self) -> SessionState | None:
        return self.service.get_session(self.owner)

    def create_session(self, list_selector, queue, progress) -> SessionState:
        return self.service.create_session(self.owner, list_selector, queue, progress)

    def update_session(self, queue, progress):
        self.service.update_session(self.owner, queue, progress)

    def remove_session(self):
        self.service.remove_session(self.owner)

    def list_unit_ids(self) -> list[int]:
        return [unit.unit_id for unit in self.service.list_units(self.owner)]

    def get_unit_words(self, unit_id: int) -> list[Word]:
        _, words = self.service.get_unit(self.owner, unit_id)
        return words

    def get_words(self, unit_ids: list[int]) -> list[Word]:
        return self.service.get_words(self.owner, unit_ids)


_ERRORS_BY_CODE: dict[str, type[DrillError]] = {
    ConflictError.error_code: ConflictError,
    NotFoundError.error_code: NotFoundError,
    UnitNotFoundError.error_code: UnitNotFoundError,
    ValidationError.error_code: ValidationError,
    TransientIOError.error_code: TransientIOError,
    AuthenticationError.error_code: AuthenticationError,
}

_ERRORS_BY_STATUS: dict[int, type[DrillError]] = {
    400: ValidationError,
    401: AuthenticationError,
    404: NotFoundError,
    409: ConflictError,
    422: ValidationError,
    503: TransientIOError,
}


class HttpPracticeClient(PracticeClient):
    """
    Client for the REST API.

    Usage:
        client = HttpPracticeClient("http://localhost:8000", token="secret")
        session = client.get_session()

    A pre-built httpx.Client (e.g. a FastAPI TestClient) can be passed
    as http; base_url is then only used as a prefix for paths.
    """

    def __init__(
        self,
        base_url: str = "",
        token: str | None = None,
        http: httpx.Client | None = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._http = http or httpx.Client(timeout=httpx.Timeout(timeout))

    def close(self):
        self._http.close()

    def get_session(self) -> SessionState | None:
        data = self._request("GET", "/session")
        if not data:
            return None
        return SessionState.from_dict(data)

    def create_session(self, list_selector, queue, progress) -> SessionState:
        data = self._request("POST", "/session", json={
            "listSelector": list_selector,
            "queue": [w.to_dict() for w in queue],
            "progress": progress.to_dict(),
        })
        return SessionState.from_dict(data)

    def update_session(self, queue, progress):
        self._request("PUT", "/session", json={
            "queue": [w.to_dict() for w in queue],
            "progress": progress.to_dict(),
        })

    def remove_session(self):
        self._request("DELETE", "/session")

    def list_unit_ids(self) -> list[int]:
        data = self._request("GET", "/units")
        return [int(unit["id"]) for unit in data]

    def get_unit_words(self, unit_id: int) -> list[Word]:
        data = self._request("GET", f"/units/{unit_id}")
        return [Word.from_dict(w) for w in data["words"]]

    def get_words(self, unit_ids: list[int]) -> list[Word]:
        if not unit_ids:
            return []
        units = ",".join(str(i) for i in unit_ids)
        data = self._request("GET", "/words", params={"units": units})
        return [Word.from_dict(w) for w in data["words"]]

    def _request(self, method: str, path: str, **kwargs) -> Any:
        """Send a request and decode JSON, raising drill errors on failure."""
        url = f"{self.base_url}{API_PREFIX}{path}"
        try:
            response = self._http.request(method, url, headers=self.headers, **kwargs)
        except httpx.TransportError as e:
            raise TransientIOError(f"{method} {path} failed: {e}") from e

        if response.is_success:
            return response.json() if response.content else None

        raise self._error_from_response(response)

    def _error_from_response(self, response: httpx.Response) -> DrillError:
        """Map an error response to the matching drill error."""
        message = f"HTTP {response.status_code}"
        error_cls = None
        details = None
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            message = body.get("error") or body.get("detail") or message
            error_cls = _ERRORS_BY_CODE.get(body.get("error_code"))
            details = body.get("details")

        if error_cls is None:
            error_cls = _ERRORS_BY_STATUS.get(response.status_code)
        if error_cls is None:
            if response.status_code >= 500:
                error_cls = TransientIOError
            else:
                error_cls = DrillError

        logger.debug("Request failed with %s: %s", response.status_code, message)
        return error_cls(str(message), details=details)
