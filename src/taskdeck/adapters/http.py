"""REST implementation of the board data source."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Self

import httpx
from pydantic import TypeAdapter, ValidationError

from taskdeck.core.errors import (
    BoardDataSourceError,
    BoardUnavailableError,
    MoveRejectedError,
    ResponseShapeError,
)
from taskdeck.core.models.entities import (
    ApiErrorPayload,
    BoardSnapshot,
    MoveAck,
    MoveBatch,
    SectionWithTasks,
    Task,
)
from taskdeck.limits import HTTP_TIMEOUT

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType

    from taskdeck.config import ApiConfig
    from taskdeck.core.models.entities import Move

log = logging.getLogger(__name__)

_SECTIONS = TypeAdapter(list[SectionWithTasks])
_TASKS = TypeAdapter(list[Task])


class HttpBoardDataSource:
    """Talks to the board REST API over ``httpx``.

    Endpoints:
        GET   /api/projects/{project_id}/sections
        GET   /api/tasks/{task_id}/childtasks
        PATCH /api/projects/{project_id}/tasks/reorder
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str = "",
        tenant_id: str = "",
        timeout: float = HTTP_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if tenant_id:
            headers["X-Tenant-Id"] = tenant_id
        self._owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(headers=headers, timeout=timeout)
        else:
            client.headers.update(headers)
        self._client = client

    @classmethod
    def from_config(cls, config: ApiConfig, *, client: httpx.AsyncClient | None = None) -> Self:
        return cls(
            config.base_url,
            token=config.token,
            tenant_id=config.tenant_id,
            timeout=config.timeout_seconds,
            client=client,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch_board(self, project_id: str) -> BoardSnapshot:
        payload = await self._request("GET", f"/api/projects/{project_id}/sections")
        try:
            sections = _SECTIONS.validate_python(payload)
        except ValidationError as exc:
            raise ResponseShapeError(
                f"Unexpected sections payload: {exc.error_count()} errors"
            ) from exc
        # Sections arrive ordered by server; tasks keep the order the server sent.
        return BoardSnapshot.from_sections(sections)

    async def fetch_child_tasks(self, parent_task_id: str) -> tuple[Task, ...]:
        payload = await self._request("GET", f"/api/tasks/{parent_task_id}/childtasks")
        try:
            return tuple(_TASKS.validate_python(payload))
        except ValidationError as exc:
            raise ResponseShapeError(
                f"Unexpected child tasks payload: {exc.error_count()} errors"
            ) from exc

    async def submit_moves(self, project_id: str, moves: Sequence[Move]) -> MoveAck:
        if not moves:
            raise ValueError("moves must not be empty")
        body = MoveBatch(moves=tuple(moves)).model_dump(by_alias=True, mode="json")
        log.debug("PATCH reorder for project %s: %s", project_id, body)
        payload = await self._request(
            "PATCH",
            f"/api/projects/{project_id}/tasks/reorder",
            json=body,
            rejected=MoveRejectedError,
        )
        try:
            ack = MoveAck.model_validate(payload)
        except ValidationError as exc:
            raise ResponseShapeError("Unexpected reorder response") from exc
        if not ack.success:
            raise MoveRejectedError("Reorder was not accepted")
        return ack

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        rejected: type[BoardDataSourceError] = BoardDataSourceError,
    ) -> Any:
        try:
            response = await self._client.request(method, f"{self.base_url}{path}", json=json)
        except httpx.TimeoutException as exc:
            raise BoardUnavailableError(f"Timed out on {method} {path}") from exc
        except httpx.TransportError as exc:
            raise BoardUnavailableError(f"Could not reach board API: {exc}") from exc

        if response.is_error:
            message = _error_text(response)
            log.warning("%s %s returned %d: %s", method, path, response.status_code, message)
            error_cls = BoardUnavailableError if response.is_server_error else rejected
            raise error_cls(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise ResponseShapeError(
                f"{method} {path} returned a non-JSON body", status_code=response.status_code
            ) from exc


def _error_text(response: httpx.Response) -> str:
    try:
        return ApiErrorPayload.model_validate(response.json()).text
    except (ValueError, ValidationError):
        return response.reason_phrase or "Request failed"
