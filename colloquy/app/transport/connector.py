from __future__ import annotations

import asyncio
import logging
from typing import Mapping

import httpx

from colloquy.app.observability.telemetry import (
    DISPATCH_REFUSED,
    HANDLER_FAILED,
    TRANSPORT_FAILED,
    emit_operation_event,
)
from colloquy.app.transport.contracts import Form, RestRequest, RestResponse

LOGGER = logging.getLogger(__name__)


def _split_forms(
    forms: Mapping[str, Form],
) -> tuple[dict[str, str], dict[str, tuple[str, bytes]]]:
    data: dict[str, str] = {}
    files: dict[str, tuple[str, bytes]] = {}
    for name, form in forms.items():
        if form.is_file:
            files[name] = (form.filename or name, form.content or b"")
        else:
            data[name] = form.value or ""
    return data, files


class RestConnector:
    """Sends dialog requests on the running event loop.

    ``send`` never blocks: each accepted request becomes a task that performs
    the HTTP call and then hands ``(request, response)`` to the request's
    ``on_response`` handler. Transport errors and non-2xx statuses surface as
    ``RestResponse(success=False)``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        auth: httpx.Auth | tuple[str, str] | None = None,
        timeout_s: float = 30.0,
        headers: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            auth=auth,
            timeout=httpx.Timeout(timeout_s),
            headers=dict(headers or {}),
            transport=transport,
        )
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def url_for(self, request: RestRequest) -> str:
        return f"{self._base_url}{request.function}"

    def send(self, request: RestRequest) -> bool:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            emit_operation_event(
                DISPATCH_REFUSED,
                logger=LOGGER,
                url=self.url_for(request),
                reason="no_running_event_loop",
            )
            return False
        if self._client.is_closed:
            emit_operation_event(
                DISPATCH_REFUSED,
                logger=LOGGER,
                url=self.url_for(request),
                reason="connector_closed",
            )
            return False

        task = loop.create_task(self._dispatch(request))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return True

    async def drain(self) -> None:
        """Wait until every accepted request has delivered its response.

        Errors raised by response handlers are logged, not re-raised.
        """
        while self._pending:
            tasks = list(self._pending)
            results = await asyncio.gather(*tasks, return_exceptions=True)
            for result in results:
                if isinstance(result, Exception):
                    emit_operation_event(
                        HANDLER_FAILED,
                        logger=LOGGER,
                        base_url=self._base_url,
                        error=result,
                    )

    async def aclose(self) -> None:
        try:
            await self.drain()
        finally:
            await self._client.aclose()

    async def _dispatch(self, request: RestRequest) -> None:
        try:
            response = await self._perform(request)
        except Exception as exc:
            emit_operation_event(
                TRANSPORT_FAILED,
                level=logging.WARNING,
                logger=LOGGER,
                method=request.method,
                url=self.url_for(request),
                error=exc,
            )
            response = RestResponse(success=False, error=exc.__class__.__name__)
        request.on_response(request, response)

    async def _perform(self, request: RestRequest) -> RestResponse:
        url = self.url_for(request)
        try:
            if request.forms:
                data, files = _split_forms(request.forms)
                http_response = await self._client.post(
                    url, data=data, files=files or None
                )
            else:
                http_response = await self._client.get(url)
        except httpx.HTTPError as exc:
            emit_operation_event(
                TRANSPORT_FAILED,
                level=logging.WARNING,
                logger=LOGGER,
                method=request.method,
                url=url,
                error=exc,
            )
            return RestResponse(success=False, error=exc.__class__.__name__)

        status_code = http_response.status_code
        if not 200 <= status_code < 300:
            emit_operation_event(
                TRANSPORT_FAILED,
                level=logging.WARNING,
                logger=LOGGER,
                method=request.method,
                url=url,
                status_code=status_code,
            )
            return RestResponse(
                success=False,
                data=http_response.content,
                status_code=status_code,
                error=f"http_status_{status_code}",
            )
        return RestResponse(
            success=True, data=http_response.content, status_code=status_code
        )
