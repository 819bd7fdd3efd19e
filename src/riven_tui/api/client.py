"""Async gateway to the Riven REST API."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from riven_tui.api.errors import ApiError, DecodeError, TransportError
from riven_tui.models import (
    ActionResponse,
    ItemAction,
    ItemsQuery,
    ItemsResponse,
    LogsResponse,
    MediaItem,
    MediaType,
    MessageResponse,
    RDUser,
    StatesResponse,
    StatsResponse,
    Stream,
    parse_streams,
)
from riven_tui.models.stats import ServicesResponse, services_adapter
from riven_tui.utils.logging import get_logger

if TYPE_CHECKING:
    from riven_tui.config.settings import Settings

logger = get_logger(__name__)

API_PREFIX = "/api/v1"

ModelT = TypeVar("ModelT", bound=BaseModel)


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class RivenClient:
    """Thin typed wrapper over ``httpx.AsyncClient``.

    Every call either returns a parsed model or raises a
    :class:`~riven_tui.api.errors.RivenError` subclass.
    """

    def __init__(
        self,
        endpoint: str,
        token: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.endpoint = endpoint.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=f"{self.endpoint}{API_PREFIX}",
            headers={
                **auth_headers(token),
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> RivenClient:
        return cls(
            settings.api.endpoint,
            settings.api.token,
            timeout=settings.api.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> RivenClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
    ) -> Any:
        try:
            response = await self._client.request(method, path, params=params)
        except httpx.HTTPError as exc:
            url = f"{self._client.base_url}{path.lstrip('/')}"
            logger.debug("request_failed", method=method, path=path, error=str(exc))
            raise TransportError(f"request failed: {exc}", url=url) from exc

        if response.status_code >= 400:
            raise ApiError(response.status_code, response.text, url=str(response.url))

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(f"invalid JSON from {response.url}: {exc}") from exc

    async def _get_model(
        self, model: type[ModelT], path: str, params: dict[str, str] | None = None
    ) -> ModelT:
        data = await self._request("GET", path, params=params)
        return _validate(model, data)

    async def health(self) -> MessageResponse:
        return await self._get_model(MessageResponse, "/health")

    async def get_stats(self) -> StatsResponse:
        return await self._get_model(StatsResponse, "/stats")

    async def get_services(self) -> ServicesResponse:
        data = await self._request("GET", "/services")
        return _validate_adapter(services_adapter, data or {})

    async def get_rd_user(self) -> RDUser:
        return await self._get_model(RDUser, "/rd")

    async def get_states(self) -> StatesResponse:
        return await self._get_model(StatesResponse, "/items/states")

    async def get_items(self, query: ItemsQuery | None = None) -> ItemsResponse:
        query = query or ItemsQuery()
        return await self._get_model(ItemsResponse, "/items", params=query.to_params())

    async def get_item(
        self,
        item_id: str,
        media_type: MediaType | None = None,
        with_streams: bool | None = None,
    ) -> MediaItem:
        params: dict[str, str] = {}
        if media_type is not None:
            params["media_type"] = media_type.value
        if with_streams is not None:
            params["with_streams"] = "true" if with_streams else "false"
        return await self._get_model(MediaItem, f"/items/{item_id}", params=params or None)

    async def get_item_streams(self, item_id: str) -> list[Stream]:
        data = await self._request("GET", f"/items/{item_id}/streams")
        try:
            return parse_streams(data)
        except (ValidationError, TypeError) as exc:
            raise DecodeError(f"unexpected streams payload: {exc}") from exc

    async def get_logs(self) -> LogsResponse:
        return await self._get_model(LogsResponse, "/logs")

    async def get_all_settings(self) -> dict[str, Any]:
        data = await self._request("GET", "/settings/get/all")
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise DecodeError("settings payload is not an object")
        return data

    async def run_action(self, action: ItemAction, ids: Sequence[str]) -> ActionResponse:
        """Issue one item command for ``ids``.

        Remove is a DELETE, everything else a POST to ``/items/{action}``.
        """
        if not ids:
            raise ValueError("at least one item id is required")
        method = "DELETE" if action is ItemAction.REMOVE else "POST"
        params = {"ids": ",".join(str(i) for i in ids)}
        data = await self._request(method, f"/items/{action.value}", params=params)
        logger.info("item_action", action=action.value, ids=params["ids"])
        return _validate(ActionResponse, data or {})

    async def retry_items(self, ids: Sequence[str]) -> ActionResponse:
        return await self.run_action(ItemAction.RETRY, ids)

    async def reset_items(self, ids: Sequence[str]) -> ActionResponse:
        return await self.run_action(ItemAction.RESET, ids)

    async def pause_items(self, ids: Sequence[str]) -> ActionResponse:
        return await self.run_action(ItemAction.PAUSE, ids)

    async def unpause_items(self, ids: Sequence[str]) -> ActionResponse:
        return await self.run_action(ItemAction.UNPAUSE, ids)

    async def remove_items(self, ids: Sequence[str]) -> ActionResponse:
        return await self.run_action(ItemAction.REMOVE, ids)


def _validate(model: type[ModelT], data: Any) -> ModelT:
    try:
        return model.model_validate(data if data is not None else {})
    except ValidationError as exc:
        raise DecodeError(f"unexpected {model.__name__} payload: {exc}") from exc


def _validate_adapter(adapter: TypeAdapter, data: Any) -> Any:
    try:
        return adapter.validate_python(data)
    except ValidationError as exc:
        raise DecodeError(f"unexpected payload: {exc}") from exc
