"""
Models service - Application service for GET models and GET models/{id}.
"""

from __future__ import annotations
import logging
import threading
from typing import Any, List, Optional
from urllib.parse import quote

from ..domain.errors import InvalidArgumentError, ModelNotFoundError, ResponseParseError
from ..domain.interfaces.transport import AsyncTransport, OutboundRequest, Transport
from ..domain.models.shared import Model
from .base import decode_json, decode_model

MODELS_PATH = 'models'


def _require_model_id(model_id: Optional[str]) -> str:
    if model_id is None or not str(model_id).strip():
        raise InvalidArgumentError("Model ID is required")
    return str(model_id).strip()


def _model_path(model_id: str) -> str:
    return f"{MODELS_PATH}/{quote(model_id, safe='')}"


def parse_model_list(payload: Any) -> List[Model]:
    """Map {"object": "list", "data": [...]} to models."""
    data = payload.get('data') if isinstance(payload, dict) else None
    if not isinstance(data, list):
        raise ResponseParseError("Failed to parse models response")
    return [Model.from_dict(item) for item in data]


def _require_id(model: Model, model_id: str) -> Model:
    if not model.id:
        raise ResponseParseError(f"Failed to parse model response for '{model_id}'")
    return model


def find_model(models: List[Model], model_id: str) -> Model:
    for model in models:
        if model.id == model_id:
            return model
    raise ModelNotFoundError(model_id)


class ModelsService:
    """Model listing and lookup over a blocking transport."""

    def __init__(self, transport: Transport, logger: Optional[logging.Logger] = None):
        if transport is None:
            raise InvalidArgumentError("transport is required")
        self._transport = transport
        self._logger = logger or logging.getLogger(__name__)

    def list(self, cancel_event: Optional[threading.Event] = None) -> List[Model]:
        """All models available to the account."""
        self._logger.debug("Listing available models")
        response = self._transport.send(OutboundRequest('GET', MODELS_PATH), cancel_event=cancel_event)
        models = parse_model_list(decode_json(response, 'models'))
        self._logger.info(f"Retrieved {len(models)} models")
        return models

    def retrieve(self, model_id: str, cancel_event: Optional[threading.Event] = None) -> Model:
        """GET models/{id}; an unknown id surfaces as the server's 404 error."""
        model_id = _require_model_id(model_id)
        self._logger.debug(f"Retrieving model {model_id}")
        response = self._transport.send(OutboundRequest('GET', _model_path(model_id)), cancel_event=cancel_event)
        return _require_id(decode_model(response, Model, f"model '{model_id}'"), model_id)

    def get(self, model_id: str, cancel_event: Optional[threading.Event] = None) -> Model:
        """Look a model up in the listing; raises ModelNotFoundError (404) when absent."""
        model_id = _require_model_id(model_id)
        self._logger.debug(f"Getting model information for {model_id}")
        return find_model(self.list(cancel_event=cancel_event), model_id)


class AsyncModelsService:
    """Model listing and lookup over an asyncio transport."""

    def __init__(self, transport: AsyncTransport, logger: Optional[logging.Logger] = None):
        if transport is None:
            raise InvalidArgumentError("transport is required")
        self._transport = transport
        self._logger = logger or logging.getLogger(__name__)

    async def list(self) -> List[Model]:
        self._logger.debug("Listing available models")
        response = await self._transport.send(OutboundRequest('GET', MODELS_PATH))
        models = parse_model_list(decode_json(response, 'models'))
        self._logger.info(f"Retrieved {len(models)} models")
        return models

    async def retrieve(self, model_id: str) -> Model:
        model_id = _require_model_id(model_id)
        self._logger.debug(f"Retrieving model {model_id}")
        response = await self._transport.send(OutboundRequest('GET', _model_path(model_id)))
        return _require_id(decode_model(response, Model, f"model '{model_id}'"), model_id)

    async def get(self, model_id: str) -> Model:
        model_id = _require_model_id(model_id)
        self._logger.debug(f"Getting model information for {model_id}")
        return find_model(await self.list(), model_id)
