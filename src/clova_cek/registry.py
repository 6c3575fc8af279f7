from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from .builder import ResponseBuilder
from .config import ClovaConfig, ConfigError
from .model import CEKResponse
from .request import CEKRequest

logger = logging.getLogger(__name__)

ID_PATTERN = r"^[a-z0-9_]{1,32}$"
_ID_RE = re.compile(ID_PATTERN)


def is_valid_id(value: str) -> bool:
    return bool(_ID_RE.fullmatch(value))


@runtime_checkable
class Extension(Protocol):
    def handle(self, request: CEKRequest, response: ResponseBuilder) -> None: ...


ExtensionFactory = Callable[[], Extension]


@dataclass(frozen=True, slots=True)
class ExtensionBackend:
    id: str
    factory: ExtensionFactory


class ExtensionRegistry:
    """Binds extension ids to factories; every lookup builds a fresh instance."""

    def __init__(self) -> None:
        self._backends: dict[str, ExtensionBackend] = {}

    def register(
        self, extension_id: str, factory: ExtensionFactory
    ) -> ExtensionRegistry:
        if not is_valid_id(extension_id):
            raise ConfigError(
                f"Invalid extension id {extension_id!r}; expected {ID_PATTERN}."
            )
        if extension_id in self._backends:
            raise ConfigError(f"Extension {extension_id!r} is already registered.")
        self._backends[extension_id] = ExtensionBackend(
            id=extension_id, factory=factory
        )
        logger.debug("[registry] registered %s", extension_id)
        return self

    def get(self, extension_id: str) -> ExtensionBackend:
        try:
            return self._backends[extension_id]
        except KeyError as exc:
            available = ", ".join(self.ids()) or "none"
            raise ConfigError(
                f"Unknown extension {extension_id!r}. Available: {available}."
            ) from exc

    def ids(self) -> list[str]:
        return sorted(self._backends)

    def create(self, extension_id: str) -> Extension:
        backend = self.get(extension_id)
        extension = backend.factory()
        if not isinstance(extension, Extension):
            raise TypeError(f"{backend.factory!r} did not produce an Extension")
        return extension

    def respond(
        self,
        extension_id: str,
        request: CEKRequest,
        *,
        config: ClovaConfig | None = None,
    ) -> CEKResponse:
        """Handle one request with a new extension and a new builder."""
        extension = self.create(extension_id)
        builder = ResponseBuilder.from_config(config or ClovaConfig())
        extension.handle(request, builder)
        logger.debug(
            "[registry] %s handled %s",
            extension_id,
            type(request.request).__name__,
        )
        return builder.build()
