"""Server-side SDK for LINE Clova Extension Kit (CEK) responses."""

from __future__ import annotations

__version__ = "0.1.0"

from .builder import InvalidStateError, ResponseBuilder
from .config import ClovaConfig, ConfigError, load_config
from .model import (
    URL,
    CEKResponse,
    OutputSpeech,
    PlainText,
    SimpleSpeech,
    SpeechList,
    SpeechSet,
    decode_response,
    encode_response,
)
from .registry import Extension, ExtensionRegistry
from .request import CEKRequest, decode_request

__all__ = [
    "CEKRequest",
    "CEKResponse",
    "ClovaConfig",
    "ConfigError",
    "Extension",
    "ExtensionRegistry",
    "InvalidStateError",
    "OutputSpeech",
    "PlainText",
    "ResponseBuilder",
    "SimpleSpeech",
    "SpeechList",
    "SpeechSet",
    "URL",
    "decode_request",
    "decode_response",
    "encode_response",
    "load_config",
]
