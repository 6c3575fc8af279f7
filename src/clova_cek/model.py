"""Msgspec models for the CEK extension response message.

Field names follow the platform contract (camelCase on the wire); every speech
container is a tagged struct so the shape is explicit rather than inferred from
which fields happen to be populated.
"""

from __future__ import annotations

from typing import Any, Literal, TypeAlias

import msgspec

Lang: TypeAlias = Literal["ja", "ko", "en"]

SUPPORTED_LANGS: frozenset[str] = frozenset({"ja", "ko", "en"})
DEFAULT_LANG: Lang = "ja"
DEFAULT_VERSION = "1.0"


def check_lang(lang: str) -> Lang:
    if lang not in SUPPORTED_LANGS:
        available = ", ".join(sorted(SUPPORTED_LANGS))
        raise ValueError(f"Unsupported language {lang!r}. Available: {available}.")
    return lang  # type: ignore[return-value]


# -- Speech info (one utterance) --


class _SpeechInfo(
    msgspec.Struct, tag_field="type", rename="camel", forbid_unknown_fields=False
):
    pass


class PlainText(_SpeechInfo, tag="PlainText"):
    lang: Lang
    value: str


class URL(_SpeechInfo, tag="URL"):
    value: str


SpeechInfo: TypeAlias = PlainText | URL


# -- Output speech shapes --


class _Speech(
    msgspec.Struct, tag_field="type", rename="camel", forbid_unknown_fields=False
):
    pass


class SimpleSpeech(_Speech, tag="SimpleSpeech"):
    values: list[SpeechInfo] = msgspec.field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.values) > 1:
            raise ValueError("SimpleSpeech holds at most one value")


class SpeechList(_Speech, tag="SpeechList"):
    values: list[SpeechInfo] = msgspec.field(default_factory=list)


VerboseSpeech: TypeAlias = SimpleSpeech | SpeechList


class SpeechSet(_Speech, tag="SpeechSet"):
    brief: SpeechInfo
    verbose: VerboseSpeech = msgspec.field(default_factory=SimpleSpeech)


OutputSpeech: TypeAlias = SimpleSpeech | SpeechList | SpeechSet


# -- Response envelope --


class Reprompt(msgspec.Struct, rename="camel", forbid_unknown_fields=False):
    output_speech: OutputSpeech


class DirectiveHeader(
    msgspec.Struct, rename="camel", omit_defaults=True, forbid_unknown_fields=False
):
    namespace: str
    name: str
    message_id: str | None = None
    dialog_request_id: str | None = None


class Directive(msgspec.Struct, rename="camel", forbid_unknown_fields=False):
    header: DirectiveHeader
    payload: dict[str, Any] = msgspec.field(default_factory=dict)


class Response(msgspec.Struct, rename="camel", forbid_unknown_fields=False):
    output_speech: OutputSpeech
    should_end_session: bool = True
    # UNSET is dropped from the wire instead of being written as null.
    reprompt: Reprompt | msgspec.UnsetType = msgspec.UNSET
    directives: list[Directive] = msgspec.field(default_factory=list)
    card: dict[str, Any] = msgspec.field(default_factory=dict)


class CEKResponse(msgspec.Struct, rename="camel", forbid_unknown_fields=False):
    response: Response
    session_attributes: dict[str, Any] = msgspec.field(default_factory=dict)
    version: str = DEFAULT_VERSION


_ENCODER = msgspec.json.Encoder()
_DECODER = msgspec.json.Decoder(CEKResponse)


def encode_response(document: CEKResponse) -> bytes:
    return _ENCODER.encode(document)


def decode_response(data: bytes | str) -> CEKResponse:
    return _DECODER.decode(data)


def speech_values(speech: OutputSpeech) -> list[SpeechInfo]:
    """Flatten a speech of any shape into its utterances, brief first."""
    if isinstance(speech, SpeechSet):
        return [speech.brief, *speech.verbose.values]
    return list(speech.values)


def speech_kind(speech: OutputSpeech) -> str:
    info = msgspec.inspect.type_info(speech.__class__)
    return getattr(info, "tag", None) or speech.__class__.__name__
