"""Fluent builder for CEK extension responses.

Each output speech moves through a small set of shapes:

    SimpleSpeech(0) -> SimpleSpeech(1) -> SpeechList -> SpeechList ...
    any shape --set_brief_*--> SpeechSet

Appending a second utterance promotes a SimpleSpeech to a SpeechList with every
utterance kept in call order. Entering SpeechSet replaces the main output
speech outright: utterances added earlier with ``add_text``/``add_url`` are
dropped, and a new empty verbose body is started. Nothing moves a speech back
out of SpeechSet, so the direct ``add_*`` mutators raise ``InvalidStateError``
once the brief is set, just as ``add_verbose_*`` do before it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import msgspec

from .model import (
    DEFAULT_LANG,
    DEFAULT_VERSION,
    URL,
    CEKResponse,
    Directive,
    DirectiveHeader,
    Lang,
    OutputSpeech,
    PlainText,
    Reprompt,
    Response,
    SimpleSpeech,
    SpeechInfo,
    SpeechList,
    SpeechSet,
    VerboseSpeech,
    check_lang,
    encode_response,
)

if TYPE_CHECKING:
    from .config import ClovaConfig

logger = logging.getLogger(__name__)

_SESSION_ENCODER = msgspec.json.Encoder()


class InvalidStateError(RuntimeError):
    pass


def _append(speech: OutputSpeech, info: SpeechInfo, *, target: str) -> VerboseSpeech:
    if isinstance(speech, SpeechSet):
        raise InvalidStateError(
            f"Cannot add to {target} after set_brief_text()/set_brief_url(); "
            "use add_verbose_text()/add_verbose_url() instead."
        )
    if not speech.values:
        return SimpleSpeech(values=[info])
    values = [*speech.values, info]
    if isinstance(speech, SimpleSpeech):
        logger.debug(
            "[builder] %s promoted to SpeechList (%d values)", target, len(values)
        )
    return SpeechList(values=values)


class ResponseBuilder:
    """Owns one ``CEKResponse`` and mutates it call by call.

    A builder belongs to a single request; allocate a new one per request.
    """

    def __init__(
        self, version: str = DEFAULT_VERSION, default_lang: Lang = DEFAULT_LANG
    ) -> None:
        self.default_lang: Lang = check_lang(default_lang)
        self._document = CEKResponse(
            response=Response(
                output_speech=SimpleSpeech(),
                should_end_session=True,
                reprompt=Reprompt(output_speech=SimpleSpeech()),
            ),
            version=version,
        )

    @classmethod
    def from_config(cls, config: ClovaConfig) -> ResponseBuilder:
        return cls(version=config.version, default_lang=config.default_lang)

    @property
    def output_speech(self) -> OutputSpeech:
        return self._document.response.output_speech

    @property
    def reprompt_speech(self) -> OutputSpeech:
        return self._reprompt().output_speech

    @property
    def should_end_session(self) -> bool:
        return self._document.response.should_end_session

    @property
    def session_attributes(self) -> dict[str, Any]:
        return self._document.session_attributes

    def _text(self, text: str, lang: Lang | None) -> PlainText:
        resolved = self.default_lang if lang is None else check_lang(lang)
        return PlainText(lang=resolved, value=text)

    def _reprompt(self) -> Reprompt:
        reprompt = self._document.response.reprompt
        if isinstance(reprompt, msgspec.UnsetType):
            reprompt = Reprompt(output_speech=SimpleSpeech())
            self._document.response.reprompt = reprompt
        return reprompt

    def _add(self, info: SpeechInfo) -> ResponseBuilder:
        response = self._document.response
        response.output_speech = _append(
            response.output_speech, info, target="outputSpeech"
        )
        return self

    def _add_reprompt(self, info: SpeechInfo) -> ResponseBuilder:
        reprompt = self._reprompt()
        reprompt.output_speech = _append(
            reprompt.output_speech, info, target="reprompt"
        )
        return self

    def _set_brief(self, info: SpeechInfo) -> ResponseBuilder:
        response = self._document.response
        current = response.output_speech
        if not isinstance(current, SpeechSet) and current.values:
            logger.debug(
                "[builder] SpeechSet dropped %d earlier values", len(current.values)
            )
        response.output_speech = SpeechSet(brief=info, verbose=SimpleSpeech())
        return self

    def _add_verbose(self, info: SpeechInfo) -> ResponseBuilder:
        speech = self._document.response.output_speech
        if not isinstance(speech, SpeechSet):
            raise InvalidStateError(
                "No verbose speech yet; call set_brief_text() or set_brief_url() first."
            )
        speech.verbose = _append(speech.verbose, info, target="verbose")
        return self

    def add_text(self, text: str, lang: Lang | None = None) -> ResponseBuilder:
        return self._add(self._text(text, lang))

    def add_url(self, url: str) -> ResponseBuilder:
        return self._add(URL(value=url))

    def add_reprompt_text(self, text: str, lang: Lang | None = None) -> ResponseBuilder:
        return self._add_reprompt(self._text(text, lang))

    def add_reprompt_url(self, url: str) -> ResponseBuilder:
        return self._add_reprompt(URL(value=url))

    def set_brief_text(self, text: str, lang: Lang | None = None) -> ResponseBuilder:
        """Switch the main output speech to a SpeechSet with a text brief.

        Any utterances already added with ``add_text``/``add_url`` are dropped,
        and any verbose body from an earlier brief is reset.
        """
        return self._set_brief(self._text(text, lang))

    def set_brief_url(self, url: str) -> ResponseBuilder:
        """URL variant of ``set_brief_text``; drops earlier utterances the same way."""
        return self._set_brief(URL(value=url))

    def add_verbose_text(self, text: str, lang: Lang | None = None) -> ResponseBuilder:
        return self._add_verbose(self._text(text, lang))

    def add_verbose_url(self, url: str) -> ResponseBuilder:
        return self._add_verbose(URL(value=url))

    def set_session(self, key: str, value: Any) -> ResponseBuilder:
        self._document.session_attributes[key] = value
        return self

    def replace_session_attributes_from(self, value: Any) -> ResponseBuilder:
        """Replace all session attributes with the JSON fields of ``value``.

        The map is cleared first. ``value`` goes through the wire encoder and
        back, so structs, dataclasses and nested containers keep their JSON
        shape. Encoder errors propagate unchanged.
        """
        attributes = self._document.session_attributes
        attributes.clear()
        if value is not None:
            raw = msgspec.json.decode(_SESSION_ENCODER.encode(value))
            attributes.update(msgspec.convert(raw, type=dict[str, Any]))
        logger.debug("[builder] session attributes replaced (%d keys)", len(attributes))
        return self

    def keep_session_open(self) -> ResponseBuilder:
        self._document.response.should_end_session = False
        return self

    def add_directive(
        self, namespace: str, name: str, payload: dict[str, Any] | None = None
    ) -> ResponseBuilder:
        self._document.response.directives.append(
            Directive(
                header=DirectiveHeader(namespace=namespace, name=name),
                payload=dict(payload or {}),
            )
        )
        return self

    def build(self) -> CEKResponse:
        return self._document

    def to_json(self) -> bytes:
        return encode_response(self._document)
