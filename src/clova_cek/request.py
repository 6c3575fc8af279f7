"""Msgspec models and decoder for CEK extension request messages.

Only the fields an extension reads are modelled; unknown fields are ignored so
newer platform payloads still decode.
"""

from __future__ import annotations

from typing import Any, TypeAlias

import msgspec


class User(msgspec.Struct, rename="camel", forbid_unknown_fields=False):
    user_id: str
    access_token: str | None = None


class Session(msgspec.Struct, rename="camel", forbid_unknown_fields=False):
    session_id: str
    new: bool = False
    session_attributes: dict[str, Any] | None = None
    user: User | None = None


class Application(msgspec.Struct, rename="camel", forbid_unknown_fields=False):
    application_id: str


class Device(msgspec.Struct, rename="camel", forbid_unknown_fields=False):
    device_id: str
    display: dict[str, Any] | None = None


class SystemContext(msgspec.Struct, rename="camel", forbid_unknown_fields=False):
    application: Application | None = None
    device: Device | None = None
    user: User | None = None


class Context(msgspec.Struct, forbid_unknown_fields=False):
    system: SystemContext | None = msgspec.field(default=None, name="System")


# -- Request bodies (discriminated by "type") --


class _Request(
    msgspec.Struct, tag_field="type", rename="camel", forbid_unknown_fields=False
):
    request_id: str | None = None
    timestamp: str | None = None


class Slot(msgspec.Struct, rename="camel", forbid_unknown_fields=False):
    name: str
    value: Any = None
    value_type: str | None = None


class Intent(msgspec.Struct, forbid_unknown_fields=False):
    name: str
    slots: dict[str, Slot] | None = None


class Event(msgspec.Struct, forbid_unknown_fields=False):
    namespace: str
    name: str
    payload: Any = None


class LaunchRequest(_Request, tag="LaunchRequest"):
    pass


class IntentRequest(_Request, tag="IntentRequest", kw_only=True):
    intent: Intent


class SessionEndedRequest(_Request, tag="SessionEndedRequest"):
    pass


class EventRequest(_Request, tag="EventRequest", kw_only=True):
    event: Event


RequestBody: TypeAlias = (
    LaunchRequest | IntentRequest | SessionEndedRequest | EventRequest
)


class CEKRequest(msgspec.Struct, forbid_unknown_fields=False):
    request: RequestBody
    version: str = "1.0"
    session: Session | None = None
    context: Context | None = None

    @property
    def session_attributes(self) -> dict[str, Any]:
        if self.session is None or self.session.session_attributes is None:
            return {}
        return self.session.session_attributes

    @property
    def intent_name(self) -> str | None:
        if isinstance(self.request, IntentRequest):
            return self.request.intent.name
        return None

    def slot_value(self, name: str) -> Any:
        if not isinstance(self.request, IntentRequest):
            return None
        slots = self.request.intent.slots or {}
        slot = slots.get(name)
        return slot.value if slot is not None else None


_DECODER = msgspec.json.Decoder(CEKRequest)


def decode_request(data: bytes | str) -> CEKRequest:
    return _DECODER.decode(data)
