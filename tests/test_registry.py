from pathlib import Path

import pytest

from clova_cek.builder import ResponseBuilder
from clova_cek.config import ClovaConfig, ConfigError
from clova_cek.registry import Extension, ExtensionRegistry, is_valid_id
from clova_cek.request import CEKRequest, IntentRequest, decode_request


class PizzaExtension:
    instances = 0

    def __init__(self) -> None:
        PizzaExtension.instances += 1
        self.calls = 0

    def handle(self, request: CEKRequest, response: ResponseBuilder) -> None:
        self.calls += 1
        if isinstance(request.request, IntentRequest):
            response.add_text(f"{request.slot_value('pizzaType')} pizza")
            response.add_reprompt_text("Anything else?")
            turn = request.session_attributes.get("turn", 0)
            response.set_session("turn", turn + 1).keep_session_open()
        else:
            response.add_text("welcome")


class NotAnExtension:
    pass


@pytest.fixture
def registry() -> ExtensionRegistry:
    PizzaExtension.instances = 0
    return ExtensionRegistry().register("pizza", PizzaExtension)


class TestRegister:
    def test_valid_ids(self) -> None:
        assert is_valid_id("pizza_bot1")
        assert not is_valid_id("Pizza")
        assert not is_valid_id("")
        assert not is_valid_id("a" * 33)

    def test_invalid_id_rejected(self) -> None:
        with pytest.raises(ConfigError, match="Invalid extension id"):
            ExtensionRegistry().register("Pizza Bot", PizzaExtension)

    def test_duplicate_rejected(self, registry: ExtensionRegistry) -> None:
        with pytest.raises(ConfigError, match="already registered"):
            registry.register("pizza", PizzaExtension)

    def test_unknown_lists_available(self, registry: ExtensionRegistry) -> None:
        registry.register("weather", PizzaExtension)

        with pytest.raises(ConfigError, match="Available: pizza, weather"):
            registry.get("nonexistent")

    def test_unknown_on_empty_registry(self) -> None:
        with pytest.raises(ConfigError, match="Available: none"):
            ExtensionRegistry().get("pizza")


class TestCreate:
    def test_new_instance_per_call(self, registry: ExtensionRegistry) -> None:
        first = registry.create("pizza")
        second = registry.create("pizza")

        assert isinstance(first, Extension)
        assert first is not second
        assert PizzaExtension.instances == 2

    def test_factory_must_produce_extension(self) -> None:
        registry = ExtensionRegistry().register("broken", NotAnExtension)  # type: ignore[arg-type]

        with pytest.raises(TypeError, match="did not produce an Extension"):
            registry.create("broken")


class TestRespond:
    def test_intent_request(self, registry: ExtensionRegistry, fixture_path: Path) -> None:
        request = decode_request((fixture_path / "intent_request.json").read_bytes())

        document = registry.respond("pizza", request)

        assert document.response.output_speech.values[0].value == "pepperoni pizza"
        assert document.response.should_end_session is False
        assert document.session_attributes == {"turn": 2}

    def test_uses_config_defaults(
        self, registry: ExtensionRegistry, fixture_path: Path
    ) -> None:
        request = decode_request((fixture_path / "launch_request.json").read_bytes())

        document = registry.respond(
            "pizza", request, config=ClovaConfig(version="1.1", default_lang="en")
        )

        assert document.version == "1.1"
        assert document.response.output_speech.values[0].lang == "en"
        assert document.response.should_end_session is True

    def test_documents_not_shared(
        self, registry: ExtensionRegistry, fixture_path: Path
    ) -> None:
        request = decode_request((fixture_path / "launch_request.json").read_bytes())

        first = registry.respond("pizza", request)
        second = registry.respond("pizza", request)

        assert first is not second
        assert len(first.response.output_speech.values) == 1
        assert len(second.response.output_speech.values) == 1
        assert PizzaExtension.instances == 2
