from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import msgspec
import typer
from rich.console import Console

from . import __version__
from .builder import InvalidStateError, ResponseBuilder
from .config import ConfigError, load_config
from .logging import get_logger, setup_logging
from .model import (
    URL,
    OutputSpeech,
    SpeechInfo,
    decode_response,
    speech_kind,
    speech_values,
)

logger = get_logger(__name__)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


def _fail(message: str) -> NoReturn:
    typer.echo(f"error: {message}", err=True)
    raise typer.Exit(code=1)


def _parse_session_item(item: str) -> tuple[str, object]:
    key, sep, raw = item.partition("=")
    if not sep or not key.strip():
        raise typer.BadParameter(
            f"expected KEY=VALUE, got {item!r}", param_hint="--session"
        )
    try:
        value = msgspec.json.decode(raw)
    except msgspec.DecodeError:
        value = raw
    return key.strip(), value


def _describe_info(info: SpeechInfo) -> str:
    if isinstance(info, URL):
        return f"URL {info.value}"
    return f"PlainText[{info.lang}] {info.value}"


def _describe_speech(label: str, speech: OutputSpeech) -> list[str]:
    values = speech_values(speech)
    noun = "value" if len(values) == 1 else "values"
    lines = [f"{label}: {speech_kind(speech)} ({len(values)} {noun})"]
    lines.extend(f"  - {_describe_info(info)}" for info in values)
    return lines


def sample(
    text: list[str] = typer.Option([], "--text", help="Add a PlainText utterance."),
    url: list[str] = typer.Option([], "--url", help="Add a URL utterance."),
    reprompt: list[str] = typer.Option([], "--reprompt", help="Add reprompt text."),
    brief: str | None = typer.Option(
        None, "--brief", help="Use a SpeechSet with this brief."
    ),
    verbose: list[str] = typer.Option(
        [], "--verbose", help="Add verbose text to the SpeechSet."
    ),
    session: list[str] = typer.Option(
        [], "--session", help="Set a session attribute (KEY=JSON)."
    ),
    keep_open: bool = typer.Option(
        False, "--keep-open", help="Keep the session open."
    ),
    lang: str | None = typer.Option(
        None, "--lang", help="Override the default language."
    ),
    config: Path | None = typer.Option(
        None, "--config", help="Path to clova.toml."
    ),
    pretty: bool = typer.Option(False, "--pretty", help="Pretty-print the JSON."),
) -> None:
    """Build a response document from options and print its JSON."""
    if brief is not None and (text or url):
        _fail("--brief cannot be combined with --text/--url")
    try:
        cfg, _ = load_config(config)
        builder = ResponseBuilder(
            version=cfg.version, default_lang=lang or cfg.default_lang
        )
        for item in text:
            builder.add_text(item)
        for item in url:
            builder.add_url(item)
        if brief is not None:
            builder.set_brief_text(brief)
        for item in verbose:
            builder.add_verbose_text(item)
        for item in reprompt:
            builder.add_reprompt_text(item)
        for item in session:
            key, value = _parse_session_item(item)
            builder.set_session(key, value)
    except (ConfigError, InvalidStateError, ValueError) as exc:
        _fail(str(exc))
    if keep_open:
        builder.keep_session_open()
    logger.debug(
        "sample.built",
        output_speech=speech_kind(builder.output_speech),
        should_end_session=builder.should_end_session,
    )

    payload = builder.to_json().decode("utf-8")
    if pretty:
        Console().print_json(payload)
    else:
        typer.echo(payload)


def check(
    path: Path = typer.Argument(..., help="Response JSON file to check."),
) -> None:
    """Decode a response document and summarize its speech shapes."""
    try:
        document = decode_response(path.read_bytes())
    except OSError as exc:
        _fail(f"failed to read {path}: {exc}")
    except (msgspec.ValidationError, msgspec.DecodeError) as exc:
        logger.debug("check.invalid", path=str(path), error=str(exc))
        _fail(f"invalid response document {path}: {exc}")

    response = document.response
    lines = [f"version: {document.version}"]
    lines.extend(_describe_speech("outputSpeech", response.output_speech))
    if not isinstance(response.reprompt, msgspec.UnsetType):
        lines.extend(_describe_speech("reprompt", response.reprompt.output_speech))
    lines.append(f"shouldEndSession: {str(response.should_end_session).lower()}")
    keys = ", ".join(document.session_attributes) or "(none)"
    lines.append(f"sessionAttributes: {keys}")
    typer.echo("\n".join(lines))


def app_main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show the version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    debug: bool = typer.Option(
        False,
        "--debug/--no-debug",
        help="Log builder state transitions to stderr.",
    ),
) -> None:
    """CEK response SDK tools."""
    setup_logging(debug=debug)


def create_app() -> typer.Typer:
    app = typer.Typer(
        add_completion=False,
        no_args_is_help=True,
        help="Build and check Clova Extension Kit response documents.",
    )
    app.command(name="sample")(sample)
    app.command(name="check")(check)
    app.callback()(app_main)
    return app


def main() -> None:
    app = create_app()
    app()


if __name__ == "__main__":
    main()
