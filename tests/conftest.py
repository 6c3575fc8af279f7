from pathlib import Path

import pytest

from clova_cek import config as config_module
from clova_cek.builder import ResponseBuilder


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        config_module, "HOME_CONFIG_PATH", tmp_path / "home" / ".clova" / "clova.toml"
    )
    monkeypatch.delenv(config_module.ENV_VERSION, raising=False)
    monkeypatch.delenv(config_module.ENV_DEFAULT_LANG, raising=False)
    return tmp_path


@pytest.fixture
def builder() -> ResponseBuilder:
    return ResponseBuilder()


@pytest.fixture
def fixture_path() -> Path:
    return Path(__file__).parent / "fixtures"
