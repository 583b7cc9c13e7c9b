from pathlib import Path

import pytest

from mediagen.config import ServiceConfig, load_config, load_settings, parse_settings
from mediagen.models import DEFAULT_POLL_POLICIES, MediaKind, PollPolicy

EXAMPLE_CONFIG = Path(__file__).resolve().parent.parent / "config.example.yaml"


def test_example_config_parses():
    settings = load_settings(EXAMPLE_CONFIG)
    assert settings.service("kie").base_url == "https://api.kie.ai"
    assert settings.timeout == 60
    assert settings.polling[MediaKind.VIDEO] == PollPolicy(interval=5, max_attempts=120)
    assert settings.download_dir == Path("output")


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")
    settings = load_settings(path)
    assert settings.polling == DEFAULT_POLL_POLICIES
    assert set(settings.services) >= {"kie", "minimax", "pixazo", "presenton", "heygen", "xai"}


def test_overrides(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "services:\n"
        "  kie:\n"
        "    api_key: real-key\n"
        "    base_url: https://proxy.local/kie/\n"
        "  custom:\n"
        "    base_url: https://custom.local\n"
        "    auth_header: X-Token\n"
        "    auth_prefix: ''\n"
        "http:\n"
        "  timeout: 15\n"
        "polling:\n"
        "  image:\n"
        "    max_attempts: 10\n",
        encoding="utf-8",
    )
    settings = load_settings(path)

    kie = settings.service("kie")
    assert kie.base_url == "https://proxy.local/kie"
    assert kie.auth_headers() == {"Authorization": "Bearer real-key"}
    custom = settings.service("custom")
    assert (custom.auth_header, custom.auth_prefix, custom.env_var) == ("X-Token", "", "CUSTOM_API_KEY")
    assert settings.timeout == 15
    assert settings.polling[MediaKind.IMAGE] == PollPolicy(interval=2, max_attempts=10)


def test_unknown_service_without_base_url():
    with pytest.raises(ValueError, match="needs a base_url"):
        parse_settings({"services": {"mystery": {"api_key": "k"}}})


def test_unknown_polling_kind():
    with pytest.raises(ValueError, match="Unknown media kind"):
        parse_settings({"polling": {"hologram": {"interval": 1}}})


def test_invalid_polling_values():
    with pytest.raises(ValueError):
        parse_settings({"polling": {"video": {"max_attempts": 0}}})


def test_unknown_service_lookup():
    with pytest.raises(ValueError, match="No service named"):
        parse_settings({}).service("nope")


class TestApiKeys:
    def test_placeholder_falls_back_to_env(self, monkeypatch):
        monkeypatch.setenv("KIE_API_KEY", "from-env")
        service = ServiceConfig("kie", "https://api.kie.ai", api_key="YOUR_KIE_API_KEY")
        assert service.require_key() == "from-env"

    def test_config_value_wins_over_env(self, monkeypatch):
        monkeypatch.setenv("KIE_API_KEY", "from-env")
        assert ServiceConfig("kie", "https://api.kie.ai", api_key="cfg").require_key() == "cfg"

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("HEYGEN_API_KEY", raising=False)
        service = ServiceConfig("heygen", "https://api.heygen.com", auth_header="X-Api-Key", auth_prefix="")
        with pytest.raises(ValueError, match="HEYGEN_API_KEY"):
            service.auth_headers()

    def test_custom_header_without_prefix(self):
        service = ServiceConfig("pixazo", "https://x", api_key="k", auth_header="Ocp-Apim-Subscription-Key", auth_prefix="")
        assert service.auth_headers() == {"Ocp-Apim-Subscription-Key": "k"}
