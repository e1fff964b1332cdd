"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from gh_cmdlets.config import (
    Configuration,
    get_configuration,
    load_config,
    reset_configuration,
    save_config,
    set_configuration,
    use_configuration,
)


class TestConfigurationDefaults:
    """Tests for default values."""

    def test_defaults(self) -> None:
        config = Configuration()

        assert config.api_host_name == "github.com"
        assert config.api_version == "2022-11-28"
        assert config.web_request_timeout_sec == 0
        assert config.maximum_retries_when_result_not_ready == 30
        assert config.retry_delay_seconds == 30
        assert config.state_change_delay_seconds == 0
        assert config.multi_request_progress_threshold == 10
        assert config.disable_smarter_objects is False
        assert config.disable_pipeline_support is False
        assert config.default_owner_name is None
        assert config.token_env == "GITHUB_TOKEN"
        assert config.is_github_dot_com


class TestConfigurationValidation:
    """Tests for config validation rules."""

    def test_host_name_lowercased(self) -> None:
        config = Configuration(api_host_name="GHE.Example.COM")
        assert config.api_host_name == "ghe.example.com"
        assert not config.is_github_dot_com

    @pytest.mark.parametrize("host", ["https://github.com", "github.com/api", ""])
    def test_host_name_rejected(self, host: str) -> None:
        with pytest.raises(ValidationError):
            Configuration(api_host_name=host)

    def test_api_version_pattern(self) -> None:
        with pytest.raises(ValidationError):
            Configuration(api_version="28-11-2022")

    @pytest.mark.parametrize(
        "field",
        ["retry_delay_seconds", "maximum_retries_when_result_not_ready", "multi_request_progress_threshold"],
    )
    def test_negative_values_rejected(self, field: str) -> None:
        with pytest.raises(ValidationError):
            Configuration.model_validate({field: -1})


class TestConfigLoading:
    """Tests for YAML load and save."""

    def test_load_valid_config(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "api_host_name: ghe.example.com\n"
            "retry_delay_seconds: 5\n"
            "default_owner_name: octo-org\n"
            "disable_telemetry: true\n"
        )

        config = load_config(path)

        assert config.api_host_name == "ghe.example.com"
        assert config.retry_delay_seconds == 5
        assert config.default_owner_name == "octo-org"
        assert config.disable_telemetry is True

    def test_load_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path) == Configuration()

    def test_load_missing_file(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(Path("/nonexistent/config.yaml"))

    def test_load_invalid_value(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("retry_delay_seconds: -3\n")
        with pytest.raises(ValidationError):
            load_config(path)

    def test_save_omits_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "config.yaml"
        save_config(Configuration(default_owner_name="octo-org", retry_delay_seconds=1), path)

        assert yaml.safe_load(path.read_text()) == {"default_owner_name": "octo-org", "retry_delay_seconds": 1.0}

    def test_save_then_load(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        config = Configuration(api_host_name="ghe.example.com", disable_pii_protection=True)
        save_config(config, path)
        assert load_config(path) == config


class TestCurrentConfiguration:
    """Tests for the process-wide configuration."""

    def test_set_configuration(self) -> None:
        updated = set_configuration(default_owner_name="octo-org", retry_delay_seconds=2)

        assert updated is get_configuration()
        assert get_configuration().default_owner_name == "octo-org"
        assert get_configuration().retry_delay_seconds == 2

    def test_set_configuration_keeps_other_values(self) -> None:
        set_configuration(default_owner_name="octo-org")
        set_configuration(default_repository_name="hello-world")

        assert get_configuration().default_owner_name == "octo-org"
        assert get_configuration().default_repository_name == "hello-world"

    def test_invalid_value_keeps_current(self) -> None:
        set_configuration(retry_delay_seconds=2)
        with pytest.raises(ValidationError):
            set_configuration(retry_delay_seconds=-1)

        assert get_configuration().retry_delay_seconds == 2

    def test_unknown_key(self) -> None:
        with pytest.raises(ValueError, match="Unknown configuration value"):
            set_configuration(retry_delay=2)

    def test_use_and_reset(self) -> None:
        use_configuration(Configuration(api_host_name="ghe.example.com"))
        assert get_configuration().api_host_name == "ghe.example.com"

        assert reset_configuration() == Configuration()
        assert get_configuration().api_host_name == "github.com"
