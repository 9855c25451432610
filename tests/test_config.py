"""Tests for settings loading and registry defaults."""

from pydantic_settings import SettingsConfigDict

from eventext import EventRegistry, ListenerRunnerStrategy
from eventext import registry as registry_module
from eventext.config import Settings


class TestSettings:
    """Test settings sources and defaults."""

    def test_defaults(self):
        """Test settings load with defaults when no source is present."""
        settings = Settings()

        assert settings.auto_register is False
        assert settings.listener_runner_strategy is ListenerRunnerStrategy.ORDERED_BY_EVENTS
        assert settings.logging.level == "INFO"
        assert settings.logging.stream is False
        assert settings.logging.logs_dir is None

    def test_init_arguments(self):
        """Test init arguments override defaults."""
        settings = Settings(auto_register=True, listener_runner_strategy=0)

        assert settings.auto_register is True
        assert settings.listener_runner_strategy is ListenerRunnerStrategy.ORDERED_BY_LISTENER_ID

    def test_environment_variables(self, monkeypatch):
        """Test prefixed and nested environment variables are read."""
        monkeypatch.setenv("EVENTEXT_AUTO_REGISTER", "true")
        monkeypatch.setenv("EVENTEXT_LOGGING__LEVEL", "DEBUG")

        settings = Settings()

        assert settings.auto_register is True
        assert settings.logging.level == "DEBUG"

    def test_toml_file(self, tmp_path):
        """Test values are read from the TOML config file."""
        config_file = tmp_path / "eventext.toml"
        config_file.write_text(
            "auto_register = true\n"
            "listener_runner_strategy = 0\n"
            "\n"
            "[logging]\n"
            'level = "WARNING"\n'
            f'logs_dir = "{(tmp_path / "logs").as_posix()}"\n'
        )

        class FileSettings(Settings):
            model_config = SettingsConfigDict(toml_file=config_file)

        settings = FileSettings()

        assert settings.auto_register is True
        assert settings.listener_runner_strategy is ListenerRunnerStrategy.ORDERED_BY_LISTENER_ID
        assert settings.logging.level == "WARNING"
        assert settings.logging.logs_dir == tmp_path / "logs"

    def test_environment_overrides_toml(self, tmp_path, monkeypatch):
        """Test environment variables take precedence over the TOML file."""
        config_file = tmp_path / "eventext.toml"
        config_file.write_text("auto_register = true\n")
        monkeypatch.setenv("EVENTEXT_AUTO_REGISTER", "false")

        class FileSettings(Settings):
            model_config = SettingsConfigDict(toml_file=config_file)

        assert FileSettings().auto_register is False


class TestRegistryDefaults:
    """Test registries pick up their defaults from settings."""

    def test_registry_uses_settings(self, monkeypatch):
        """Test a registry built without arguments follows the settings."""
        monkeypatch.setattr(
            registry_module,
            "settings",
            Settings(auto_register=True, listener_runner_strategy=0),
        )

        registry = EventRegistry()

        assert registry.auto_register is True
        assert registry.get_listener_runner_strategy() == 0

    def test_constructor_overrides_settings(self, monkeypatch):
        """Test explicit constructor arguments win over settings."""
        monkeypatch.setattr(
            registry_module,
            "settings",
            Settings(auto_register=True, listener_runner_strategy=0),
        )

        registry = EventRegistry(auto_register=False, strategy=1)

        assert registry.auto_register is False
        assert registry.get_listener_runner_strategy() == 1
