"""Unit tests for settings loading."""

from pathlib import Path

import pytest

from coursegate.config import ConfigError, Settings, load_settings


@pytest.mark.unit
class TestLoadSettings:
    """Tests for load_settings."""

    def test_defaults(self) -> None:
        """No file and no environment gives the defaults."""
        settings = load_settings(environ={})

        assert settings.db_path == "coursegate.db"
        assert settings.lock_timeout == 5.0
        assert settings.busy_timeout == 5.0
        assert settings.log_dir == "logs"
        assert settings.log_level == "INFO"
        assert settings.credits == {}

    def test_from_yaml(self, tmp_path: Path) -> None:
        config = tmp_path / "coursegate.yaml"
        config.write_text(
            "db_path: data/school.db\n"
            "lock_timeout: 2.5\n"
            "log_level: debug\n"
            "credits:\n"
            "  CS101: 4\n"
            "  CS201: 3.5\n"
        )

        settings = load_settings(config, environ={})

        assert settings.db_path == "data/school.db"
        assert settings.lock_timeout == 2.5
        assert settings.log_level == "DEBUG"
        assert settings.credits == {"CS101": 4.0, "CS201": 3.5}

    def test_empty_yaml(self, tmp_path: Path) -> None:
        config = tmp_path / "coursegate.yaml"
        config.write_text("")

        assert load_settings(config, environ={}) == Settings()

    def test_env_overrides_file(self, tmp_path: Path) -> None:
        """COURSEGATE_* variables win over the file."""
        config = tmp_path / "coursegate.yaml"
        config.write_text("db_path: from-file.db\nlock_timeout: 2\n")

        settings = load_settings(
            config,
            environ={"COURSEGATE_DB_PATH": "from-env.db", "COURSEGATE_BUSY_TIMEOUT": "9"},
        )

        assert settings.db_path == "from-env.db"
        assert settings.lock_timeout == 2.0
        assert settings.busy_timeout == 9.0

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "missing.yaml", environ={})

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        config = tmp_path / "coursegate.yaml"
        config.write_text("db_path: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(config, environ={})

    def test_non_mapping(self, tmp_path: Path) -> None:
        config = tmp_path / "coursegate.yaml"
        config.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_settings(config, environ={})

    def test_unknown_key(self, tmp_path: Path) -> None:
        config = tmp_path / "coursegate.yaml"
        config.write_text("db_pth: typo.db\n")

        with pytest.raises(ConfigError, match="db_pth"):
            load_settings(config, environ={})

    @pytest.mark.parametrize("value", ["0", "-1", "soon"])
    def test_invalid_timeout(self, value: str) -> None:
        with pytest.raises(ConfigError, match="lock_timeout"):
            load_settings(environ={"COURSEGATE_LOCK_TIMEOUT": value})

    def test_invalid_credits(self) -> None:
        with pytest.raises(ConfigError, match="credits"):
            Settings.from_dict({"credits": ["CS101"]})
