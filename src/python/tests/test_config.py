"""
===============================================================================
QUATKIT - Configuration Test Suite
===============================================================================
Tests for YAML loading, defaults, and validation of QuatkitConfig.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest

import quatkit.config as config_module
from quatkit.config import ConfigError, QuatkitConfig, load_config

SHIPPED_CONFIG = os.path.join(os.path.dirname(__file__), '..', '..', '..',
                              'config', 'quatkit.yaml')


def write_yaml(tmp_path, text):
    path = tmp_path / 'quatkit.yaml'
    path.write_text(text)
    return path


# =============================================================================
# Test: Loading
# =============================================================================

class TestLoadConfig:
    """Tests for load_config()."""

    def test_shipped_config_matches_defaults(self):
        """The repository's config file spells out the built-in defaults."""
        assert load_config(SHIPPED_CONFIG) == QuatkitConfig()

    def test_full_file(self, tmp_path):
        path = write_yaml(tmp_path, """
logging:
  level: debug
  file: quatkit.log
angles:
  units: degrees
output:
  precision: 4
checked: true
""")
        config = load_config(path)
        assert config.log_level == 'DEBUG'
        assert config.log_file == 'quatkit.log'
        assert config.angle_units == 'degrees'
        assert config.degrees
        assert config.precision == 4
        assert config.checked is True

    def test_partial_file_uses_defaults(self, tmp_path):
        path = write_yaml(tmp_path, "output:\n  precision: 3\n")
        config = load_config(str(path))
        assert config.precision == 3
        assert config.log_level == 'WARNING'
        assert config.angle_units == 'radians'
        assert config.checked is False

    def test_empty_file(self, tmp_path):
        assert load_config(write_yaml(tmp_path, "")) == QuatkitConfig()

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / 'missing.yaml')

    def test_missing_default_file_gives_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config_module, 'DEFAULT_CONFIG_PATHS',
                            (tmp_path / 'absent.yaml', tmp_path / 'also_absent.yaml'))
        assert load_config() == QuatkitConfig()

    def test_default_path_is_read(self, tmp_path, monkeypatch):
        path = write_yaml(tmp_path, "angles:\n  units: degrees\n")
        monkeypatch.setattr(config_module, 'DEFAULT_CONFIG_PATHS', (tmp_path / 'absent.yaml', path))
        assert load_config().degrees

    def test_working_directory_config_is_found(self, tmp_path, monkeypatch):
        """An installed package finds ./config/quatkit.yaml from the cwd."""
        (tmp_path / 'config').mkdir()
        (tmp_path / 'config' / 'quatkit.yaml').write_text("output:\n  precision: 5\n")
        monkeypatch.chdir(tmp_path)
        assert load_config().precision == 5

    def test_working_directory_wins_over_checkout(self, tmp_path, monkeypatch):
        checkout = tmp_path / 'checkout.yaml'
        checkout.write_text("checked: false\n")
        workdir = tmp_path / 'work'
        (workdir / 'config').mkdir(parents=True)
        (workdir / 'config' / 'quatkit.yaml').write_text("checked: true\n")
        monkeypatch.setattr(config_module, 'DEFAULT_CONFIG_PATHS',
                            (config_module.DEFAULT_CONFIG_PATHS[0], checkout))
        monkeypatch.chdir(workdir)
        assert load_config().checked is True


# =============================================================================
# Test: Validation
# =============================================================================

class TestValidation:
    """Invalid values raise ConfigError."""

    @pytest.mark.parametrize("text", [
        "logging:\n  level: LOUD\n",
        "angles:\n  units: gradians\n",
        "output:\n  precision: -1\n",
        "output:\n  precision: 2.5\n",
        "checked: maybe\n",
        "angles: degrees\n",
        "- just\n- a list\n",
    ])
    def test_invalid_values(self, tmp_path, text):
        with pytest.raises(ConfigError):
            load_config(write_yaml(tmp_path, text))

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            QuatkitConfig(precision=-3)

    def test_level_is_case_insensitive(self):
        assert QuatkitConfig(log_level='info').log_level == 'INFO'
