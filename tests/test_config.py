import os

import pytest

from simbridge import config
from simbridge.errors import ConfigError


def _no_installed_idb(monkeypatch):
    monkeypatch.setattr(config, "_is_executable", lambda path: False)
    monkeypatch.setattr(os.path, "exists", lambda path: False)
    monkeypatch.setattr(config.shutil, "which", lambda name: None)


def test_find_idb_prefers_env_override(monkeypatch):
    monkeypatch.setattr(config, "_is_executable", lambda path: True)
    assert config.find_idb({"IDB_PATH": "/custom/idb"}) == "/custom/idb"


def test_find_idb_checks_venv_bin_before_well_known_paths(monkeypatch):
    venv_idb = os.path.join(os.path.dirname(config.sys.executable), "idb")
    monkeypatch.setattr(config, "_is_executable", lambda path: path == venv_idb)
    monkeypatch.setattr(os.path, "exists", lambda path: True)

    assert config.find_idb({}) == venv_idb


def test_find_idb_uses_first_existing_candidate(monkeypatch):
    _no_installed_idb(monkeypatch)
    monkeypatch.setattr(os.path, "exists", lambda path: path == "/usr/local/bin/idb")

    assert config.find_idb({}) == "/usr/local/bin/idb"


def test_find_idb_falls_back_to_path_then_bare_name(monkeypatch):
    _no_installed_idb(monkeypatch)
    monkeypatch.setattr(config.shutil, "which", lambda name: "/somewhere/bin/idb")
    assert config.find_idb({}) == "/somewhere/bin/idb"

    monkeypatch.setattr(config.shutil, "which", lambda name: None)
    assert config.find_idb({}) == "idb"


def test_load_config_defaults(monkeypatch):
    _no_installed_idb(monkeypatch)

    cfg = config.load_config({})

    assert cfg.backend == "idb"
    assert cfg.idb_path == "idb"
    assert cfg.cliclick_path == "cliclick"
    assert cfg.title_bar_height == 28
    assert cfg.timeout is None


def test_load_config_reads_environment(monkeypatch):
    _no_installed_idb(monkeypatch)

    cfg = config.load_config({
        "SIM_BACKEND": "Desktop",
        "IDB_PATH": "/opt/idb",
        "CLICLICK_PATH": "/opt/homebrew/bin/cliclick",
        "SIM_TITLE_BAR_HEIGHT": "32",
        "SIM_COMMAND_TIMEOUT": "12.5",
    })

    assert cfg.backend == "desktop"
    assert cfg.idb_path == "/opt/idb"
    assert cfg.cliclick_path == "/opt/homebrew/bin/cliclick"
    assert cfg.title_bar_height == 32
    assert cfg.timeout == 12.5


@pytest.mark.parametrize("env, message", [
    ({"SIM_BACKEND": "appium"}, "SIM_BACKEND"),
    ({"SIM_TITLE_BAR_HEIGHT": "tall"}, "SIM_TITLE_BAR_HEIGHT"),
    ({"SIM_COMMAND_TIMEOUT": "soon"}, "SIM_COMMAND_TIMEOUT"),
    ({"SIM_COMMAND_TIMEOUT": "-1"}, "positive"),
])
def test_load_config_rejects_bad_values(monkeypatch, env, message):
    _no_installed_idb(monkeypatch)

    with pytest.raises(ConfigError, match=message):
        config.load_config(env)
