from __future__ import annotations

import pytest

from config import SheetConfig, dict_to_user, load_config, user_to_dict
from errors import ConfigError
from models import User


def test_load_config_reads_mapping():
    cfg = load_config({
        "SHEET_ID": " doc123 ",
        "USERS_SHEET": "Members",
        "EXPENSES_SHEET": "Spend",
        "SHEETS_TIMEOUT": "2.5",
    })
    assert cfg.sheet_id == "doc123"
    assert cfg.sheet_names == ["Members", "Payments", "Trip", "Spend"]
    assert cfg.timeout == 2.5
    assert cfg.max_attempts == 3
    assert cfg.initial_backoff == 1.0


def test_load_config_requires_sheet_id():
    with pytest.raises(ConfigError):
        load_config({"USERS_SHEET": "Users"})


def test_load_config_rejects_bad_timeout():
    with pytest.raises(ConfigError):
        load_config({"SHEET_ID": "doc", "SHEETS_TIMEOUT": "soon"})


def test_load_config_from_environment(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("SHEET_ID", "from-env")
    monkeypatch.setenv("TRIP_SHEET", "Details")
    cfg = load_config()
    assert cfg.sheet_id == "from-env"
    assert cfg.trip_sheet == "Details"


def test_sheet_config_is_immutable():
    cfg = SheetConfig(sheet_id="doc")
    with pytest.raises(AttributeError):
        cfg.sheet_id = "other"


def test_user_dict_roundtrip():
    user = User("Bob", "pw2", "admin")
    assert dict_to_user(user_to_dict(user)) == user
    assert dict_to_user({"name": "Ann"}) == User("Ann", "", "member")
