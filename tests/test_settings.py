from __future__ import annotations

import pytest

from badgereg.core.errors import InvalidInput
from badgereg.core.settings import DEFAULT_ADMIN, DEFAULT_FEE, Settings
from badgereg.runtime import build_registry
from badgereg.runtime.server import _normalize_base_url


def test_defaults_without_environment() -> None:
    s = Settings.from_env({})
    assert s.admin == DEFAULT_ADMIN
    assert s.fee == DEFAULT_FEE == 10**18
    assert s.journal is None
    assert s.log_level == "info"


def test_environment_values() -> None:
    s = Settings.from_env(
        {
            "BADGEREG_ADMIN": " 0xadmin ",
            "BADGEREG_FEE": "42",
            "BADGEREG_JOURNAL": "/tmp/badges.jsonl",
            "BADGEREG_LOG_LEVEL": "DEBUG",
            "BADGEREG_URL": "127.0.0.1:9000",
        }
    )
    assert s.admin == "0xadmin"
    assert s.fee == 42
    assert s.journal == "/tmp/badges.jsonl"
    assert s.log_level == "debug"
    assert s.url == "127.0.0.1:9000"


def test_invalid_fee_in_environment() -> None:
    with pytest.raises(InvalidInput):
        Settings.from_env({"BADGEREG_FEE": "-3"})


def test_overrides_skip_none() -> None:
    s = Settings.from_env({"BADGEREG_FEE": "42"}).with_overrides(admin="0xboss", fee=None, journal=None)
    assert s.admin == "0xboss"
    assert s.fee == 42


def test_build_registry_replays_configured_journal(tmp_path) -> None:
    journal = tmp_path / "j.jsonl"
    settings = Settings(admin="0xadmin", fee=1, journal=str(journal))

    reg = build_registry(settings)
    reg.register("0xalice", "awesome", 1, caller="0xalice")

    again = build_registry(settings)
    assert again.active_count() == 1
    assert again.balance() == 1


def test_normalize_base_url() -> None:
    assert _normalize_base_url("127.0.0.1:9000/") == "http://127.0.0.1:9000"
    assert _normalize_base_url("  ") == ""
    assert _normalize_base_url("https://reg.example") == "https://reg.example"
