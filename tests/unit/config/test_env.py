"""Tests for EnvReader class."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from stickerfit.config.env import EnvReader


class TestEnvReaderGetStr:
    """Tests for EnvReader.get_str method."""

    def test_returns_value_when_set(self) -> None:
        reader = EnvReader(env={"MY_VAR": "hello"})
        assert reader.get_str("MY_VAR") == "hello"

    def test_returns_default_when_not_set(self) -> None:
        reader = EnvReader(env={})
        assert reader.get_str("MY_VAR", "default") == "default"

    def test_returns_empty_string_when_set_to_empty(self) -> None:
        """An empty value is still a value."""
        reader = EnvReader(env={"MY_VAR": ""})
        assert reader.get_str("MY_VAR", "default") == ""


class TestEnvReaderGetInt:
    """Tests for EnvReader.get_int method."""

    def test_parses_integer(self) -> None:
        reader = EnvReader(env={"MY_VAR": "42"})
        assert reader.get_int("MY_VAR") == 42

    def test_returns_default_when_not_set(self) -> None:
        assert EnvReader(env={}).get_int("MY_VAR", 100) == 100

    def test_invalid_value_warns_and_returns_default(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        reader = EnvReader(env={"MY_VAR": "lots"})
        with caplog.at_level(logging.WARNING):
            assert reader.get_int("MY_VAR", 7) == 7
        assert "Invalid integer value for MY_VAR" in caplog.text


class TestEnvReaderGetFloat:
    def test_parses_float(self) -> None:
        assert EnvReader(env={"T": "2.5"}).get_float("T") == 2.5

    def test_invalid_returns_default(self) -> None:
        assert EnvReader(env={"T": "soon"}).get_float("T", 1.0) == 1.0


class TestEnvReaderGetBool:
    @pytest.mark.parametrize("value", ["true", "1", "YES", "On"])
    def test_truthy(self, value: str) -> None:
        assert EnvReader(env={"B": value}).get_bool("B") is True

    @pytest.mark.parametrize("value", ["false", "0", "no", "nope"])
    def test_falsy(self, value: str) -> None:
        assert EnvReader(env={"B": value}).get_bool("B") is False

    def test_default(self) -> None:
        assert EnvReader(env={}).get_bool("B", True) is True


class TestEnvReaderGetPath:
    def test_existing_path(self, tmp_path: Path) -> None:
        reader = EnvReader(env={"P": str(tmp_path)})
        assert reader.get_path("P") == tmp_path

    def test_missing_path_returns_default(self, tmp_path: Path) -> None:
        reader = EnvReader(env={"P": str(tmp_path / "nope")})
        assert reader.get_path("P") is None

    def test_missing_path_allowed(self, tmp_path: Path) -> None:
        reader = EnvReader(env={"P": str(tmp_path / "nope")})
        assert reader.get_path("P", must_exist=False) == tmp_path / "nope"

    def test_expands_tilde(self) -> None:
        reader = EnvReader(env={"P": "~/stickers"})
        assert reader.get_path("P", must_exist=False) == Path.home() / "stickers"


class TestEnvReaderGetIntList:
    """Tests for EnvReader.get_int_list method."""

    def test_parses_list(self) -> None:
        reader = EnvReader(env={"D": "10, 8,6"})
        assert reader.get_int_list("D") == [10, 8, 6]

    def test_ignores_empty_items(self) -> None:
        assert EnvReader(env={"D": "5,,3,"}).get_int_list("D") == [5, 3]

    def test_blank_returns_default(self) -> None:
        assert EnvReader(env={"D": " , "}).get_int_list("D", [1]) == [1]

    def test_invalid_returns_default(self) -> None:
        assert EnvReader(env={"D": "10,eight"}).get_int_list("D") is None

    def test_not_set(self) -> None:
        assert EnvReader(env={}).get_int_list("D") is None
