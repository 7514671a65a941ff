"""
Tests for environment-driven settings
"""

import importlib
import logging

import pytest
from pydantic import ValidationError

from hashtree.core.builder import TreeBuilder, build
from hashtree.core.checker import ConsistencyChecker
from hashtree.core.node import leaf
from hashtree.core.settings import HashTreeSettings, get_settings, load_settings
from hashtree.protocol.enums import ErrorCode, TieBreak
from hashtree.protocol.errors import ConfigurationError
from hashtree.utils.logging import get_logger


class TestSettings:
    """Tests for HashTreeSettings."""

    def test_defaults(self):
        settings = HashTreeSettings()

        assert settings.block_size == 1024
        assert settings.fan_out == 2
        assert settings.tie_break == TieBreak.EMPTY
        assert settings.hash_algorithm == "sha1"
        assert settings.domain_separated is False

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("HASHTREE_BLOCK_SIZE", "4096")
        monkeypatch.setenv("HASHTREE_FAN_OUT", "4")
        monkeypatch.setenv("HASHTREE_TIE_BREAK", "OMIT")

        settings = get_settings()

        assert settings.block_size == 4096
        assert settings.fan_out == 4
        assert settings.tie_break == TieBreak.OMIT

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_invalid_block_size_rejected(self, monkeypatch):
        monkeypatch.setenv("HASHTREE_BLOCK_SIZE", "0")

        with pytest.raises(ValidationError):
            HashTreeSettings()

    def test_invalid_fan_out_rejected(self, monkeypatch):
        monkeypatch.setenv("HASHTREE_FAN_OUT", "1")

        with pytest.raises(ValidationError):
            HashTreeSettings()

    def test_log_level_normalized(self, monkeypatch):
        monkeypatch.setenv("HASHTREE_LOG_LEVEL", "warn")

        assert HashTreeSettings().log_level == "WARNING"

    def test_builder_uses_settings(self, monkeypatch, sha1, sha1_aggregate):
        monkeypatch.setenv("HASHTREE_BLOCK_SIZE", "16")
        monkeypatch.setenv("HASHTREE_TIE_BREAK", "omit")

        builder = TreeBuilder(sha1, sha1_aggregate)
        tree = builder.build(b"x" * 40)

        assert builder.block_size == 16
        assert tree.tie_break == TieBreak.OMIT
        assert tree.leaf_count == 3

    def test_explicit_arguments_win(self, monkeypatch, sha1, sha1_aggregate):
        monkeypatch.setenv("HASHTREE_BLOCK_SIZE", "16")

        builder = TreeBuilder(sha1, sha1_aggregate, block_size=8)

        assert builder.block_size == 8

    def test_usage_example(self, monkeypatch, sha1, sha1_aggregate):
        monkeypatch.setenv("HASHTREE_BLOCK_SIZE", "32")

        settings = load_settings()
        builder = TreeBuilder(sha1, sha1_aggregate, block_size=settings.block_size)

        assert builder.build(b"y" * 64).leaf_count == 2


class TestInvalidEnvironment:
    """A bad HASHTREE_* value fails when settings are needed, not at import."""

    @pytest.mark.parametrize(
        "name,value",
        [
            ("HASHTREE_FAN_OUT", "1"),
            ("HASHTREE_BLOCK_SIZE", "abc"),
            ("HASHTREE_TIE_BREAK", "duplicate"),
        ],
    )
    def test_build_raises_configuration_error(self, monkeypatch, sha1, sha1_aggregate, name, value):
        monkeypatch.setenv(name, value)

        with pytest.raises(ConfigurationError) as exc_info:
            build(b"abc", sha1, sha1_aggregate)

        assert exc_info.value.code == ErrorCode.CONFIGURATION_ERROR

    def test_checker_raises_configuration_error_for_bare_node(self, monkeypatch, sha1, sha1_aggregate):
        monkeypatch.setenv("HASHTREE_FAN_OUT", "1")

        with pytest.raises(ConfigurationError):
            ConsistencyChecker(sha1, sha1_aggregate).check(leaf(sha1(b"x"), b"x"))

    def test_explicit_arguments_bypass_bad_environment(self, monkeypatch, sha1, sha1_aggregate):
        monkeypatch.setenv("HASHTREE_FAN_OUT", "1")

        checker = ConsistencyChecker(sha1, sha1_aggregate, fan_out=2, tie_break=TieBreak.EMPTY)

        assert checker.is_consistent(leaf(sha1(b"x"), b"x"))

    def test_modules_import_with_bad_environment(self, monkeypatch):
        monkeypatch.setenv("HASHTREE_BLOCK_SIZE", "abc")

        import hashtree.core.checker

        importlib.reload(hashtree.core.checker)

        assert get_logger("hashtree.core.checker").name == "hashtree.core.checker"


class TestLogging:
    """Tests for package loggers."""

    def test_loggers_live_under_package_namespace(self):
        assert get_logger("hashtree.core.builder").name == "hashtree.core.builder"
        assert get_logger("custom").name == "hashtree.custom"

    def test_build_logs_summary(self, caplog, sha1, sha1_aggregate):
        with caplog.at_level(logging.DEBUG, logger="hashtree"):
            TreeBuilder(sha1, sha1_aggregate, block_size=4).build(b"abcdefgh")

        assert any("Built hash tree: 2 blocks" in r.getMessage() for r in caplog.records)

    def test_log_level_applied_when_unset(self, monkeypatch):
        monkeypatch.setenv("HASHTREE_LOG_LEVEL", "debug")
        package_logger = logging.getLogger("hashtree")
        previous = package_logger.level
        package_logger.setLevel(logging.NOTSET)

        try:
            load_settings()
            assert package_logger.level == logging.DEBUG
        finally:
            package_logger.setLevel(previous)

    def test_log_level_keeps_application_choice(self, monkeypatch):
        monkeypatch.setenv("HASHTREE_LOG_LEVEL", "debug")
        package_logger = logging.getLogger("hashtree")
        previous = package_logger.level
        package_logger.setLevel(logging.ERROR)

        try:
            load_settings()
            assert package_logger.level == logging.ERROR
        finally:
            package_logger.setLevel(previous)
