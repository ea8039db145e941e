"""配置测试 — config.py."""

import json
import logging

import pytest
from pydantic import ValidationError

from diary.config import (
    DEFAULT_CONFIG,
    DiaryConfig,
    RetentionLimits,
    load_config,
    merge_config,
    validate_config,
)
from diary.exceptions import ConfigError


def _write_config(root, text, name=".config.json"):
    path = root / ".claude" / "diary" / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestDefaults:
    def test_mode_defaults(self):
        assert DEFAULT_CONFIG.diary.limits.prompt_length == 200
        assert DEFAULT_CONFIG.recovery.limits.prompt_length == 150
        assert DEFAULT_CONFIG.recovery.min_activity == 1
        limits = DEFAULT_CONFIG.recovery.limits
        assert (limits.user_prompts, limits.tool_calls, limits.last_message_length, limits.errors) == (5, 10, 500, 5)

    def test_for_mode(self):
        assert DEFAULT_CONFIG.for_mode("recovery") is DEFAULT_CONFIG.recovery
        assert DEFAULT_CONFIG.for_mode("diary") is DEFAULT_CONFIG.diary

    def test_aliases(self):
        limits = RetentionLimits.model_validate({"userPrompts": 2, "lastMessageLength": 40})
        assert limits.user_prompts == 2
        assert limits.last_message_length == 40

    def test_negative_limit_rejected(self):
        with pytest.raises(ValidationError):
            RetentionLimits(tool_calls=-1)


class TestMergeConfig:
    def test_partial_overlay(self):
        config = merge_config({"recovery": {"minActivity": 3, "limits": {"toolCalls": 4}}})
        assert config.recovery.min_activity == 3
        assert config.recovery.limits.tool_calls == 4
        assert config.recovery.limits.prompt_length == 150
        assert config.diary == DEFAULT_CONFIG.diary

    def test_diary_section(self):
        config = merge_config({"diary": {"limits": {"promptLength": 80}}})
        assert config.diary.limits.prompt_length == 80
        assert config.diary.limits.user_prompts == 5

    def test_non_dict_returns_defaults(self):
        assert merge_config(["x"]) is DEFAULT_CONFIG
        assert merge_config(None) is DEFAULT_CONFIG

    def test_pure(self):
        data = {"recovery": {"limits": {"errors": 1}}}
        merge_config(data)
        assert data == {"recovery": {"limits": {"errors": 1}}}
        assert DEFAULT_CONFIG.recovery.limits.errors == 5


class TestLoadConfig:
    def test_missing_file(self, tmp_path):
        assert load_config(tmp_path) is DEFAULT_CONFIG

    def test_json_file(self, tmp_path):
        _write_config(tmp_path, json.dumps({"recovery": {"minActivity": 0}}))
        assert load_config(tmp_path).recovery.min_activity == 0

    def test_yaml_takes_precedence(self, tmp_path):
        _write_config(tmp_path, json.dumps({"recovery": {"minActivity": 2}}))
        _write_config(tmp_path, "recovery:\n  minActivity: 7\n", name=".config.yaml")
        assert load_config(tmp_path).recovery.min_activity == 7

    def test_malformed_json_falls_back(self, tmp_path, caplog):
        _write_config(tmp_path, "{oops")
        with caplog.at_level(logging.WARNING, logger="diary.config"):
            assert load_config(tmp_path) is DEFAULT_CONFIG
        assert "读取配置失败" in caplog.text

    def test_invalid_values_fall_back(self, tmp_path, caplog):
        _write_config(tmp_path, json.dumps({"recovery": {"limits": {"errors": -2}}}))
        with caplog.at_level(logging.WARNING, logger="diary.config"):
            assert load_config(tmp_path) is DEFAULT_CONFIG
        assert "配置校验失败" in caplog.text

    def test_non_object_document(self, tmp_path):
        _write_config(tmp_path, "[1, 2]")
        assert load_config(tmp_path) is DEFAULT_CONFIG


class TestValidateConfig:
    def test_valid(self, tmp_path):
        _write_config(tmp_path, json.dumps({"diary": {"limits": {"errors": 2}}}))
        assert isinstance(validate_config(tmp_path), DiaryConfig)

    def test_no_file(self, tmp_path):
        assert validate_config(tmp_path) is DEFAULT_CONFIG

    def test_bad_section_type(self, tmp_path):
        _write_config(tmp_path, json.dumps({"recovery": 5}))
        with pytest.raises(ConfigError) as exc_info:
            validate_config(tmp_path)
        assert "recovery: 必须是对象" in exc_info.value.errors

    def test_bad_value(self, tmp_path):
        _write_config(tmp_path, json.dumps({"recovery": {"limits": {"toolCalls": "many"}}}))
        with pytest.raises(ConfigError) as exc_info:
            validate_config(tmp_path)
        assert any("toolCalls" in err for err in exc_info.value.errors)
