"""Diary 配置 — 每种模式的保留上限与 recovery 活动阈值."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from diary.exceptions import ConfigError
from diary.models import DocumentMode
from diary.paths import config_candidates

logger = logging.getLogger(__name__)


class RetentionLimits(BaseModel):
    """各类内容的保留条数 / 截断长度."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    user_prompts: int = Field(default=5, ge=0, alias="userPrompts", description="保留最近 N 条用户提问")
    prompt_length: int = Field(default=150, ge=0, alias="promptLength", description="提问采集截断长度")
    tool_calls: int = Field(default=10, ge=0, alias="toolCalls", description="保留最近 N 次工具调用")
    last_message_length: int = Field(
        default=500, ge=0, alias="lastMessageLength", description="最后一段助手文本的截断长度"
    )
    errors: int = Field(default=5, ge=0, description="保留最近 N 条错误")


class ModeConfig(BaseModel):
    """单个模式（diary / recovery）的配置."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    min_activity: int = Field(default=1, alias="minActivity", description="recovery 模式的最低活动量")
    limits: RetentionLimits = Field(default_factory=RetentionLimits)


class DiaryConfig(BaseModel):
    """完整配置，按模式分节."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    diary: ModeConfig = Field(
        default_factory=lambda: ModeConfig(limits=RetentionLimits(prompt_length=200))
    )
    recovery: ModeConfig = Field(default_factory=ModeConfig)

    def for_mode(self, mode: DocumentMode) -> ModeConfig:
        return self.recovery if mode == "recovery" else self.diary


DEFAULT_CONFIG = DiaryConfig()


def _overlay_mode(default: ModeConfig, section: Any) -> ModeConfig:
    if not isinstance(section, dict):
        return default
    limits = default.limits.model_dump(by_alias=True)
    user_limits = section.get("limits")
    if isinstance(user_limits, dict):
        limits.update(user_limits)
    return ModeConfig(
        min_activity=section.get("minActivity", default.min_activity),
        limits=RetentionLimits.model_validate(limits),
    )


def merge_config(data: Any, defaults: DiaryConfig = DEFAULT_CONFIG) -> DiaryConfig:
    """默认值叠加用户配置的子集（纯函数）.

    Raises:
        ValidationError: 用户提供的值不合法（如负数上限）.
    """
    if not isinstance(data, dict):
        return defaults
    return DiaryConfig(
        diary=_overlay_mode(defaults.diary, data.get("diary")),
        recovery=_overlay_mode(defaults.recovery, data.get("recovery")),
    )


def _read_config_data(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def find_config_file(project_dir: Path | None = None) -> Path | None:
    for candidate in config_candidates(project_dir):
        if candidate.is_file():
            return candidate
    return None


def load_config(project_dir: Path | None = None) -> DiaryConfig:
    """从 .claude/diary/.config.{yaml,json} 加载配置.

    文件缺失、无法解析或校验失败时都退回默认值，不抛异常。
    """
    path = find_config_file(project_dir)
    if path is None:
        return DEFAULT_CONFIG
    try:
        data = _read_config_data(path)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        logger.warning("读取配置失败，使用默认值: %s (%s)", path, e)
        return DEFAULT_CONFIG
    if data is not None and not isinstance(data, dict):
        logger.warning("配置文件顶层不是对象，使用默认值: %s", path)
        return DEFAULT_CONFIG
    try:
        return merge_config(data)
    except ValidationError as e:
        logger.warning("配置校验失败，使用默认值: %s (%d 个错误)", path, e.error_count())
        return DEFAULT_CONFIG


def validate_config(project_dir: Path | None = None) -> DiaryConfig:
    """严格校验配置文件，供 `config check` 使用.

    Raises:
        ConfigError: 文件无法解析或内容不合法.
    """
    path = find_config_file(project_dir)
    if path is None:
        return DEFAULT_CONFIG
    try:
        data = _read_config_data(path)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(path, [str(e)]) from e
    if data is None:
        return DEFAULT_CONFIG
    if not isinstance(data, dict):
        raise ConfigError(path, ["顶层必须是对象"])

    errors: list[str] = []
    for section in ("diary", "recovery"):
        value = data.get(section)
        if value is not None and not isinstance(value, dict):
            errors.append(f"{section}: 必须是对象")
        elif isinstance(value, dict) and "limits" in value and not isinstance(value["limits"], dict):
            errors.append(f"{section}.limits: 必须是对象")
    if errors:
        raise ConfigError(path, errors)

    try:
        return merge_config(data)
    except ValidationError as e:
        messages = [
            ".".join(str(part) for part in err["loc"]) + f": {err['msg']}" for err in e.errors()
        ]
        raise ConfigError(path, messages) from e


__all__ = [
    "DEFAULT_CONFIG",
    "DiaryConfig",
    "ModeConfig",
    "RetentionLimits",
    "find_config_file",
    "load_config",
    "merge_config",
    "validate_config",
]
