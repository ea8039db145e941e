"""记录分类 — 把一行 JSON 判定为固定几种形状之一.

Claude Code 的 transcript 每行是一个 JSON 对象，常见形状::

    {"type": "user", "message": {"role": "user", "content": "修一下这个 bug"}}
    {"type": "assistant", "message": {"role": "assistant", "content": [
        {"type": "text", "text": "..."},
        {"type": "tool_use", "id": "toolu_1", "name": "Edit", "input": {...}}]}}
    {"type": "user", "message": {"role": "user", "content": [
        {"type": "tool_result", "tool_use_id": "toolu_1", "content": [{"type": "text", "text": "..."}]}]}}

另外任意记录上都可能挂一个顶层 ``toolUseResult`` 字段（旧格式的结果通道）。
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class UserPrompt:
    text: str


@dataclass(frozen=True)
class AssistantText:
    text: str


@dataclass(frozen=True)
class ToolInvocationEvent:
    name: str
    input: Any
    correlation_id: str | None
    timestamp: str | None


@dataclass(frozen=True)
class ToolResult:
    correlation_id: str | None
    fragments: tuple[str, ...]


@dataclass(frozen=True)
class LegacyResult:
    fragments: tuple[str, ...]


@dataclass(frozen=True)
class Unrecognized:
    reason: str = ""


Event = Union[UserPrompt, AssistantText, ToolInvocationEvent, ToolResult, LegacyResult, Unrecognized]


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return value if isinstance(value, str) else str(value)


def _text_fragments(items: Any) -> tuple[str, ...]:
    """取出 [{"type": "text", "text": "..."}] 中的文本片段."""
    if isinstance(items, dict):
        items = [items]
    if not isinstance(items, list):
        return ()
    return tuple(
        item["text"]
        for item in items
        if isinstance(item, dict) and item.get("type") == "text" and isinstance(item.get("text"), str)
    )


def _classify_assistant_blocks(record: dict[str, Any], blocks: list[Any]) -> list[Event]:
    events: list[Event] = []
    timestamp = _optional_str(record.get("timestamp"))
    for block in blocks:
        if not isinstance(block, dict):
            continue
        block_type = block.get("type")
        if block_type == "text" and isinstance(block.get("text"), str):
            events.append(AssistantText(block["text"]))
        elif block_type == "tool_use":
            tool_input = block.get("input")
            events.append(
                ToolInvocationEvent(
                    name=_optional_str(block.get("name")) or "unknown",
                    input=tool_input if tool_input else {},
                    correlation_id=_optional_str(block.get("id")),
                    timestamp=timestamp,
                )
            )
    return events


def _classify_result_blocks(blocks: list[Any]) -> list[Event]:
    events: list[Event] = []
    for block in blocks:
        if not isinstance(block, dict) or block.get("type") != "tool_result":
            continue
        content = block.get("content")
        fragments = _text_fragments(content) if isinstance(content, list) else ()
        events.append(ToolResult(_optional_str(block.get("tool_use_id")), fragments))
    return events


def classify_record(record: Any) -> list[Event]:
    """把一个已解码的 JSON 值拆成按出现顺序排列的事件.

    匹配不上任何已知形状时返回 ``[Unrecognized(...)]``，从不抛异常。
    """
    if not isinstance(record, dict):
        return [Unrecognized("not an object")]

    events: list[Event] = []
    record_type = record.get("type")
    message = record.get("message")
    if isinstance(message, dict):
        role = message.get("role")
        content = message.get("content")
        if record_type == "user" and role == "user":
            if isinstance(content, str):
                events.append(UserPrompt(content))
            elif isinstance(content, list):
                events.extend(_classify_result_blocks(content))
        elif record_type == "assistant" and role == "assistant" and isinstance(content, list):
            events.extend(_classify_assistant_blocks(record, content))

    legacy = record.get("toolUseResult")
    if legacy:
        fragments = _text_fragments(legacy)
        if fragments:
            events.append(LegacyResult(fragments))

    if not events:
        return [Unrecognized(f"unmatched record type: {record_type!r}")]
    return events


def classify_line(line: str) -> list[Event]:
    """解析并分类一行；JSON 解析失败视为 Unrecognized."""
    try:
        record = json.loads(line)
    except (ValueError, RecursionError):
        return [Unrecognized("invalid json")]
    return classify_record(record)


__all__ = [
    "AssistantText",
    "Event",
    "LegacyResult",
    "ToolInvocationEvent",
    "ToolResult",
    "Unrecognized",
    "UserPrompt",
    "classify_line",
    "classify_record",
]
