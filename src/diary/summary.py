"""会话摘要 — 对分类后的事件做顺序折叠，再按保留上限定稿."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from diary.config import DEFAULT_CONFIG, RetentionLimits
from diary.models import (
    FILE_EDIT_TOOLS,
    SHELL_TOOL,
    TODO_TOOL,
    SessionSummary,
    TaskItem,
    ToolInvocation,
)
from diary.records import (
    AssistantText,
    Event,
    LegacyResult,
    ToolInvocationEvent,
    ToolResult,
    Unrecognized,
    UserPrompt,
    classify_line,
)

logger = logging.getLogger(__name__)

COMMAND_DISPLAY_LENGTH = 100
ERROR_SNIPPET_LENGTH = 150
RESULT_ERROR_MARKERS = ("error", "failed", "exit code")
LEGACY_ERROR_MARKERS = ("error", "failed")
SYSTEM_PROMPT_PREFIX = "<"


@dataclass
class SummaryAccumulator:
    """折叠过程中的可变状态，每次运行新建一个."""

    prompt_length: int = DEFAULT_CONFIG.diary.limits.prompt_length
    user_prompts: list[str] = field(default_factory=list)
    tool_invocations: list[ToolInvocation] = field(default_factory=list)
    task_list: list[TaskItem] = field(default_factory=list)
    modified_paths: dict[str, None] = field(default_factory=dict)  # 有序去重集合
    error_messages: list[str] = field(default_factory=list)
    last_assistant_text: str = ""
    # correlation id -> tool_invocations 中的下标
    correlation_index: dict[str, int] = field(default_factory=dict)
    line_count: int = 0
    unrecognized_count: int = 0


def _parse_todos(todos: list[Any]) -> list[TaskItem]:
    tasks = []
    for idx, todo in enumerate(todos):
        if not isinstance(todo, dict):
            todo = {}
        task_id = todo.get("id")
        content = todo.get("content")
        status = todo.get("status")
        tasks.append(
            TaskItem(
                id=str(task_id) if task_id else f"todo-{idx}",
                text=str(content) if content else "",
                status=str(status) if status else "pending",
            )
        )
    return tasks


def _record_invocation(acc: SummaryAccumulator, event: ToolInvocationEvent) -> None:
    tool_input = event.input
    if isinstance(tool_input, dict):
        if event.name == TODO_TOOL and isinstance(tool_input.get("todos"), list):
            acc.task_list = _parse_todos(tool_input["todos"])
        if event.name in FILE_EDIT_TOOLS:
            path = tool_input.get("file_path") or tool_input.get("path")
            if path and isinstance(path, str):
                acc.modified_paths[path] = None
        if event.name == SHELL_TOOL and tool_input.get("command"):
            tool_input = {"command": str(tool_input["command"])[:COMMAND_DISPLAY_LENGTH]}

    invocation = ToolInvocation(
        name=event.name,
        timestamp=event.timestamp,
        input=tool_input,
        correlation_id=event.correlation_id,
    )
    if event.correlation_id:
        acc.correlation_index[event.correlation_id] = len(acc.tool_invocations)
    acc.tool_invocations.append(invocation)


def _mark_failed(acc: SummaryAccumulator, correlation_id: str | None) -> None:
    if not correlation_id or correlation_id not in acc.correlation_index:
        return
    idx = acc.correlation_index[correlation_id]
    invocation = acc.tool_invocations[idx]
    if invocation.succeeded:
        acc.tool_invocations[idx] = invocation.model_copy(update={"succeeded": False})


def _contains_any(text: str, markers: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in markers)


def reduce_event(acc: SummaryAccumulator, event: Event) -> SummaryAccumulator:
    """把单个事件折叠进累加器（原地修改并返回）."""
    if isinstance(event, UserPrompt):
        prompt = event.text[: acc.prompt_length]
        if prompt and not prompt.startswith(SYSTEM_PROMPT_PREFIX):
            acc.user_prompts.append(prompt)
    elif isinstance(event, AssistantText):
        acc.last_assistant_text = event.text
    elif isinstance(event, ToolInvocationEvent):
        _record_invocation(acc, event)
    elif isinstance(event, ToolResult):
        for fragment in event.fragments:
            if _contains_any(fragment, RESULT_ERROR_MARKERS):
                _mark_failed(acc, event.correlation_id)
                acc.error_messages.append(fragment[:ERROR_SNIPPET_LENGTH])
    elif isinstance(event, LegacyResult):
        for fragment in event.fragments:
            if _contains_any(fragment, LEGACY_ERROR_MARKERS):
                acc.error_messages.append(fragment[:ERROR_SNIPPET_LENGTH])
    elif isinstance(event, Unrecognized):
        acc.unrecognized_count += 1
    return acc


def _tail(items: list, keep: int) -> tuple:
    if keep <= 0:
        return ()
    return tuple(items[-keep:])


def finalize(acc: SummaryAccumulator, limits: RetentionLimits) -> SessionSummary:
    """按保留上限截取累加器，得到不可变的 SessionSummary."""
    return SessionSummary(
        user_prompts=_tail(acc.user_prompts, limits.user_prompts),
        tool_invocations=_tail(acc.tool_invocations, limits.tool_calls),
        task_list=tuple(acc.task_list),
        modified_paths=tuple(acc.modified_paths),
        error_messages=_tail(acc.error_messages, limits.errors),
        last_assistant_text=acc.last_assistant_text[: limits.last_message_length],
    )


def fold_lines(lines: Iterable[str], limits: RetentionLimits) -> SummaryAccumulator:
    acc = SummaryAccumulator(prompt_length=limits.prompt_length)
    for line in lines:
        if not line.strip():
            continue
        acc.line_count += 1
        for event in classify_line(line):
            reduce_event(acc, event)
    return acc


def summarize_text(text: str, limits: RetentionLimits | None = None) -> SessionSummary:
    """对整段 JSONL 文本做一次完整摘要."""
    limits = limits or DEFAULT_CONFIG.diary.limits
    acc = fold_lines(text.split("\n"), limits)
    if acc.unrecognized_count:
        logger.debug("跳过 %d/%d 条无法识别的记录", acc.unrecognized_count, acc.line_count)
    return finalize(acc, limits)


def summarize_transcript(path: Path | str, limits: RetentionLimits | None = None) -> SessionSummary:
    """读取 transcript 文件并摘要；文件缺失或不可读时返回空摘要."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        logger.warning("transcript 不存在: %s", path)
        text = ""
    except OSError as e:
        logger.warning("读取 transcript 失败: %s (%s)", path, e)
        text = ""
    return summarize_text(text, limits)


__all__ = [
    "SummaryAccumulator",
    "finalize",
    "fold_lines",
    "reduce_event",
    "summarize_text",
    "summarize_transcript",
]
