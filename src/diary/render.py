"""Markdown 渲染 — SessionSummary + 元数据 → 固定结构的文档.

纯函数：相同输入总是得到逐字节相同的输出。
"""

from __future__ import annotations

from datetime import datetime, timezone

from diary.config import DEFAULT_CONFIG, RetentionLimits
from diary.models import DocumentMode, SessionSummary, ToolInvocation

HEADER_DELIMITER = "---"
PROMPT_DISPLAY_LENGTH = 150
MAIN_TASK_DISPLAY_LENGTH = 80
ELLIPSIS = "..."
TRUNCATED_MARKER = "[... truncated]"
FENCE = "```"

TITLES: dict[str, str] = {
    "diary": "# Session Diary",
    "recovery": "# Session Recovery",
}

TASK_GROUPS = (
    ("completed", "**Completed:**", "- [x]"),
    ("in_progress", "**In Progress:**", "- [>]"),
    ("pending", "**Pending:**", "- [ ]"),
)


def format_timestamp(now: datetime) -> str:
    """ISO-8601 UTC，毫秒精度，Z 结尾（与 JS toISOString 一致）."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S") + f".{now.microsecond // 1000:03d}Z"


def display_truncate(text: str, length: int) -> str:
    if len(text) > length:
        return text[:length] + ELLIPSIS
    return text


def status_label(summary: SessionSummary) -> str:
    if summary.total_task_count == 0:
        return "No Activity"
    return "In Progress" if summary.incomplete_task_count > 0 else "Completed"


def action_detail(invocation: ToolInvocation) -> str:
    command = invocation.command
    if command:
        return f" `{command}`"
    path = invocation.file_path
    if path:
        return f" {path}"
    return ""


def _header(lines: list[str], session_id: str, trigger: str, now: datetime) -> None:
    lines.append(HEADER_DELIMITER)
    lines.append(f"date: {format_timestamp(now)}")
    lines.append(f"session: {session_id}")
    lines.append(f"trigger: {trigger}")
    lines.append(HEADER_DELIMITER)
    lines.append("")


def _quick_insights(lines: list[str], summary: SessionSummary) -> None:
    lines.append("## Quick Insights")
    lines.append("")
    lines.append(f"**Main Task**: {display_truncate(summary.main_task, MAIN_TASK_DISPLAY_LENGTH)}")
    lines.append("")
    lines.append(f"**Status**: {status_label(summary)}")
    lines.append("")
    lines.append(
        f"**Activity**: {len(summary.user_prompts)} prompts, "
        f"{len(summary.modified_paths)} files, "
        f"{summary.total_task_count} todos"
    )
    lines.append("")
    if summary.error_messages:
        lines.append(f"**Errors**: {len(summary.error_messages)} encountered")
        lines.append("")
    lines.append(HEADER_DELIMITER)
    lines.append("")


def _prompts(lines: list[str], summary: SessionSummary) -> None:
    lines.append("## What Was Asked")
    lines.append("")
    if summary.user_prompts:
        for prompt in summary.user_prompts:
            lines.append(f"- {display_truncate(prompt, PROMPT_DISPLAY_LENGTH)}")
    else:
        lines.append("No user prompts captured.")
    lines.append("")


def _tasks(lines: list[str], summary: SessionSummary) -> None:
    lines.append("## Task State")
    lines.append("")
    if not summary.task_list:
        lines.append("No TodoWrite state captured.")
        lines.append("")
        return
    for status, heading, marker in TASK_GROUPS:
        tasks = summary.tasks_with_status(status)
        if not tasks:
            continue
        lines.append(heading)
        lines.extend(f"{marker} {task.text}" for task in tasks)
        lines.append("")


def _files(lines: list[str], summary: SessionSummary) -> None:
    lines.append("## Files Modified")
    lines.append("")
    if summary.modified_paths:
        lines.extend(f"- {path}" for path in summary.modified_paths)
    else:
        lines.append("No files modified.")
    lines.append("")


def _actions(lines: list[str], summary: SessionSummary) -> None:
    lines.append("## Recent Actions")
    lines.append("")
    if summary.tool_invocations:
        for invocation in summary.tool_invocations:
            tag = "OK" if invocation.succeeded else "FAIL"
            lines.append(f"- {invocation.name} [{tag}]{action_detail(invocation)}")
    else:
        lines.append("No tool calls recorded.")
    lines.append("")


def _errors(lines: list[str], summary: SessionSummary) -> None:
    if not summary.error_messages:
        return
    lines.append("## Errors")
    lines.append("")
    for message in summary.error_messages:
        lines.append(FENCE)
        lines.append(message)
        lines.append(FENCE)
    lines.append("")


def _last_context(lines: list[str], summary: SessionSummary, limits: RetentionLimits) -> None:
    text = summary.last_assistant_text
    if not text:
        return
    lines.append("## Last Context")
    lines.append("")
    lines.append(FENCE)
    lines.append(text)
    if len(text) >= limits.last_message_length:
        lines.append(TRUNCATED_MARKER)
    lines.append(FENCE)
    lines.append("")


def render_document(
    summary: SessionSummary,
    session_id: str,
    trigger: str,
    now: datetime,
    *,
    mode: DocumentMode = "diary",
    limits: RetentionLimits | None = None,
) -> str:
    """渲染完整文档（含元数据头）.

    Args:
        summary: 定稿后的摘要
        session_id: 会话 ID
        trigger: 触发事件名
        now: 生成时间（只用于 date 行）
        mode: diary 或 recovery；recovery 额外输出 Quick Insights
        limits: 用于判断 Last Context 是否被截断

    Returns:
        Markdown 文本
    """
    limits = limits or DEFAULT_CONFIG.for_mode(mode).limits
    lines: list[str] = []
    _header(lines, session_id, trigger, now)
    lines.append(TITLES[mode])
    lines.append("")
    if mode == "recovery":
        _quick_insights(lines, summary)
    _prompts(lines, summary)
    _tasks(lines, summary)
    _files(lines, summary)
    _actions(lines, summary)
    _errors(lines, summary)
    _last_context(lines, summary, limits)
    return "\n".join(lines)


__all__ = [
    "action_detail",
    "display_truncate",
    "format_timestamp",
    "render_document",
    "status_label",
]
