"""Hook 执行 — 解析 stdin 输入，摘要 transcript，按模式写出文档."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from diary.config import DiaryConfig, load_config
from diary.exceptions import HookInputError
from diary.models import DocumentMode, HookInput, SessionSummary
from diary.paths import diary_dir, document_filename, find_project_root, recovery_dir, resolve_project_dir
from diary.render import render_document
from diary.summary import summarize_transcript
from diary.writer import WriteResult, write_document

logger = logging.getLogger(__name__)

SAVED_LABELS: dict[str, str] = {
    "diary": "Diary saved",
    "recovery": "Recovery saved",
}


@dataclass(frozen=True)
class HookOutcome:
    """一次 hook 运行的结果，message 是打印到 stdout 的那一行."""

    mode: DocumentMode
    message: str
    summary: SessionSummary
    written: WriteResult | None = None

    @property
    def skipped(self) -> bool:
        return self.written is None


def parse_hook_input(raw: str) -> HookInput:
    """解析 hook stdin.

    Raises:
        HookInputError: 不是 JSON、不是对象或缺少 transcript_path.
    """
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise HookInputError("Invalid JSON input") from e
    if not isinstance(data, dict):
        raise HookInputError("Invalid JSON input: expected an object")
    if not data.get("transcript_path"):
        raise HookInputError("No transcript_path in input")
    try:
        return HookInput.model_validate(data)
    except ValidationError as e:
        raise HookInputError(f"Invalid hook input: {e.error_count()} invalid field(s)") from e


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def run_hook(
    mode: DocumentMode,
    hook_input: HookInput,
    *,
    now: datetime | None = None,
    config: DiaryConfig | None = None,
) -> HookOutcome:
    """执行一次 diary / recovery 生成.

    diary 模式无条件写到 <cwd>/.claude/diary/；
    recovery 模式写到 <项目根>/.claude/diary/recovery/，活动量低于 minActivity 时跳过。
    """
    now = now or _utcnow()
    cwd = resolve_project_dir(hook_input.cwd)
    project_root = find_project_root(cwd)
    config = config or load_config(project_root)
    mode_config = config.for_mode(mode)

    summary = summarize_transcript(hook_input.transcript_path, mode_config.limits)

    if mode == "recovery" and summary.activity < mode_config.min_activity:
        message = f"Skipping recovery: activity {summary.activity} < minActivity {mode_config.min_activity}"
        logger.info(message)
        return HookOutcome(mode=mode, message=message, summary=summary)

    document = render_document(
        summary,
        hook_input.session_id,
        hook_input.effective_trigger,
        now,
        mode=mode,
        limits=mode_config.limits,
    )
    out_dir = recovery_dir(project_root) if mode == "recovery" else diary_dir(cwd)
    target: Path = out_dir / document_filename(now, hook_input.session_id)
    written = write_document(target, document)
    return HookOutcome(
        mode=mode,
        message=f"{SAVED_LABELS[mode]}: {written.path}",
        summary=summary,
        written=written,
    )


__all__ = ["HookOutcome", "parse_hook_input", "run_hook"]
