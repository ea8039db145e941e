"""Session Diary — 编码助手会话日记

读取 Claude Code 等工具写出的 session JSONL 日志，
整理成固定结构的 Markdown 日记 / 恢复文档。
"""

import re
from pathlib import Path

try:
    from importlib.metadata import PackageNotFoundError
    from importlib.metadata import version as _pkg_version
except ImportError:  # pragma: no cover
    PackageNotFoundError = Exception  # type: ignore


def _load_local_version() -> str:
    """从 pyproject.toml 读取版本，供本地开发环境使用."""
    pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
    if not pyproject.exists():
        return "0.0.0"
    try:
        match = re.search(r"^version\s*=\s*\"([^\"]+)\"", pyproject.read_text(encoding="utf-8"), re.MULTILINE)
        if match:
            return match.group(1)
    except OSError:
        pass
    return "0.0.0"


try:
    __version__ = _pkg_version("session-diary")
except PackageNotFoundError:  # pragma: no cover - editable install
    __version__ = _load_local_version()

from diary.config import DiaryConfig, ModeConfig, RetentionLimits  # noqa: E402
from diary.models import HookInput, SessionSummary, TaskItem, ToolInvocation  # noqa: E402
from diary.render import render_document  # noqa: E402
from diary.summary import summarize_text, summarize_transcript  # noqa: E402

__all__ = [
    "DiaryConfig",
    "HookInput",
    "ModeConfig",
    "RetentionLimits",
    "SessionSummary",
    "TaskItem",
    "ToolInvocation",
    "__version__",
    "render_document",
    "summarize_text",
    "summarize_transcript",
]
