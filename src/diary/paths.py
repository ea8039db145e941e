"""Path helpers for diary output and configuration."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

STATE_DIRNAME = ".claude"
CONFIG_FILENAMES = (".config.yaml", ".config.json")


def resolve_project_dir(project_dir: Path | str | None = None) -> Path:
    """Resolve project_dir, falling back to cwd if None."""
    return Path(project_dir) if project_dir else Path.cwd()


def find_project_root(start: Path | str | None = None) -> Path:
    """向上查找包含 .claude/ 的目录，找不到时返回起点本身."""
    start_dir = resolve_project_dir(start)
    current = start_dir
    while current != current.parent:
        if (current / STATE_DIRNAME).is_dir():
            return current
        current = current.parent
    return start_dir


def diary_dir(base: Path | None = None) -> Path:
    """日记输出目录: <base>/.claude/diary."""
    return resolve_project_dir(base) / STATE_DIRNAME / "diary"


def recovery_dir(base: Path | None = None) -> Path:
    """恢复文档输出目录: <base>/.claude/diary/recovery."""
    return diary_dir(base) / "recovery"


def config_candidates(base: Path | None = None) -> list[Path]:
    """按优先级返回候选配置文件路径（yaml 优先于 json）."""
    return [diary_dir(base) / name for name in CONFIG_FILENAMES]


def bucket_stamp(now: datetime) -> str:
    """把生成时间截断到分钟（UTC），形如 2026-10-16-09-05."""
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%d-%H-%M")


def safe_session_id(session_id: str) -> str:
    return session_id.replace("/", "-").replace("\\", "-")


def document_filename(now: datetime, session_id: str) -> str:
    """同一分钟、同一 session 的多次生成映射到同一个文件名."""
    return f"{bucket_stamp(now)}-{safe_session_id(session_id)}.md"


__all__ = [
    "bucket_stamp",
    "config_candidates",
    "diary_dir",
    "document_filename",
    "find_project_root",
    "recovery_dir",
    "resolve_project_dir",
    "safe_session_id",
]
