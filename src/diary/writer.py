"""输出写入 — 新建文档，或把续写块追加到同一 session 的已有文档."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

logger = logging.getLogger(__name__)

CONTINUATION_SEPARATOR = "\n\n---\n\n# Session Continued\n\n"
_HEADER_RE = re.compile(r"^---[\s\S]*?---\n\n")


@dataclass(frozen=True)
class WriteResult:
    path: Path
    action: Literal["created", "appended"]


def strip_header(document: str) -> str:
    """去掉开头的元数据头；匹配不上时原样返回."""
    stripped, count = _HEADER_RE.subn("", document, count=1)
    if count == 0:
        logger.warning("新文档没有可剥离的元数据头，整篇追加")
    return stripped


def merge_continuation(existing: str | None, document: str) -> str:
    """existing 为 None 时原样返回新文档，否则拼成续写."""
    if existing is None:
        return document
    return existing + CONTINUATION_SEPARATOR + strip_header(document)


def load_existing(path: Path) -> str | None:
    if not path.exists():
        return None
    return path.read_text(encoding="utf-8")


def write_document(path: Path, document: str) -> WriteResult:
    """写入文档；同一分钟同一 session 的重复运行会累积而不是覆盖.

    读-改-写不加锁，并发写同一路径时后写者胜出。
    """
    existing = load_existing(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(merge_continuation(existing, document), encoding="utf-8")
    action = "created" if existing is None else "appended"
    logger.debug("文档已%s: %s", "新建" if action == "created" else "追加", path)
    return WriteResult(path=path, action=action)


__all__ = [
    "CONTINUATION_SEPARATOR",
    "WriteResult",
    "load_existing",
    "merge_continuation",
    "strip_header",
    "write_document",
]
