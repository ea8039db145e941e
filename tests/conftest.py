"""全局测试配置 — transcript 记录构造器与临时文件 fixture."""

import json
from pathlib import Path

import pytest


class Records:
    """按 Claude Code transcript 的形状构造单行记录."""

    @staticmethod
    def user(text):
        return {"type": "user", "message": {"role": "user", "content": text}}

    @staticmethod
    def assistant_text(*texts):
        return {
            "type": "assistant",
            "message": {"role": "assistant", "content": [{"type": "text", "text": t} for t in texts]},
        }

    @staticmethod
    def tool_use(name, tool_input=None, tool_id=None, timestamp="2026-10-16T09:00:00.000Z"):
        block = {"type": "tool_use", "name": name, "input": tool_input if tool_input is not None else {}}
        if tool_id is not None:
            block["id"] = tool_id
        return {
            "type": "assistant",
            "timestamp": timestamp,
            "message": {"role": "assistant", "content": [block]},
        }

    @staticmethod
    def tool_result(tool_id, *texts):
        return {
            "type": "user",
            "message": {
                "role": "user",
                "content": [
                    {
                        "type": "tool_result",
                        "tool_use_id": tool_id,
                        "content": [{"type": "text", "text": t} for t in texts],
                    }
                ],
            },
        }

    @staticmethod
    def todos(*items):
        """items: (content, status) 元组."""
        return Records.tool_use(
            "TodoWrite",
            {"todos": [{"content": c, "status": s} for c, s in items]},
        )


@pytest.fixture
def rec():
    return Records


def to_jsonl(records) -> str:
    return "\n".join(r if isinstance(r, str) else json.dumps(r, ensure_ascii=False) for r in records) + "\n"


@pytest.fixture
def jsonl():
    return to_jsonl


@pytest.fixture
def write_transcript(tmp_path):
    """把记录列表写成 transcript 文件并返回路径."""

    def _write(records, name="transcript.jsonl") -> Path:
        path = tmp_path / name
        path.write_text(to_jsonl(records), encoding="utf-8")
        return path

    return _write
