"""数据模型 — HookInput / TaskItem / ToolInvocation / SessionSummary."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ── 被特殊对待的工具名 ──

SHELL_TOOL = "Bash"
TODO_TOOL = "TodoWrite"
FILE_EDIT_TOOLS: frozenset[str] = frozenset({"Edit", "Write"})

TASK_STATUSES = ("pending", "in_progress", "completed")
INCOMPLETE_STATUSES = frozenset({"pending", "in_progress"})

NO_PROMPTS_PLACEHOLDER = "No user prompts"

DocumentMode = Literal["diary", "recovery"]


class HookInput(BaseModel):
    """Hook 从 stdin 收到的 JSON 对象."""

    model_config = ConfigDict(extra="ignore")

    transcript_path: str = Field(description="session JSONL 日志路径")
    session_id: str = Field(default="unknown", description="会话 ID")
    cwd: str | None = Field(default=None, description="工作目录，缺省为进程 cwd")
    trigger: str | None = Field(default=None, description="触发事件名")
    hook_event_name: str | None = Field(default=None, description="Hook 事件名（trigger 的后备）")

    @field_validator("session_id", mode="before")
    @classmethod
    def _default_session_id(cls, value: Any) -> Any:
        if value is None or value == "":
            return "unknown"
        return value if isinstance(value, str) else str(value)

    @field_validator("transcript_path", "cwd", "trigger", "hook_event_name", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        return value if isinstance(value, str) else str(value)

    @property
    def effective_trigger(self) -> str:
        """trigger → hook_event_name → manual."""
        return self.trigger or self.hook_event_name or "manual"


class TaskItem(BaseModel):
    """TodoWrite 中的一条任务."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str = ""
    status: str = Field(default="pending", description="pending / in_progress / completed")

    @property
    def is_incomplete(self) -> bool:
        return self.status in INCOMPLETE_STATUSES


class ToolInvocation(BaseModel):
    """一次工具调用；succeeded 只会被结果记录从 True 翻成 False."""

    model_config = ConfigDict(frozen=True)

    name: str
    timestamp: str | None = None
    input: Any = Field(default_factory=dict, description="工具入参（Bash 时只保留截断后的 command）")
    succeeded: bool = True
    correlation_id: str | None = None

    @property
    def command(self) -> str | None:
        if isinstance(self.input, dict):
            command = self.input.get("command")
            if command:
                return str(command)
        return None

    @property
    def file_path(self) -> str | None:
        if isinstance(self.input, dict):
            path = self.input.get("file_path")
            if path:
                return str(path)
        return None


class SessionSummary(BaseModel):
    """定稿后的会话摘要，渲染的唯一输入."""

    model_config = ConfigDict(frozen=True)

    user_prompts: tuple[str, ...] = ()
    tool_invocations: tuple[ToolInvocation, ...] = ()
    task_list: tuple[TaskItem, ...] = ()
    modified_paths: tuple[str, ...] = ()
    error_messages: tuple[str, ...] = ()
    last_assistant_text: str = ""

    @property
    def main_task(self) -> str:
        return self.user_prompts[0] if self.user_prompts else NO_PROMPTS_PLACEHOLDER

    @property
    def total_task_count(self) -> int:
        return len(self.task_list)

    @property
    def incomplete_task_count(self) -> int:
        return sum(1 for task in self.task_list if task.is_incomplete)

    @property
    def activity(self) -> int:
        """recovery 模式用来和 minActivity 比较的活动量."""
        return (
            len(self.user_prompts)
            + len(self.tool_invocations)
            + len(self.modified_paths)
            + len(self.task_list)
        )

    def tasks_with_status(self, status: str) -> list[TaskItem]:
        return [task for task in self.task_list if task.status == status]
