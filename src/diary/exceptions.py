"""Custom exception hierarchy for session-diary."""


class DiaryError(Exception):
    """Base exception for all diary errors."""


class HookInputError(DiaryError, ValueError):
    """Hook stdin payload is unreadable, not a JSON object, or incomplete.

    Inherits ValueError so callers that only know about bad input
    (``except ValueError``) still catch it.
    """


class ConfigError(DiaryError):
    """Configuration file failed strict validation."""
    def __init__(self, path, errors: list[str]):
        self.path = path
        self.errors = errors
        super().__init__(f"配置文件 '{path}' 校验失败: {'; '.join(errors)}")


class LauncherError(DiaryError):
    """Companion binary could not be provisioned or invoked."""
