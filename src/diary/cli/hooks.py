"""Hook 命令 — diary / recovery / session-start."""

import logging
import sys

import click

from diary.exceptions import HookInputError, LauncherError
from diary.hook import parse_hook_input, run_hook
from diary.launcher import session_start

logger = logging.getLogger(__name__)


def _read_stdin() -> str:
    try:
        return sys.stdin.read()
    except (OSError, UnicodeDecodeError) as e:
        raise HookInputError("Failed to read stdin") from e


def _run_mode(mode: str) -> None:
    try:
        hook_input = parse_hook_input(_read_stdin())
    except HookInputError as e:
        click.echo(str(e), err=True)
        sys.exit(1)

    try:
        outcome = run_hook(mode, hook_input)
    except (OSError, UnicodeDecodeError) as e:
        click.echo(f"Failed to write {mode} document: {e}", err=True)
        sys.exit(1)
    click.echo(outcome.message)


@click.command()
def diary_cmd():
    """写入会话日记（hook 入口，从 stdin 读取 JSON）."""
    _run_mode("diary")


@click.command()
def recovery_cmd():
    """写入恢复文档；活动量低于 minActivity 时跳过."""
    _run_mode("recovery")


@click.command(context_settings={"ignore_unknown_options": True})
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.option(
    "--plugin-root",
    type=click.Path(file_okay=False, path_type=str),
    default=None,
    help="插件根目录（默认取 CLAUDE_PLUGIN_ROOT，其次为当前目录）",
)
def session_start_cmd(args: tuple[str, ...], plugin_root: str | None):
    """准备 mopc 可执行文件并转交 session-start hook."""
    try:
        stdin_data = _read_stdin()
    except HookInputError:
        stdin_data = ""

    try:
        output = session_start(list(args), stdin_data, plugin_root=plugin_root)
    except LauncherError as e:
        click.echo(str(e), err=True)
        sys.exit(1)
    click.echo(output, nl=False)
