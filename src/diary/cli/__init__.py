"""Session Diary CLI — 命令行界面."""

import logging

import click

from diary import __version__

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    """配置日志级别（输出到 stderr，不干扰 hook 的 stdout）."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


@click.group()
@click.version_option(version=__version__, prog_name="session-diary")
@click.option("-v", "--verbose", is_flag=True, default=False, help="显示详细日志")
@click.pass_context
def main(ctx: click.Context, verbose: bool):
    """Session Diary — 会话日记生成器

    读取 Claude Code 的 session JSONL，生成 Markdown 日记 / 恢复文档。
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _setup_logging(verbose)


# ── 注册子模块命令 ──
# 使用延迟 import 避免在顶层加载所有子模块

def _register_commands() -> None:
    """注册所有子模块的命令到 main group."""
    from diary.cli.hooks import diary_cmd, recovery_cmd, session_start_cmd
    from diary.cli.ops import config_group, preview

    # hooks.py
    main.add_command(diary_cmd, "diary")
    main.add_command(recovery_cmd, "recovery")
    main.add_command(session_start_cmd, "session-start")

    # ops.py
    main.add_command(preview)
    main.add_command(config_group, "config")


_register_commands()


def diary_entry() -> None:
    """console script: diary-generator."""
    from diary.cli.hooks import diary_cmd

    _setup_logging(False)
    diary_cmd(prog_name="diary-generator")


def recovery_entry() -> None:
    """console script: recovery-generator."""
    from diary.cli.hooks import recovery_cmd

    _setup_logging(False)
    recovery_cmd(prog_name="recovery-generator")
