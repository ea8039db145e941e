"""运维命令 — preview / config."""

import json
import sys
from datetime import datetime, timezone
from pathlib import Path

import click

from diary.config import find_config_file, load_config, validate_config
from diary.exceptions import ConfigError
from diary.paths import find_project_root
from diary.render import render_document
from diary.summary import summarize_transcript


@click.command()
@click.argument("transcript", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-m", "--mode", type=click.Choice(["diary", "recovery"]), default="diary", help="文档模式"
)
@click.option(
    "-f", "--format", "output_format", type=click.Choice(["markdown", "json"]), default="markdown"
)
@click.option("--session", "session_id", type=str, default="preview", help="文档头中的 session ID")
@click.option("--trigger", type=str, default="manual", help="文档头中的 trigger")
@click.option(
    "-d", "--project-dir", type=click.Path(file_okay=False, path_type=Path), default=None,
    help="从该目录向上查找配置（默认当前目录）",
)
def preview(
    transcript: Path,
    mode: str,
    output_format: str,
    session_id: str,
    trigger: str,
    project_dir: Path | None,
):
    """摘要一个 transcript 并打印结果，不写任何文件."""
    config = load_config(find_project_root(project_dir))
    limits = config.for_mode(mode).limits
    summary = summarize_transcript(transcript, limits)

    if output_format == "json":
        data = summary.model_dump(mode="json")
        data["main_task"] = summary.main_task
        data["activity"] = summary.activity
        click.echo(json.dumps(data, ensure_ascii=False, indent=2))
        return

    now = datetime.now(timezone.utc)
    click.echo(render_document(summary, session_id, trigger, now, mode=mode, limits=limits))


# ── config 子命令组 ──


@click.group()
def config_group():
    """配置管理 — .claude/diary/.config.{yaml,json}."""


@config_group.command("show")
@click.option("-d", "--project-dir", type=click.Path(file_okay=False, path_type=Path), default=None)
def config_show(project_dir: Path | None):
    """打印合并默认值后的生效配置."""
    config = load_config(find_project_root(project_dir))
    click.echo(json.dumps(config.model_dump(by_alias=True), ensure_ascii=False, indent=2))


@config_group.command("check")
@click.option("-d", "--project-dir", type=click.Path(file_okay=False, path_type=Path), default=None)
def config_check(project_dir: Path | None):
    """严格校验配置文件."""
    root = find_project_root(project_dir)
    try:
        validate_config(root)
    except ConfigError as e:
        click.echo(f"配置校验失败: {e.path}", err=True)
        for err in e.errors:
            click.echo(f"  - {err}", err=True)
        sys.exit(1)
    path = find_config_file(root)
    click.echo(f"配置通过校验: {path}" if path else "未找到配置文件，使用默认值。")
