"""Session start — 准备平台对应的 mopc 可执行文件并把 hook 转交给它."""

from __future__ import annotations

import logging
import os
import platform
import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

from diary.exceptions import LauncherError

logger = logging.getLogger(__name__)

COMPANION_BINARY = "mopc"
PLUGIN_ROOT_ENV = "CLAUDE_PLUGIN_ROOT"

_OS_MAP = {
    "linux": "linux",
    "darwin": "darwin",
    "win32": "windows",
}

_ARCH_MAP = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "arm64": "arm64",
    "aarch64": "arm64",
}


@dataclass(frozen=True)
class PlatformInfo:
    os: str
    arch: str

    @property
    def tag(self) -> str:
        return f"{self.os}-{self.arch}"

    @property
    def exe_suffix(self) -> str:
        return ".exe" if self.os == "windows" else ""

    @property
    def binary_name(self) -> str:
        return COMPANION_BINARY + self.exe_suffix


def detect_platform(sys_platform: str | None = None, machine: str | None = None) -> PlatformInfo:
    """识别 os/arch；不支持的组合抛 LauncherError."""
    sys_platform = sys_platform or sys.platform
    machine = machine or platform.machine()
    os_name = _OS_MAP.get(sys_platform)
    arch = _ARCH_MAP.get(machine.lower())
    if not os_name or not arch:
        raise LauncherError(f"Unsupported platform: {sys_platform} {machine}")
    return PlatformInfo(os=os_name, arch=arch)


def resolve_plugin_root(plugin_root: Path | str | None = None) -> Path:
    if plugin_root:
        return Path(plugin_root)
    configured = os.environ.get(PLUGIN_ROOT_ENV)
    if configured:
        return Path(configured).expanduser()
    return Path.cwd()


def locate_binary(plugin_root: Path, info: PlatformInfo) -> Path:
    """优先使用开发构建 zig-out/bin/mopc，其次 zig-out/bin/<os>-<arch>/mopc."""
    dev_bin = plugin_root / "zig-out" / "bin" / info.binary_name
    prod_bin = plugin_root / "zig-out" / "bin" / info.tag / info.binary_name
    for candidate in (dev_bin, prod_bin):
        if candidate.exists():
            return candidate
    raise LauncherError(
        f"Error: {COMPANION_BINARY} binary not found\n"
        f"Tried dev: {dev_bin}\n"
        f"Tried prod: {prod_bin}"
    )


def install_targets(plugin_root: Path, info: PlatformInfo) -> list[Path]:
    """hooks/ 与 bin/ 下各放一份；第一个是后续调用用的路径."""
    return [
        plugin_root / "hooks" / info.binary_name,
        plugin_root / "bin" / info.binary_name,
    ]


def install_binary(source: Path, targets: list[Path], info: PlatformInfo) -> None:
    """POSIX 下建软链接并加可执行位，Windows 下直接复制."""
    for target in targets:
        if target.exists() or target.is_symlink():
            try:
                target.unlink()
            except OSError as e:
                logger.debug("删除旧文件失败: %s (%s)", target, e)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if info.os == "windows":
                shutil.copyfile(source, target)
            else:
                target.symlink_to(source)
                target.chmod(0o755)
        except OSError as e:
            raise LauncherError(f"Failed to setup {COMPANION_BINARY} at {target}: {e}") from e


def run_companion(binary: Path, args: list[str], stdin_data: str) -> str:
    """执行 `<binary> hook session-start <args...>`，stdin 原样透传，返回 stdout."""
    command = [str(binary), "hook", "session-start", *args]
    try:
        proc = subprocess.run(
            command,
            input=stdin_data,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        raise LauncherError(f"Error calling {COMPANION_BINARY}: {e}") from e
    if proc.stderr:
        sys.stderr.write(proc.stderr)
    if proc.returncode != 0:
        raise LauncherError(f"Error calling {COMPANION_BINARY}: exit code {proc.returncode}")
    return proc.stdout


def session_start(
    args: list[str],
    stdin_data: str,
    *,
    plugin_root: Path | str | None = None,
    info: PlatformInfo | None = None,
) -> str:
    """完整的 session-start 流程：识别平台 → 定位 → 安装 → 调用."""
    info = info or detect_platform()
    root = resolve_plugin_root(plugin_root)
    source = locate_binary(root, info)
    targets = install_targets(root, info)
    install_binary(source, targets, info)
    logger.debug("%s 已就绪: %s -> %s", COMPANION_BINARY, source, targets[0])
    return run_companion(targets[0], args, stdin_data)


__all__ = [
    "PlatformInfo",
    "detect_platform",
    "install_binary",
    "install_targets",
    "locate_binary",
    "resolve_plugin_root",
    "run_companion",
    "session_start",
]
