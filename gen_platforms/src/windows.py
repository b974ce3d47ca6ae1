"""Windows runner configuration."""
from __future__ import annotations

from pathlib import Path

from core.console import Console

from .config import WindowsConfig


WINDOW_SIZE_MARKER = "Win32Window::Size size("


def set_window_size(content: str, width: int, height: int) -> str:
    lines = content.splitlines(keepends=True)
    for index, line in enumerate(lines):
        if WINDOW_SIZE_MARKER in line:
            ending = line[len(line.rstrip("\r\n")):]
            lines[index] = f"  Win32Window::Size size({width}, {height});  // Configured window size{ending}"
    return "".join(lines)


def process_windows_platform(project_dir: Path, config: WindowsConfig, console: Console) -> None:
    windows_dir = project_dir / "windows"
    if not windows_dir.is_dir():
        raise FileNotFoundError(
            "Windows directory not found. Run 'flutter create --platforms=windows .' first."
        )

    if config.window_width is not None and config.window_height is not None:
        main_cpp = windows_dir / "runner" / "main.cpp"
        if main_cpp.exists():
            content = main_cpp.read_bytes().decode("utf-8")
            main_cpp.write_bytes(set_window_size(content, config.window_width, config.window_height).encode("utf-8"))
            console.info(
                f"Windows main.cpp updated with window size {config.window_width}x{config.window_height}"
            )
        else:
            console.debug(f"{main_cpp} not found; window size left unchanged")

    console.info("Windows platform directory configured")
