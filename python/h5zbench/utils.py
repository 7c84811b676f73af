"""
Filesystem, formatting and system-information helpers.
"""

import glob
import os
import platform
import time
from datetime import datetime
from typing import List

import psutil


def file_exists(path: str) -> bool:
    return os.path.isfile(path)


def file_size(path: str) -> int:
    try:
        return os.path.getsize(path)
    except OSError:
        return 0


def ensure_dir(path: str) -> bool:
    """Create ``path`` (and parents) if needed. Returns False if it cannot be created."""
    if not path:
        return True
    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        return False
    return os.path.isdir(path)


def list_files(directory: str, pattern: str = "*") -> List[str]:
    return sorted(p for p in glob.glob(os.path.join(directory, pattern)) if os.path.isfile(p))


def base_name(path: str) -> str:
    """File name without directory and extension."""
    return os.path.splitext(os.path.basename(path))[0]


def split_csv(text: str) -> List[str]:
    return [item.strip() for item in text.split(",") if item.strip()]


def save_text(path: str, content: str) -> bool:
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError:
        return False
    return True


def format_size(num_bytes: int) -> str:
    units = ["B", "KB", "MB", "GB", "TB"]
    size = float(num_bytes)
    unit = 0
    while size >= 1024.0 and unit < len(units) - 1:
        size /= 1024.0
        unit += 1
    return f"{size:.2f} {units[unit]}"


def format_ratio(ratio: float) -> str:
    return f"{ratio:.2f}"


def format_duration(milliseconds: float) -> str:
    if milliseconds < 1000:
        return f"{milliseconds:.0f} ms"
    if milliseconds < 60000:
        return f"{milliseconds / 1000.0:.2f} s"
    if milliseconds < 3600000:
        return f"{milliseconds / 60000.0:.2f} min"
    return f"{milliseconds / 3600000.0:.2f} h"


def current_time_string() -> str:
    now = datetime.now()
    return now.strftime("%Y-%m-%d %H:%M:%S") + f".{now.microsecond // 1000:03d}"


def elapsed_ms(t0: float) -> float:
    return (time.perf_counter() - t0) * 1000.0


def get_cpu_count() -> int:
    """Get number of CPU cores available to this process."""
    try:
        return len(os.sched_getaffinity(0))
    except AttributeError:
        return os.cpu_count() or 1


def system_info() -> str:
    if hasattr(platform, "freedesktop_os_release"):
        try:
            return platform.freedesktop_os_release().get("PRETTY_NAME", platform.platform())
        except OSError:
            pass
    return platform.platform()


def cpu_info() -> str:
    model = platform.processor() or platform.machine()
    logical = psutil.cpu_count(logical=True) or 1
    usable = get_cpu_count()
    cores = f"{logical} cores" if usable == logical else f"{logical} cores, {usable} usable"
    if model:
        return f"{model} ({cores})"
    return f"CPU Cores: {cores}"


def available_memory() -> int:
    """Physical memory available to new processes, in bytes."""
    return int(psutil.virtual_memory().available)

