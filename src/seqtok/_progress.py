import os

from tqdm import tqdm

_enabled: bool = True


def enable_progress() -> None:
    """Enable progress indicators for all seqtok operations."""
    global _enabled
    _enabled = True


def disable_progress() -> None:
    """Disable progress indicators for all seqtok operations."""
    global _enabled
    _enabled = False


def _is_enabled() -> bool:
    """Check if progress is enabled (respects env var override)."""
    if os.environ.get("SEQTOK_DISABLE_PROGRESS", "").strip() == "1":
        return False
    return _enabled


def progress_bar(total: int, desc: str, show_progress: bool = True) -> tqdm:
    """Create a tqdm bar that stays silent when progress is disabled."""
    return tqdm(
        total=total,
        desc=desc,
        unit="merge",
        disable=not (show_progress and _is_enabled()),
    )
