"""Colorful CLI output helpers."""

import sys

from ..models import TaskStatus, UnifiedTask

# ANSI color codes
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
RED = "\033[31m"
DIM = "\033[2m"
RESET = "\033[0m"
CHECK = "\u2713"  # ✓
BULLET = "\u2022"  # •
CROSS = "\u2717"  # ✗

STATUS_COLORS = {
    TaskStatus.OPEN: YELLOW,
    TaskStatus.IN_PROGRESS: BLUE,
    TaskStatus.BLOCKED: RED,
    TaskStatus.COMPLETED: GREEN,
    TaskStatus.CANCELLED: DIM,
}


def _supports_color() -> bool:
    """Check if terminal supports color output."""
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _colorize(text: str, color: str) -> str:
    """Apply color to text if terminal supports it."""
    if _supports_color():
        return f"{color}{text}{RESET}"
    return text


def success(message: str) -> None:
    """Print success message with green checkmark."""
    check = _colorize(CHECK, GREEN)
    print(f"{check} {message}")


def info(message: str) -> None:
    """Print info message with yellow bullet."""
    bullet = _colorize(BULLET, YELLOW)
    print(f"{bullet} {message}")


def header(message: str) -> None:
    """Print header message in blue."""
    print(_colorize(message, BLUE))


def error(message: str) -> None:
    """Print error message with red cross."""
    cross = _colorize(CROSS, RED)
    print(f"{cross} {message}", file=sys.stderr)


def task_line(task: UnifiedTask) -> str:
    """One-line summary: status, priority, title, assignee."""
    status = _colorize(f"{task.status.value:<11}", STATUS_COLORS[task.status])
    assignee = f"  @{task.assignee}" if task.assignee else ""
    return f"{status} P{task.priority}  {task.title}{assignee}"


def task_details(task: UnifiedTask) -> None:
    """Print a multi-line task description."""
    header(task.title)
    print(f"  id:        {task.id}")
    print(f"  status:    {task.status.value} ({task.metadata.get('state_name', '-')})")
    print(f"  priority:  P{task.priority}")
    print(f"  type:      {task.type}")
    if task.labels:
        print(f"  labels:    {', '.join(task.labels)}")
    if task.assignee:
        print(f"  assignee:  {task.assignee}")
    if task.parent_id:
        print(f"  parent:    {task.parent_id}")
    if task.depends_on:
        print(f"  depends:   {', '.join(task.depends_on)}")
    child_count = task.metadata.get("child_count", 0)
    if child_count:
        done = task.metadata.get("completed_child_count", 0)
        print(f"  children:  {done}/{child_count} done")
    if task.updated_at:
        print(f"  updated:   {task.updated_at}")
    if task.description:
        print()
        print(task.description)
