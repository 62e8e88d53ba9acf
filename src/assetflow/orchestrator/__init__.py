"""Asset build orchestrator.

Provides Task and composite (sequence/parallel) primitives, the registry of
named build composites, the watch scheduler and a Typer CLI.
"""

from .core import TaskSpec, Task, TaskResult, Sequence, Parallel, task  # re-export for convenience

__all__ = ["TaskSpec", "Task", "TaskResult", "Sequence", "Parallel", "task"]
