"""
Todo tool backed by a JSON file.
"""

import json
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, StrictBool, StrictInt, StrictStr, ValidationError

from ..core.logging import get_logger


logger = get_logger(__name__)


class TodoError(Exception):
    """Raised when the todo file cannot be read or updated."""


class TodoItem(BaseModel):
    id: StrictInt
    text: StrictStr
    done: StrictBool
    created: StrictStr
    completed: Optional[StrictStr] = None


class TodoStats(BaseModel):
    total: int
    completed: int
    pending: int
    completion_rate: float


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class TodoTool:
    """Todo list persisted as ``todos.json`` in a data directory."""

    def __init__(self, data_dir: Optional[Union[str, Path]] = None):
        base_dir = Path(data_dir) if data_dir else Path.cwd() / "data"
        self.todo_file = base_dir / "todos.json"
        try:
            base_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Could not create data directory {base_dir}: {e}")

    def load_tasks(self) -> List[TodoItem]:
        """Load tasks, skipping entries that are not well-formed."""
        try:
            raw = json.loads(self.todo_file.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except (OSError, json.JSONDecodeError) as e:
            raise TodoError(f"Failed to load tasks: {e}") from e

        if not isinstance(raw, list):
            raise TodoError("Failed to load tasks: todo file does not contain a list")

        tasks = []
        for entry in raw:
            try:
                tasks.append(TodoItem.model_validate(entry))
            except ValidationError:
                logger.debug(f"Skipping invalid todo entry: {entry!r}")
        return tasks

    def save_tasks(self, tasks: List[TodoItem]) -> None:
        payload = [task.model_dump(exclude_none=True) for task in tasks]
        try:
            self.todo_file.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            raise TodoError(f"Failed to save tasks: {e}") from e

    def add_task(self, text: str) -> str:
        text = text.strip()
        if not text:
            raise ValueError("Task text cannot be empty")

        tasks = self.load_tasks()
        last_id = max((task.id for task in tasks), default=0)
        tasks.append(TodoItem(
            id=max(int(time.time() * 1000), last_id + 1),
            text=text,
            done=False,
            created=_now(),
        ))
        self.save_tasks(tasks)
        return f'Added task: "{text}"'

    def list_tasks(self) -> List[TodoItem]:
        return self.load_tasks()

    def mark_done(self, task_id: int) -> str:
        tasks = self.load_tasks()
        task = next((t for t in tasks if t.id == task_id), None)
        if task is None:
            raise TodoError(f"Task with ID {task_id} not found")

        if task.done:
            return f'Task "{task.text}" is already completed'

        task.done = True
        task.completed = _now()
        self.save_tasks(tasks)
        return f'Marked task "{task.text}" as done'

    def clear_completed(self) -> str:
        tasks = self.load_tasks()
        active = [t for t in tasks if not t.done]
        self.save_tasks(active)

        removed = len(tasks) - len(active)
        return f"Removed {removed} completed task{'' if removed == 1 else 's'}"

    def get_stats(self) -> TodoStats:
        tasks = self.load_tasks()
        completed = sum(1 for t in tasks if t.done)
        return TodoStats(
            total=len(tasks),
            completed=completed,
            pending=len(tasks) - completed,
            completion_rate=(completed / len(tasks) * 100) if tasks else 0.0,
        )
