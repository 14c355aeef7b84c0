"""
To-do Models - date-keyed task lists.
"""

from typing import List
from pydantic import BaseModel, Field


class Task(BaseModel):
    """A task on a daily to-do list."""
    id: str
    task_text: str = Field(..., alias="taskText")
    is_completed: bool = Field(False, alias="isCompleted")

    class Config:
        populate_by_name = True


class TaskText(BaseModel):
    """Body for adding or renaming a task."""
    task_text: str = Field(..., alias="taskText", min_length=1, max_length=500)

    class Config:
        populate_by_name = True


class TodoList(BaseModel):
    """A to-do list for one date, with progress figures."""
    date: str
    tasks: List[Task] = []
    completed: int = 0
    total: int = 0
    progress: float = 0.0

    @classmethod
    def from_tasks(cls, date: str, tasks: List[Task]) -> "TodoList":
        completed = sum(1 for t in tasks if t.is_completed)
        total = len(tasks)
        return cls(
            date=date,
            tasks=tasks,
            completed=completed,
            total=total,
            progress=(completed / total) * 100 if total else 0.0,
        )
