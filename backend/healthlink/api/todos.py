"""
To-do API endpoints - one task list per date.
"""

from fastapi import APIRouter, HTTPException, Depends, status

from ..core import RecordManager
from ..models import Task, TaskText, TodoList
from ..utils.dates import parse_date_key
from .deps import get_records

router = APIRouter(prefix="/todos", tags=["todos"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")


@router.get("/{date_key}", response_model=TodoList)
async def get_todo_list(date_key: str, records: RecordManager = Depends(get_records)):
    """Get the task list for a date; an unknown date has an empty list."""
    return await records.get_todo_list(parse_date_key(date_key))


@router.post("/{date_key}/tasks", response_model=Task, status_code=status.HTTP_201_CREATED)
async def add_task(date_key: str, body: TaskText, records: RecordManager = Depends(get_records)):
    """Append a task to the date's list."""
    return await records.add_task(parse_date_key(date_key), body.task_text)


@router.patch("/{date_key}/tasks/{task_id}", response_model=Task)
async def edit_task(
    date_key: str,
    task_id: str,
    body: TaskText,
    records: RecordManager = Depends(get_records),
):
    """Rename a task."""
    task = await records.edit_task(parse_date_key(date_key), task_id, body.task_text)
    if task is None:
        raise _not_found()
    return task


@router.post("/{date_key}/tasks/{task_id}/toggle", response_model=Task)
async def toggle_task(date_key: str, task_id: str, records: RecordManager = Depends(get_records)):
    """Flip a task between done and not done."""
    task = await records.toggle_task(parse_date_key(date_key), task_id)
    if task is None:
        raise _not_found()
    return task


@router.delete("/{date_key}/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(date_key: str, task_id: str, records: RecordManager = Depends(get_records)):
    """Remove a task."""
    if not await records.delete_task(parse_date_key(date_key), task_id):
        raise _not_found()
