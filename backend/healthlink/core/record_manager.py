"""
Record Manager - per-user documents: profile, daily health logs, predictions,
to-do lists and chat history.
"""

import asyncio
import logging
import uuid
from typing import Optional, List, Dict, Any

from ..models import (
    HealthMetrics, HealthLog, PredictionResult, PredictionRecord,
    Task, TodoList, ChatTurn, ChatMessage, DayHistory, Dashboard, QuickStats,
)
from ..storage.interface import DocumentStore, SERVER_TIMESTAMP
from ..storage.subscription import CollectionSubscription
from .errors import FieldViolation, ValidationError

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = ChatMessage(
    id="welcome-message",
    sender="assistant",
    content="Hi there! How can I help you today? Let me know if you have any questions.",
)

# Fields of a profile the owner may change; email and uid are fixed at signup
_PROFILE_FIELDS = ("name", "age", "gender", "profileImageUrl")


class RecordManager:
    """
    Reads and writes one user's documents.
    The user is passed in explicitly; nothing here depends on ambient session state.
    """

    def __init__(self, store: DocumentStore, user_id: str):
        """
        Initialize the record manager for a specific user.

        Args:
            store: Document store to use
            user_id: User identifier
        """
        self.store = store
        self.user_id = user_id
        self.base_path = f"users/{user_id}"

    @property
    def health_logs_path(self) -> str:
        return f"{self.base_path}/dailyHealthLogs"

    @property
    def predictions_path(self) -> str:
        return f"{self.base_path}/healthPredictions"

    @property
    def todo_lists_path(self) -> str:
        return f"{self.base_path}/dailyToDoLists"

    @property
    def chat_history_path(self) -> str:
        return f"{self.base_path}/chatHistory"

    # ----- profile -----

    async def get_profile(self) -> Optional[Dict[str, Any]]:
        """Get the profile document, or None if it doesn't exist."""
        return await self.store.get_document("users", self.user_id)

    async def update_profile(self, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Update profile fields. Email and uid are never changed.

        Args:
            updates: Wire-named fields to update; None values are skipped

        Returns:
            Optional[Dict]: Updated profile or None if the profile doesn't exist
        """
        if await self.get_profile() is None:
            return None
        changes = {k: v for k, v in updates.items() if k in _PROFILE_FIELDS and v is not None}
        if changes:
            await self.store.update_document("users", self.user_id, changes)
        return await self.get_profile()

    # ----- health logs and predictions -----

    async def get_health_log(self, date_key: str) -> Optional[HealthLog]:
        data = await self.store.get_document(self.health_logs_path, date_key)
        return HealthLog.model_validate(data) if data else None

    async def upsert_health_log(self, date_key: str, metrics: HealthMetrics) -> None:
        """Merge the day's metrics into the health log; other stored fields are preserved."""
        await self.store.set_document(self.health_logs_path, date_key, {
            "heartRate": metrics.heart_rate,
            "steps": metrics.steps,
            "calories": metrics.calories,
            "date": date_key,
        }, merge=True)

    async def save_prediction(
        self,
        date_key: str,
        metrics: HealthMetrics,
        result: PredictionResult
    ) -> None:
        """Store the day's prediction; an earlier prediction for the same day is replaced."""
        await self.store.set_document(self.predictions_path, date_key, {
            "inputStats": metrics.model_dump(by_alias=True),
            "predictionReport": result.prediction,
            "suggestedMedication": result.suggested_medication,
            "doctorReference": result.doctor_reference.model_dump(),
            "timestamp": SERVER_TIMESTAMP,
        })

    async def get_prediction(self, date_key: str) -> Optional[PredictionRecord]:
        data = await self.store.get_document(self.predictions_path, date_key)
        return PredictionRecord.model_validate(data) if data else None

    # ----- to-do lists -----

    async def _load_tasks(self, date_key: str) -> Optional[List[Task]]:
        data = await self.store.get_document(self.todo_lists_path, date_key)
        if data is None:
            return None
        return [Task.model_validate(t) for t in data.get("tasks", [])]

    async def _save_tasks(self, date_key: str, tasks: List[Task]) -> None:
        await self.store.update_document(self.todo_lists_path, date_key, {
            "tasks": [t.model_dump(by_alias=True) for t in tasks]
        })

    @staticmethod
    def _clean_text(text: str) -> str:
        cleaned = (text or "").strip()
        if not cleaned:
            raise ValidationError([FieldViolation(
                field="taskText", constraint="required", message="Task text must not be empty"
            )])
        return cleaned

    async def get_todo_list(self, date_key: str) -> TodoList:
        """Get the day's to-do list; a missing list is empty."""
        tasks = await self._load_tasks(date_key)
        return TodoList.from_tasks(date_key, tasks or [])

    async def add_task(self, date_key: str, text: str) -> Task:
        """Append a task; the list document is created on first use."""
        task = Task(id=uuid.uuid4().hex, task_text=self._clean_text(text), is_completed=False)
        tasks = await self._load_tasks(date_key)
        if tasks is None:
            await self.store.set_document(self.todo_lists_path, date_key, {
                "date": date_key,
                "tasks": [task.model_dump(by_alias=True)],
            })
        else:
            await self._save_tasks(date_key, tasks + [task])
        return task

    async def toggle_task(self, date_key: str, task_id: str) -> Optional[Task]:
        """Flip a task's completion flag. Returns None if the task doesn't exist."""
        tasks = await self._load_tasks(date_key)
        for index, task in enumerate(tasks or []):
            if task.id == task_id:
                tasks[index] = task.model_copy(update={"is_completed": not task.is_completed})
                await self._save_tasks(date_key, tasks)
                return tasks[index]
        return None

    async def edit_task(self, date_key: str, task_id: str, text: str) -> Optional[Task]:
        """Rename a task. Returns None if the task doesn't exist."""
        cleaned = self._clean_text(text)
        tasks = await self._load_tasks(date_key)
        for index, task in enumerate(tasks or []):
            if task.id == task_id:
                tasks[index] = task.model_copy(update={"task_text": cleaned})
                await self._save_tasks(date_key, tasks)
                return tasks[index]
        return None

    async def delete_task(self, date_key: str, task_id: str) -> bool:
        """Remove a task. Returns False if the task doesn't exist."""
        tasks = await self._load_tasks(date_key)
        if not tasks or not any(t.id == task_id for t in tasks):
            return False
        await self._save_tasks(date_key, [t for t in tasks if t.id != task_id])
        return True

    # ----- chat history -----

    async def start_chat_turn(self, prompt: str) -> str:
        """Record the user's prompt with an empty response; returns the turn id."""
        return await self.store.add_document(self.chat_history_path, {
            "prompt": prompt,
            "response": "",
            "timestamp": SERVER_TIMESTAMP,
        })

    async def complete_chat_turn(self, turn_id: str, response: str) -> None:
        await self.store.update_document(self.chat_history_path, turn_id, {"response": response})

    async def list_chat_turns(self) -> List[ChatTurn]:
        """All turns, oldest first."""
        snapshots = await self.store.list_documents(self.chat_history_path, order_by="timestamp")
        return [ChatTurn(id=s.id, **s.data) for s in snapshots]

    def subscribe_chat_history(self) -> CollectionSubscription:
        """Live, timestamp-ordered snapshots of the chat history."""
        return self.store.subscribe(self.chat_history_path, order_by="timestamp")

    @staticmethod
    def turns_to_messages(turns: List[ChatTurn]) -> List[ChatMessage]:
        """Expand turns into conversation messages; an empty history shows the welcome message."""
        messages: List[ChatMessage] = []
        for turn in turns:
            messages.append(ChatMessage(id=turn.id, sender="user", content=turn.prompt))
            if turn.response:
                messages.append(ChatMessage(id=f"{turn.id}-ai", sender="assistant", content=turn.response))
        return messages or [WELCOME_MESSAGE]

    async def format_chat_history(self) -> str:
        """Render stored turns as "sender: content" lines for the chat prompt."""
        turns = await self.list_chat_turns()
        lines = []
        for message in self.turns_to_messages(turns):
            if message.id != WELCOME_MESSAGE.id:
                lines.append(f"{message.sender}: {message.content}")
        return "\n".join(lines)

    # ----- history and dashboard -----

    async def get_day_history(self, date_key: str) -> DayHistory:
        """Metrics, prediction and to-do list for one date, read concurrently."""
        metrics, prediction, tasks = await asyncio.gather(
            self.get_health_log(date_key),
            self.get_prediction(date_key),
            self._load_tasks(date_key),
        )
        return DayHistory(
            date=date_key,
            metrics=metrics,
            prediction=prediction,
            tasks=TodoList.from_tasks(date_key, tasks) if tasks is not None else None,
        )

    async def get_dashboard(self, date_key: str) -> Dashboard:
        """Profile name plus the day's quick stats (zeros when nothing is logged)."""
        profile, log = await asyncio.gather(self.get_profile(), self.get_health_log(date_key))
        stats = QuickStats()
        if log is not None:
            stats = QuickStats(
                heart_rate=log.heart_rate or 0,
                steps=log.steps or 0,
                calories=log.calories or 0,
            )
        return Dashboard(name=(profile or {}).get("name"), date=date_key, quick_stats=stats)
