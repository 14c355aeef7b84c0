"""Models module."""

from .user import UserCreate, LoginRequest, UserProfile, ProfileUpdate, Token, TokenData
from .health import (
    HealthMetrics, DoctorReference, PredictionResult, HealthLog, PredictionRecord,
    QuickStats, Dashboard,
)
from .chat import ChatInput, ChatOutput, ChatMessage, ChatTurn
from .todo import Task, TaskText, TodoList
from .history import DayHistory

__all__ = [
    'UserCreate', 'LoginRequest', 'UserProfile', 'ProfileUpdate', 'Token', 'TokenData',
    'HealthMetrics', 'DoctorReference', 'PredictionResult', 'HealthLog', 'PredictionRecord',
    'QuickStats', 'Dashboard',
    'ChatInput', 'ChatOutput', 'ChatMessage', 'ChatTurn',
    'Task', 'TaskText', 'TodoList',
    'DayHistory',
]
