"""API module."""

from .auth import router as auth_router
from .profile import router as profile_router
from .health import router as health_router
from .chat import router as chat_router
from .todos import router as todos_router
from .history import router as history_router

__all__ = [
    'auth_router', 'profile_router', 'health_router',
    'chat_router', 'todos_router', 'history_router',
]
