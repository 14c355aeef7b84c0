"""Flows module - prompt-template calls to the hosted language model."""

from .base_flow import BaseFlow, render_template, parse_json_payload
from .prediction_flow import PredictionFlow
from .chat_flow import ChatFlow

__all__ = ['BaseFlow', 'render_template', 'parse_json_payload', 'PredictionFlow', 'ChatFlow']
