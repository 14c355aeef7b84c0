"""
Chat Flow - answers a free-text message using optional health, task and history context.
"""

from ..models.chat import ChatInput, ChatOutput
from .base_flow import BaseFlow

CHAT_PROMPT = """You are a personal health assistant. Your role is to answer user questions and provide relevant suggestions based on their tracked data and current context.

Here is the user's message: {{{message}}}
Here are the user's health stats: {{{healthStats}}}
Here are the user's tasks: {{{tasks}}}
Here is the user's chat history: {{{chatHistory}}}

Based on the above information, provide a helpful and informative response. Include relevant suggestions, such as hydration tips or exercise recommendations, when appropriate.
Format your response as a JSON object with a "response" field containing your answer and a "suggestions" field containing an array of suggestions.
If no suggestions are available, omit the "suggestions" field.
"""


class ChatFlow(BaseFlow[ChatInput, ChatOutput]):
    """ChatInput in, ChatOutput out."""

    name = "aiChatAssistant"
    prompt_template = CHAT_PROMPT
    input_shape = ChatInput
    output_shape = ChatOutput
