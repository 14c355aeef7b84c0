"""
Unit tests for the prediction and chat flows with a mocked LLM provider.
"""

import pytest
from unittest.mock import AsyncMock

from healthlink.core import GenerationError, ValidationError
from healthlink.flows import ChatFlow, PredictionFlow
from healthlink.flows.base_flow import parse_json_payload, render_template
from healthlink.models import ChatInput, ChatOutput, PredictionResult

from conftest import CHAT_ANSWER, METRICS, PREDICTION_ANSWER, make_llm


def _prompt_of(provider) -> str:
    messages = provider.chat_completion.call_args.args[0]
    return messages[-1].content


class TestRenderTemplate:
    """Tests for placeholder substitution."""

    def test_substitutes_values(self):
        assert render_template("Hi {{{name}}}!", {"name": "Ann"}) == "Hi Ann!"

    def test_missing_and_none_render_empty(self):
        assert render_template("[{{{a}}}][{{{b}}}]", {"b": None}) == "[][]"

    def test_values_are_not_rescanned(self):
        rendered = render_template("{{{a}}} {{{b}}}", {"a": "{{{b}}}", "b": "x"})
        assert rendered == "{{{b}}} x"


class TestParseJsonPayload:

    def test_bare_json(self):
        assert parse_json_payload('{"response": "ok"}') == {"response": "ok"}

    def test_code_fence(self):
        text = 'Here you go:\n```json\n{"response": "ok"}\n```'
        assert parse_json_payload(text) == {"response": "ok"}

    def test_leading_prose(self):
        assert parse_json_payload('Sure! {"response": "ok"} Bye') == {"response": "ok"}

    def test_no_json(self):
        with pytest.raises(ValueError):
            parse_json_payload("I cannot help with that")


class TestPredictionFlow:
    """Tests for the health prediction flow."""

    @pytest.mark.asyncio
    async def test_returns_model_answer(self):
        provider = make_llm(PREDICTION_ANSWER)
        result = await PredictionFlow(provider).run(METRICS)

        assert isinstance(result, PredictionResult)
        assert result.model_dump(by_alias=True) == PREDICTION_ANSWER

    @pytest.mark.asyncio
    async def test_prompt_contains_metrics(self):
        provider = make_llm(PREDICTION_ANSWER)
        await PredictionFlow(provider).run(METRICS)

        prompt = _prompt_of(provider)
        assert "Heart Rate: 80\n" in prompt
        assert "Steps: 5000\n" in prompt
        assert "Gender: male" in prompt
        assert "{{{" not in prompt

    @pytest.mark.asyncio
    async def test_requests_json_answer(self):
        provider = make_llm(PREDICTION_ANSWER)
        await PredictionFlow(provider, temperature=0.2).run(METRICS)

        kwargs = provider.chat_completion.call_args.kwargs
        assert kwargs["json_mode"] is True
        assert kwargs["temperature"] == 0.2
        system = provider.chat_completion.call_args.args[0][0]
        assert system.role == "system"
        assert "doctorReference" in system.content

    @pytest.mark.asyncio
    async def test_invalid_input_skips_model(self):
        provider = make_llm(PREDICTION_ANSWER)
        with pytest.raises(ValidationError) as exc_info:
            await PredictionFlow(provider).run({**METRICS, "heartRate": 250})
        assert exc_info.value.fields == ["heartRate"]
        provider.chat_completion.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_doctor_reference(self):
        answer = {k: v for k, v in PREDICTION_ANSWER.items() if k != "doctorReference"}
        with pytest.raises(GenerationError) as exc_info:
            await PredictionFlow(make_llm(answer)).run(METRICS)
        assert exc_info.value.flow == "healthPrediction"
        assert [v.field for v in exc_info.value.violations] == ["doctorReference"]

    @pytest.mark.asyncio
    async def test_non_json_answer(self):
        with pytest.raises(GenerationError):
            await PredictionFlow(make_llm("Sorry, I can't do that.")).run(METRICS)

    @pytest.mark.asyncio
    async def test_no_provider(self):
        with pytest.raises(GenerationError):
            await PredictionFlow(None).run(METRICS)

    @pytest.mark.asyncio
    async def test_provider_failure(self):
        provider = AsyncMock()
        provider.chat_completion.side_effect = RuntimeError("connection reset")
        with pytest.raises(GenerationError) as exc_info:
            await PredictionFlow(provider).run(METRICS)
        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestChatFlow:
    """Tests for the assistant chat flow."""

    @pytest.mark.asyncio
    async def test_returns_model_answer(self):
        result = await ChatFlow(make_llm(CHAT_ANSWER)).run({"message": "How can I sleep better?"})

        assert isinstance(result, ChatOutput)
        assert result.model_dump(exclude_none=True) == CHAT_ANSWER

    @pytest.mark.asyncio
    async def test_suggestions_optional(self):
        result = await ChatFlow(make_llm({"response": "Hello!"})).run({"message": "Hi"})
        assert result.suggestions is None
        assert result.model_dump(exclude_none=True) == {"response": "Hello!"}

    @pytest.mark.asyncio
    async def test_context_in_prompt(self):
        provider = make_llm(CHAT_ANSWER)
        history = "user: Hi\nassistant: Hello! {{{message}}}"
        await ChatFlow(provider).run(ChatInput(
            message="How can I sleep better?",
            health_stats="Heart rate 80",
            tasks="Walk 30 minutes",
            chat_history=history,
        ))

        prompt = _prompt_of(provider)
        assert "Here is the user's message: How can I sleep better?" in prompt
        assert "Heart rate 80" in prompt
        assert "Walk 30 minutes" in prompt
        assert history in prompt

    @pytest.mark.asyncio
    async def test_blank_message_rejected(self):
        provider = make_llm(CHAT_ANSWER)
        with pytest.raises(ValidationError):
            await ChatFlow(provider).run({"message": "   "})
        provider.chat_completion.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_response_field(self):
        with pytest.raises(GenerationError):
            await ChatFlow(make_llm({"suggestions": ["a"]})).run({"message": "Hi"})
