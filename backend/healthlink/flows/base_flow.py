"""
Base Flow - render a prompt template, call the LLM, validate the JSON answer.
"""

import json
import logging
import re
from abc import ABC
from typing import Any, Dict, Generic, Optional, Type, TypeVar

from pydantic import BaseModel

from ..core.errors import GenerationError
from ..core.schema_validator import ensure_valid, validate_shape
from ..llm.base import LLMProvider, LLMMessage

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT", bound=BaseModel)
OutputT = TypeVar("OutputT", bound=BaseModel)

_PLACEHOLDER = re.compile(r"\{\{\{\s*(\w+)\s*\}\}\}")
_CODE_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


def render_template(template: str, values: Dict[str, Any]) -> str:
    """
    Substitute {{{name}}} placeholders in a single pass.

    Values are inserted as plain text and never re-scanned, so a value that
    itself contains "{{{...}}}" is left as typed. Missing or None values
    render as empty strings.
    """
    def _substitute(match: "re.Match[str]") -> str:
        value = values.get(match.group(1))
        return "" if value is None else str(value)

    return _PLACEHOLDER.sub(_substitute, template)


def parse_json_payload(text: str) -> Dict[str, Any]:
    """
    Extract the JSON object from an LLM answer.
    Accepts bare JSON, JSON in a code fence, or JSON preceded by prose.

    Raises:
        ValueError: If no JSON object can be decoded
    """
    candidate = text.strip()
    fenced = _CODE_FENCE.search(candidate)
    if fenced:
        candidate = fenced.group(1).strip()

    start = candidate.find("{")
    if start == -1:
        raise ValueError("no JSON object in model output")
    payload, _ = json.JSONDecoder().raw_decode(candidate[start:])
    if not isinstance(payload, dict):
        raise ValueError("model output is not a JSON object")
    return payload


class BaseFlow(ABC, Generic[InputT, OutputT]):
    """
    A single request/response unit.
    Subclasses declare the prompt template and the input/output shapes.
    No retries and no caching: every run calls the model.
    """

    name: str = "flow"
    prompt_template: str = ""
    input_shape: Type[InputT]
    output_shape: Type[OutputT]

    def __init__(self, llm_provider: Optional[LLMProvider] = None, temperature: float = 0.7):
        """
        Initialize the flow.

        Args:
            llm_provider: Provider used for generation; None means generation is unavailable
            temperature: Sampling temperature
        """
        self._llm_provider = llm_provider
        self.temperature = temperature

    def set_llm_provider(self, provider: LLMProvider) -> None:
        """Set the LLM provider for this flow."""
        self._llm_provider = provider

    def render_prompt(self, flow_input: InputT) -> str:
        """Render the prompt template with the input's wire-named fields."""
        return render_template(self.prompt_template, flow_input.model_dump(by_alias=True))

    def output_instructions(self) -> str:
        """Describe the expected JSON answer to the model."""
        schema = json.dumps(self.output_shape.model_json_schema(by_alias=True), indent=2)
        return (
            "Output should be a single JSON object that conforms to the following JSON schema. "
            "Do not wrap it in any other text.\n"
            f"{schema}"
        )

    async def call_llm(self, prompt: str) -> str:
        """
        Call the LLM with the rendered prompt.

        Raises:
            GenerationError: If no provider is configured or the call fails
        """
        if self._llm_provider is None:
            raise GenerationError(
                self.name,
                "LLM not configured. Set LLM_API_KEY and LLM_PROVIDER in environment."
            )

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Flow {self.name} calling LLM: prompt length={len(prompt)} chars")

        messages = [
            LLMMessage.text("system", self.output_instructions()),
            LLMMessage.text("user", prompt),
        ]
        try:
            response = await self._llm_provider.chat_completion(
                messages, temperature=self.temperature, json_mode=True
            )
        except Exception as e:
            logger.error(
                f"Flow {self.name} LLM call failed: {str(e)}",
                exc_info=True,
                extra={"extra_fields": {"flow": self.name, "error": str(e)}}
            )
            raise GenerationError(self.name, f"LLM call failed: {e}") from e

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Flow {self.name} received LLM response: length={len(response.content)} chars")
        return response.content

    def parse_output(self, text: str) -> OutputT:
        """
        Parse and validate the model's answer against the output shape.

        Raises:
            GenerationError: If the answer is not JSON or does not fit the shape
        """
        try:
            payload = parse_json_payload(text)
        except ValueError as e:
            logger.error(
                f"Flow {self.name} returned unparseable output: {e}",
                extra={"extra_fields": {"flow": self.name, "output": text[:500]}}
            )
            raise GenerationError(self.name, f"Model output is not valid JSON: {e}") from e

        result = validate_shape(self.output_shape, payload)
        if not result.ok:
            logger.error(
                f"Flow {self.name} output failed shape validation",
                extra={"extra_fields": {
                    "flow": self.name,
                    "violations": [v.to_dict() for v in result.violations],
                }}
            )
            raise GenerationError(
                self.name, "Model output does not match the expected shape", result.violations
            )
        return result.value

    async def run(self, flow_input: Any) -> OutputT:
        """
        Run the flow end to end.

        Args:
            flow_input: Input model or raw dict; raw input is validated first

        Returns:
            The validated output model

        Raises:
            ValidationError: If the input does not fit the input shape
            GenerationError: If generation fails
        """
        validated = ensure_valid(self.input_shape, flow_input)
        prompt = self.render_prompt(validated)
        text = await self.call_llm(prompt)
        output = self.parse_output(text)
        logger.info(f"Flow {self.name} completed", extra={"extra_fields": {"flow": self.name}})
        return output
