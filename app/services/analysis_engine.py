"""Run one Gemini analysis and validate the reply against the output contract."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from app.clients import GeminiClient
from app.core.config import GeminiSettings
from app.schemas.analysis import (
    AnalysisInput,
    AnalysisOutput,
    validate_analysis_output,
)

from .errors import ModelOutputFailure, ModelOutputInvalidError
from .prompt_builder import SYSTEM_INSTRUCTION, build_prompt

logger = logging.getLogger(__name__)

TOKENS_PER_UNIT = 1_000_000


def estimate_cost(
    prompt_tokens: int,
    completion_tokens: int,
    *,
    input_rate: float = 0.075,
    output_rate: float = 0.30,
) -> float:
    """Price a call from its token counts and per-million-token rates."""
    input_cost = (prompt_tokens / TOKENS_PER_UNIT) * input_rate
    output_cost = (completion_tokens / TOKENS_PER_UNIT) * output_rate
    return input_cost + output_cost


@dataclass(frozen=True, slots=True)
class UsageRecord:
    """Token counts and derived cost for a single model invocation."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int
    estimated_cost: float

    @classmethod
    def from_counts(
        cls,
        prompt_tokens: int,
        completion_tokens: int,
        *,
        input_rate: float,
        output_rate: float,
    ) -> "UsageRecord":
        return cls(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens,
            estimated_cost=estimate_cost(
                prompt_tokens,
                completion_tokens,
                input_rate=input_rate,
                output_rate=output_rate,
            ),
        )

    def formatted_cost(self) -> str:
        return f"${self.estimated_cost:.6f}"


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    analysis: AnalysisOutput
    usage: UsageRecord


def _reject_constant(token: str) -> Any:
    raise ValueError(f"non-finite number {token} is not valid JSON")


def _decode_reply(reply: str) -> Any:
    try:
        return json.loads(reply, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise ModelOutputInvalidError(
            ModelOutputFailure.MALFORMED_JSON,
            detail=f"Model returned malformed JSON ({exc.msg} at position {exc.pos})",
        ) from exc
    except ValueError as exc:
        raise ModelOutputInvalidError(
            ModelOutputFailure.MALFORMED_JSON,
            detail=f"Model returned malformed JSON ({exc})",
        ) from exc


class AnalysisEngine:
    """Single-attempt analysis: prompt, generate, validate, meter.

    Transport failures from the Gemini client propagate untouched. Replies
    that are empty, not JSON, or off-schema raise ``ModelOutputInvalidError``.
    Nothing is retried.
    """

    def __init__(self, gemini_client: GeminiClient, settings: GeminiSettings) -> None:
        self._gemini = gemini_client
        self._settings = settings

    @property
    def model_name(self) -> str:
        return self._settings.model_name

    async def analyze(self, context: AnalysisInput) -> AnalysisResult:
        prompt = build_prompt(context)
        logger.debug("Sending analysis prompt to Gemini (%d characters)", len(prompt))

        reply = await self._gemini.generate_json(
            system_instruction=SYSTEM_INSTRUCTION,
            prompt=prompt,
            temperature=self._settings.temperature,
            max_output_tokens=self._settings.max_output_tokens,
        )
        if not reply or not reply.strip():
            raise ModelOutputInvalidError(ModelOutputFailure.EMPTY_RESPONSE)

        payload = _decode_reply(reply)
        outcome = validate_analysis_output(payload)
        if not outcome.is_valid:
            logger.warning(
                "Gemini reply failed schema validation: %s",
                ", ".join(outcome.violations),
            )
            raise ModelOutputInvalidError(
                ModelOutputFailure.SCHEMA_VIOLATION,
                violations=outcome.violations,
            )

        prompt_tokens = await self._gemini.count_tokens(prompt)
        completion_tokens = await self._gemini.count_tokens(reply)
        usage = UsageRecord.from_counts(
            prompt_tokens,
            completion_tokens,
            input_rate=self._settings.input_cost_per_million,
            output_rate=self._settings.output_cost_per_million,
        )

        logger.info(
            "Analysis completed with %s (%d tokens, %s)",
            self._settings.model_name,
            usage.total_tokens,
            usage.formatted_cost(),
        )
        return AnalysisResult(analysis=outcome.analysis, usage=usage)


__all__ = ["AnalysisEngine", "AnalysisResult", "UsageRecord", "estimate_cost"]
