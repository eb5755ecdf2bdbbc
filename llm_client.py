"""
LLM Gateway
=============
The only component that talks to the external LLM provider (Anthropic Messages API).

Per call:
  1. Build request: model, system instruction + JSON schema, prompt, temperature
  2. Send exactly once (no retries, no caching)
  3. Validate-then-convert: raw text -> json.loads -> schema check -> typed list
  4. Classify any failure into a GatewayError (transport / malformed_output / unknown)
"""

import json
import logging
import re
from typing import Iterable, List

import anthropic
from pydantic import TypeAdapter, ValidationError

from config import GatewayConfig, load_config
from errors import (
    INVALID_FORMAT_HINT,
    MALFORMED_OUTPUT,
    TRANSPORT,
    UNKNOWN,
    ConfigurationError,
    GatewayError,
    MalformedOutputError,
)
from models import CaseData, IndividualAssessment, InteractionPair
from pipeline.case_formatter import (
    build_causality_prompt,
    build_interaction_prompt,
    normalize_drug_names,
)
from pipeline.structured_tasks import CAUSALITY_TASK, INTERACTION_TASK, StructuredTask
from prompts.system_prompts import JSON_OUTPUT_CONTRACT

logger = logging.getLogger("icsr_bridge")

# Opening fence with any language tag (```json, ```JSON, ```), closing fence
_CODE_FENCE_RE = re.compile(r"^```[A-Za-z]*[ \t]*\r?\n?|\s*```$")

_MALFORMED_ERRORS = (json.JSONDecodeError, ValidationError, MalformedOutputError)
_TRANSPORT_ERRORS = (anthropic.APIError, OSError, TimeoutError)


class LLMGateway:
    """
    Async gateway for the two structured tasks.
    Holds only immutable configuration and the SDK client; safe to share
    between concurrent calls.
    """

    def __init__(self, config: GatewayConfig, client=None):
        if not config.is_api_key_configured():
            raise ConfigurationError("ANTHROPIC_API_KEY environment variable is not set")
        self.config = config
        if client is None:
            client = anthropic.AsyncAnthropic(
                api_key=config.api_key,
                timeout=config.timeout,
                max_retries=0,
            )
        self.client = client

    # ------------------------------------------------------------------
    #  Public API: the two tasks
    # ------------------------------------------------------------------
    async def assess_causality(self, data: CaseData) -> List[IndividualAssessment]:
        """Causality assessment, one record per drug-event pair the model chose to assess."""
        prompt = build_causality_prompt(data)
        return await self.run_task(CAUSALITY_TASK, prompt)

    async def check_interactions(self, drugs: Iterable[str]) -> List[InteractionPair]:
        """Drug-drug interaction check. Fewer than 2 distinct drugs -> [] with no request."""
        names = normalize_drug_names(drugs)
        if len(names) < 2:
            logger.info(f"Interaction check skipped: {len(names)} distinct drug(s)")
            return []
        prompt = build_interaction_prompt(names)
        return await self.run_task(INTERACTION_TASK, prompt)

    # ------------------------------------------------------------------
    #  Generic structured task
    # ------------------------------------------------------------------
    async def run_task(self, task: StructuredTask, prompt: str) -> list:
        """Send one request for `task` and return the validated result list."""
        logger.info(
            f"[{task.name}] request | model={self.config.model} "
            f"temperature={task.temperature} prompt_chars={len(prompt)}"
        )
        try:
            raw = await self._generate(task, prompt)
            result = self.parse_response(task, raw)
        except Exception as e:
            error = self.classify_error(task, e)
            if error.kind == UNKNOWN:
                logger.exception(f"[{task.name}] unclassified failure")
            else:
                logger.error(f"[{task.name}] {error.kind}: {error.message}")
            raise error from e

        logger.info(f"[{task.name}] response | {len(result)} item(s)")
        return result

    def system_prompt(self, task: StructuredTask) -> str:
        """System instruction with the output schema appended."""
        contract = JSON_OUTPUT_CONTRACT.format(schema=json.dumps(task.schema, indent=2))
        return task.system_instruction + contract

    async def _generate(self, task: StructuredTask, prompt: str) -> str:
        response = await self.client.messages.create(
            model=self.config.model,
            max_tokens=self.config.max_tokens,
            temperature=task.temperature,
            system=self.system_prompt(task),
            messages=[{"role": "user", "content": prompt}],
        )
        texts = [
            block.text for block in response.content
            if getattr(block, "type", None) == "text"
        ]
        if not texts:
            raise MalformedOutputError("Model response contained no text block to parse as JSON")
        return "".join(texts)

    # ------------------------------------------------------------------
    #  Response validation
    # ------------------------------------------------------------------
    @staticmethod
    def _strip_code_fences(text: str) -> str:
        """Remove a surrounding ```json ... ``` block if the model added one."""
        return _CODE_FENCE_RE.sub("", text).strip()

    @classmethod
    def parse_response(cls, task: StructuredTask, raw: str) -> list:
        """
        Parse and validate a raw model reply.

        Raises:
            json.JSONDecodeError: reply is not JSON
            MalformedOutputError: JSON, but not an array (or empty reply)
            pydantic.ValidationError: array items miss required string fields
        """
        text = cls._strip_code_fences((raw or "").strip())
        if not text:
            raise MalformedOutputError("Model returned an empty response instead of a JSON array")

        parsed = json.loads(text)
        if not isinstance(parsed, list):
            raise MalformedOutputError(
                f"Expected a JSON array of objects, got {type(parsed).__name__}"
            )
        return TypeAdapter(List[task.result_type]).validate_python(parsed)

    # ------------------------------------------------------------------
    #  Failure classification
    # ------------------------------------------------------------------
    @staticmethod
    def classify_error(task: StructuredTask, exc: Exception) -> GatewayError:
        if isinstance(exc, GatewayError):
            return exc

        message = str(exc)
        if isinstance(exc, _MALFORMED_ERRORS):
            return GatewayError(f"{task.failure_prefix}: {message}{INVALID_FORMAT_HINT}", MALFORMED_OUTPUT)
        if isinstance(exc, _TRANSPORT_ERRORS):
            if "json" in message.lower():
                return GatewayError(f"{task.failure_prefix}: {message}{INVALID_FORMAT_HINT}", MALFORMED_OUTPUT)
            return GatewayError(f"{task.failure_prefix}: {message}", TRANSPORT)
        return GatewayError(task.unknown_message, UNKNOWN)


def create_gateway(config: GatewayConfig | None = None, client=None) -> LLMGateway:
    """Build the gateway from startup config. Raises ConfigurationError if the key is missing."""
    return LLMGateway(config or load_config(), client=client)
