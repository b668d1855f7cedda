"""Adapter that composes a specialist system prompt before each call."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, TypeVar

from specialist.clients import AgentClient, AgentRequest, AgentResponse, Message, model_for_client
from specialist.composition import (
    BUILTIN_TASK_TYPES,
    CompositionResult,
    PromptCandidate,
    append_documentation_section,
    build_template_context,
    compose_static,
    list_candidates,
    prompt_id_task,
    render,
    resolve_prompt_id,
)
from specialist.config import CompositionConfig, load_composition_config
from specialist.errors import (
    ExtractionError,
    NoUserContentError,
    SelectionError,
    SpecialistAdapterError,
    SpecialistError,
)
from specialist.providers import get_provider_by_name
from specialist.selection import (
    EXTRACTION_TOOL_NAME,
    CallTimeoutError,
    PromptCache,
    SelectionResult,
    build_extraction_prompt,
    build_extraction_tool,
    build_selection_prompt,
    call_with_timeout,
    extractable_variables,
    fingerprint,
    parse_selection_response,
    parse_tool_arguments,
    validate_variables,
)
from specialist.templates import load_template, resolve_template_path

logger = logging.getLogger(__name__)

T = TypeVar("T")

SELECTION_TEMPERATURE = 0.1
SELECTION_MAX_TOKENS = 500
EXTRACTION_MAX_TOKENS = 500


@dataclass
class PhaseTelemetry:
    """Timing and outcome of one judgment phase."""

    model: str | None = None
    duration_ms: float = 0.0
    cache_hit: bool = False
    error: str | None = None


@dataclass
class CompositionTelemetry:
    """What happened while composing the prompt for one call."""

    task_type: str = "default"
    prompt_id: str | None = None
    confidence: str | None = None
    variables: tuple[str, ...] = ()
    selection: PhaseTelemetry | None = None
    extraction: PhaseTelemetry | None = None
    fallback_used: bool = False
    fallback_reason: str | None = None
    total_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class _ModelComposition:
    result: CompositionResult
    selection: SelectionResult
    variables: dict[str, str] = field(default_factory=dict)


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


class SpecialistAdapter:
    """Wrap a downstream client so every call carries a specialist prompt.

    The template path is resolved (preferring the newest enriched artifact)
    and loaded once at construction. Each ``send`` picks a prompt, fills its
    variables and injects the result as the system message before handing
    the request to the wrapped client.
    """

    def __init__(
        self,
        client: AgentClient,
        template_path: Path | str,
        *,
        config: CompositionConfig | None = None,
        cache: PromptCache | None = None,
        llm_client: Any = None,
        project_root: Path | None = None,
    ) -> None:
        self.client = client
        self.template_path = resolve_template_path(template_path, project_root)
        self.template = load_template(self.template_path)
        self.config = config or load_composition_config(self.template, project_root=project_root)
        self.cache = cache or PromptCache(ttl_seconds=self.config.cache_ttl_seconds)
        self.last_messages: tuple[Message, ...] | None = None
        self.telemetry: CompositionTelemetry | None = None

        self._llm_client = llm_client
        if self.config.enabled and self._llm_client is None:
            provider = get_provider_by_name(self.config.provider or "")
            if provider is not None:
                self._llm_client = provider.create_client(timeout=self.config.timeout_seconds)
            if self._llm_client is None:
                logger.warning(
                    "No API key for provider '%s', model-assisted composition disabled",
                    self.config.provider,
                )
        self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="specialist-judge")

    @property
    def name(self) -> str:
        return f"specialist:{self.template.name}:{self.client.name}"

    @property
    def llm_enabled(self) -> bool:
        return bool(self.config.enabled) and self._llm_client is not None

    @property
    def allows_fallback(self) -> bool:
        return bool(self.config.fallback_to_static) and self.template.strategy.allows_static_fallback

    def close(self) -> None:
        """Release the judgment thread pool without waiting for stragglers."""
        self._executor.shutdown(wait=False, cancel_futures=True)

    def __enter__(self) -> SpecialistAdapter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def send(self, request: AgentRequest) -> AgentResponse:
        """Compose the system prompt for a request and delegate it."""
        last = request.last_user_message()
        if last is None or not last.content.strip():
            error = NoUserContentError("request contains no user message")
            raise SpecialistAdapterError(self.name, self.template.name, str(error)) from error

        context = {
            "workspace_dir": request.workspace_dir,
            "has_tools": bool(request.tools),
            "tool_count": len(request.tools),
        }
        try:
            result, telemetry = self.compose(
                last.content, model=model_for_client(self.client), context=context
            )
        except SpecialistError as e:
            raise SpecialistAdapterError(self.name, self.template.name, str(e)) from e

        messages = self._inject_system_message(request.messages, result.prompt)
        self.last_messages = messages
        self.telemetry = telemetry
        logger.debug(
            "Composed %s (task=%s, fallback=%s) in %.1fms",
            telemetry.prompt_id,
            telemetry.task_type,
            telemetry.fallback_used,
            telemetry.total_ms,
        )

        try:
            return self.client.send(request.with_messages(messages))
        except Exception as e:
            raise SpecialistAdapterError(self.name, self.template.name, str(e)) from e

    def compose(
        self,
        user_prompt: str,
        *,
        model: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> tuple[CompositionResult, CompositionTelemetry]:
        """Compose the system prompt for a user request.

        Uses the judgment model when enabled. A failed selection falls back
        to static composition when both the config and the template's
        strategy allow it, and is raised otherwise.
        """
        start = time.perf_counter()
        telemetry = CompositionTelemetry()

        if not self.llm_enabled:
            result = compose_static(self.template, user_prompt, model=model, context=context)
        else:
            try:
                composed = self._compose_with_model(user_prompt, model, context, telemetry)
                result = composed.result
                telemetry.confidence = composed.selection.confidence
                telemetry.variables = tuple(composed.variables)
            except SelectionError as e:
                if not self.allows_fallback:
                    raise
                logger.warning("Prompt selection failed (%s), using static composition", e)
                result = compose_static(self.template, user_prompt, model=model, context=context)
                telemetry.fallback_used = True
                telemetry.fallback_reason = str(e)

        telemetry.task_type = result.task_type
        telemetry.prompt_id = result.prompt_id
        telemetry.total_ms = _elapsed_ms(start)
        return result, telemetry

    def _compose_with_model(
        self,
        user_prompt: str,
        model: str | None,
        context: Mapping[str, Any] | None,
        telemetry: CompositionTelemetry,
    ) -> _ModelComposition:
        candidates = list_candidates(self.template, model)
        if not candidates:
            raise SelectionError("template offers no candidate prompts")

        selection = self._select(user_prompt, candidates, telemetry)
        prompt_text = resolve_prompt_id(self.template, selection.prompt_id)
        task_type = self._task_type_for(selection.prompt_id)
        variables = self._extract(user_prompt, selection.prompt_id, prompt_text, telemetry)

        template_context = build_template_context(
            self.template, user_prompt, task_type, variables=variables, extra=context
        )
        prompt = render(
            append_documentation_section(prompt_text, template_context), template_context
        )
        result = CompositionResult(
            prompt=prompt,
            task_type=task_type,
            prompt_id=selection.prompt_id,
            used_model_specific=".model_specific." in selection.prompt_id,
        )
        return _ModelComposition(result=result, selection=selection, variables=variables)

    def _call_model(self, label: str, fn: Callable[[], T]) -> T:
        timeout = self.config.timeout_seconds
        return call_with_timeout(self._executor, fn, timeout, label)

    def _select(
        self,
        user_prompt: str,
        candidates: list[PromptCandidate],
        telemetry: CompositionTelemetry,
    ) -> SelectionResult:
        phase = PhaseTelemetry(model=self.config.selection_model)
        telemetry.selection = phase
        start = time.perf_counter()
        candidate_ids = {candidate.prompt_id for candidate in candidates}

        key = fingerprint(user_prompt)
        cached = self.cache.selection.get(key)
        if isinstance(cached, SelectionResult) and cached.prompt_id in candidate_ids:
            phase.cache_hit = True
            phase.duration_ms = _elapsed_ms(start)
            logger.debug("Selection cache hit for %s", key)
            return cached

        prompt = build_selection_prompt(user_prompt, candidates)

        def _request() -> Any:
            return self._llm_client.chat.completions.create(
                model=self.config.selection_model,
                messages=[{"role": "user", "content": prompt}],
                temperature=SELECTION_TEMPERATURE,
                max_tokens=SELECTION_MAX_TOKENS,
                timeout=self.config.timeout_seconds,
            )

        try:
            completion = self._call_model("selection", _request)
            text = completion.choices[0].message.content or ""
            selection = parse_selection_response(text, candidate_ids)
        except SelectionError as e:
            phase.error = str(e)
            raise
        except CallTimeoutError as e:
            phase.error = str(e)
            raise SelectionError(str(e)) from e
        except Exception as e:
            phase.error = str(e)
            raise SelectionError(f"selection call failed: {e}") from e
        finally:
            phase.duration_ms = _elapsed_ms(start)

        self.cache.selection.set(key, selection)
        logger.debug(
            "Selected %s (%s confidence) in %.1fms",
            selection.prompt_id,
            selection.confidence,
            phase.duration_ms,
        )
        return selection

    def _extract(
        self,
        user_prompt: str,
        prompt_id: str,
        prompt_text: str,
        telemetry: CompositionTelemetry,
    ) -> dict[str, str]:
        names = extractable_variables(self.template, prompt_text)
        if not names:
            return {}

        phase = PhaseTelemetry(model=self.config.extraction_model)
        telemetry.extraction = phase
        start = time.perf_counter()

        key = fingerprint(f"{prompt_id}\n{user_prompt}")
        cached = self.cache.variables.get(key)
        if cached is not None:
            phase.cache_hit = True
            phase.duration_ms = _elapsed_ms(start)
            return dict(cached)

        prompt = build_extraction_prompt(user_prompt, prompt_text)
        tool = build_extraction_tool(self.template, prompt_text)

        def _request() -> Any:
            return self._llm_client.chat.completions.create(
                model=self.config.extraction_model,
                messages=[{"role": "user", "content": prompt}],
                tools=[tool],
                tool_choice={"type": "function", "function": {"name": EXTRACTION_TOOL_NAME}},
                max_tokens=EXTRACTION_MAX_TOKENS,
                timeout=self.config.timeout_seconds,
            )

        try:
            try:
                completion = self._call_model("extraction", _request)
                arguments = self._tool_arguments(completion)
                variables = validate_variables(arguments, names, self.template.variables)
            except (CallTimeoutError, ExtractionError):
                raise
            except Exception as e:
                raise ExtractionError(f"extraction failed: {e!r}") from e
        except (CallTimeoutError, ExtractionError) as e:
            phase.error = str(e)
            phase.duration_ms = _elapsed_ms(start)
            logger.warning("Variable extraction failed (%s), continuing without variables", e)
            return {}

        phase.duration_ms = _elapsed_ms(start)
        self.cache.variables.set(key, variables)
        return variables

    @staticmethod
    def _tool_arguments(completion: Any) -> dict[str, Any]:
        message = completion.choices[0].message
        for call in message.tool_calls or []:
            if call.function.name == EXTRACTION_TOOL_NAME:
                return parse_tool_arguments(call.function.arguments)
        raise ExtractionError(f"response did not call {EXTRACTION_TOOL_NAME}")

    def _task_type_for(self, prompt_id: str) -> str:
        task_type = prompt_id_task(prompt_id)
        if task_type in BUILTIN_TASK_TYPES or task_type in self.template.task_types:
            return task_type
        logger.warning("Unknown task type '%s' in %s, using default", task_type, prompt_id)
        return "default"

    @staticmethod
    def _inject_system_message(
        messages: tuple[Message, ...], prompt: str
    ) -> tuple[Message, ...]:
        system = Message(role="system", content=prompt)
        updated = list(messages)
        for index, message in enumerate(updated):
            if message.role == "system":
                updated[index] = system
                return tuple(updated)
        return (system, *updated)
