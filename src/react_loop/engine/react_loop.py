"""The ReAct orchestration loop."""

import logging
from typing import Any, Dict, Literal, Optional, Sequence, TypedDict

from langgraph.graph import END, StateGraph

from react_loop.config import (
    DEFAULT_ALIAS_PREFIXES,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_OBSERVATION_MAX_CHARS,
    Config,
)
from react_loop.domain.conversation import ConversationContext
from react_loop.domain.error_sanitizer import build_exception_details, sanitize_text
from react_loop.domain.exceptions import ToolRegistryError
from react_loop.domain.invocation import InvocationError, InvocationResult
from react_loop.domain.outcome import (
    DEFAULT_NO_ACTION_ANSWER,
    IterationState,
    LoopOutcome,
    LoopResult,
)
from react_loop.domain.transcript import Transcript
from react_loop.engine.action_resolver import extract_final_answer, resolve_action
from react_loop.engine.observation import ObservationFormatter, as_context_text
from react_loop.engine.prompt_builder import PromptBuilder
from react_loop.engine.protocol_parser import parse_response
from react_loop.engine.tool_invoker import ToolInvoker
from react_loop.infra.tool_registry import ToolRegistry
from react_loop.llm.llm_error_mapper import map_model_error
from react_loop.llm.model_client import ModelProvider, TextModel, extract_text

logger = logging.getLogger(__name__)

# Graph supersteps per iteration: reason, parse, act.
_STEPS_PER_ITERATION = 3


class LoopState(TypedDict, total=False):
    context: ConversationContext
    transcript: Transcript
    iteration: IterationState
    model: TextModel
    model_calls: int
    response: str
    thought: str
    action: str
    outcome: Optional[LoopOutcome]


class ReActLoop:
    """
    Drives Thought/Action/Observation iterations until a terminal outcome.

    One instance may serve concurrent requests: each ``run`` owns its
    conversation, transcript and iteration counter. The loop never raises;
    every fault becomes a structured outcome.

    Args:
        registry: Tool registry shared with the registration layer.
        max_iterations: Default ceiling on model calls per run.
        temperature: Sampling temperature for every model call.
        observation_max_chars: Cap applied to observations.
        alias_prefixes: Namespace prefixes tried for unknown tool ids.
        prompt_builder: Overrides the default prompt builder.
        invoker: Overrides the default tool invoker.
    """

    def __init__(
        self,
        registry: Optional[ToolRegistry],
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        temperature: float = 0.0,
        observation_max_chars: int = DEFAULT_OBSERVATION_MAX_CHARS,
        alias_prefixes: Sequence[str] = DEFAULT_ALIAS_PREFIXES,
        prompt_builder: Optional[PromptBuilder] = None,
        invoker: Optional[ToolInvoker] = None,
    ) -> None:
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self.registry = registry
        self.max_iterations = max_iterations
        self.temperature = temperature
        self.prompt_builder = prompt_builder or PromptBuilder(registry)
        self.invoker = invoker or ToolInvoker(
            registry or ToolRegistry(), alias_prefixes=alias_prefixes
        )
        self.formatter = ObservationFormatter(observation_max_chars)
        self.graph = self._build_graph()

    @classmethod
    def from_config(
        cls, config: Config, registry: Optional[ToolRegistry]
    ) -> "ReActLoop":
        """
        Builds a loop using configured policy values.

        Args:
            config: Runtime configuration.
            registry: Tool registry to dispatch against.

        Returns:
            A configured loop.
        """
        return cls(
            registry,
            max_iterations=config.get_max_iterations(),
            temperature=config.get_temperature(),
            observation_max_chars=config.get_observation_max_chars(),
            alias_prefixes=config.get_alias_prefixes(),
        )

    def _build_graph(self):
        """
        Builds the reason -> parse -> act graph.

        Returns:
            The compiled LangGraph graph executor.
        """
        builder = StateGraph(LoopState)
        builder.add_node("reason", self.reason)
        builder.add_node("parse", self.parse)
        builder.add_node("act", self.act)

        builder.set_entry_point("reason")
        builder.add_conditional_edges(
            "reason", self.should_continue, {"continue": "parse", "end": END}
        )
        builder.add_conditional_edges(
            "parse", self.should_continue, {"continue": "act", "end": END}
        )
        builder.add_conditional_edges(
            "act", self.should_continue, {"continue": "reason", "end": END}
        )
        return builder.compile()

    def should_continue(self, state: LoopState) -> Literal["continue", "end"]:
        """Ends the graph as soon as any node produced an outcome."""
        if state.get("outcome") is not None:
            return "end"
        return "continue"

    def run(
        self,
        provider: ModelProvider,
        query: str,
        max_iterations: Optional[int] = None,
    ) -> LoopResult:
        """
        Answers a query by iterating with the model and the tools.

        Args:
            provider: Source of the model handle.
            query: The user's request.
            max_iterations: Per-run ceiling overriding the default.

        Returns:
            The outcome, answer and transcript of this run.
        """
        context = ConversationContext()
        transcript = Transcript()
        limit = self.max_iterations if max_iterations is None else max_iterations

        try:
            context.add_user(query)
            transcript.user(query)
            if limit < 1:
                raise ValueError("max_iterations must be at least 1")
            iteration = IterationState(max=limit)
            self._refresh_registry()
            system_instruction = self.prompt_builder.build()
        except Exception as exc:
            update = self._internal_error(transcript, exc, stage="prompt")
            return self._result(update["outcome"], transcript, 0, 0)

        try:
            model = provider.get_model(system_instruction)
        except Exception as exc:
            update = self._model_error(transcript, exc, model_calls=0)
            return self._result(update["outcome"], transcript, iteration.count, 0)

        state: LoopState = {
            "context": context,
            "transcript": transcript,
            "iteration": iteration,
            "model": model,
            "model_calls": 0,
        }
        recursion_limit = _STEPS_PER_ITERATION * (iteration.max + 1) + 1
        final: LoopState = state
        try:
            for snapshot in self.graph.stream(
                state,
                config={"recursion_limit": recursion_limit},
                stream_mode="values",
            ):
                final = snapshot
        except Exception as exc:
            update = self._internal_error(transcript, exc, stage="graph")
            return self._result(
                update["outcome"],
                transcript,
                iteration.count,
                final.get("model_calls", 0),
            )

        outcome = final.get("outcome")
        if outcome is None:
            outcome = LoopOutcome.internal_error("Loop ended without an outcome.")
        logger.info(
            "Loop finished",
            extra={
                "outcome": outcome.kind.value,
                "iteration": iteration.count,
                "model_calls": final.get("model_calls", 0),
            },
        )
        return self._result(
            outcome, transcript, iteration.count, final.get("model_calls", 0)
        )

    def reason(self, state: LoopState) -> Dict[str, Any]:
        """
        Calls the model once, unless the iteration ceiling is reached.

        Args:
            state: The current graph state.

        Returns:
            The raw response text, or a terminal outcome.
        """
        iteration = state["iteration"]
        transcript = state["transcript"]
        model_calls = state.get("model_calls", 0)
        if iteration.exhausted:
            transcript.agent("Reached max iterations.")
            return {"outcome": LoopOutcome.max_iterations_reached()}

        try:
            candidates = state["model"].generate_text(
                state["context"].turns, self.temperature
            )
        except Exception as exc:
            return self._model_error(transcript, exc, model_calls=model_calls + 1)
        return {"response": extract_text(candidates), "model_calls": model_calls + 1}

    def parse(self, state: LoopState) -> Dict[str, Any]:
        """
        Records the response and decides between finish, stop and dispatch.

        Args:
            state: The current graph state.

        Returns:
            The parsed thought and action, or a terminal outcome.
        """
        transcript = state["transcript"]
        try:
            response = state["response"]
            state["context"].add_model(response)
            transcript.model(response)

            thought, action = parse_response(response)
            if not action:
                answer = thought or response.strip() or DEFAULT_NO_ACTION_ANSWER
                transcript.agent("(No action provided, finishing)", answer)
                return {
                    "thought": thought,
                    "action": action,
                    "outcome": LoopOutcome.no_action_given(answer),
                }

            final_answer = extract_final_answer(action)
            if final_answer is not None:
                transcript.agent("Finishing with answer.", final_answer)
                return {
                    "thought": thought,
                    "action": action,
                    "outcome": LoopOutcome.answered(final_answer),
                }
            return {"thought": thought, "action": action}
        except Exception as exc:
            return self._internal_error(transcript, exc, stage="parse")

    def act(self, state: LoopState) -> Dict[str, Any]:
        """
        Dispatches the action and feeds the observation back as a user turn.

        Args:
            state: The current graph state.

        Returns:
            The advanced iteration state, or a terminal outcome.
        """
        transcript = state["transcript"]
        try:
            iteration = state["iteration"]
            resolved = resolve_action(state["action"])
            if isinstance(resolved, InvocationError):
                result = InvocationResult.from_error(resolved)
            else:
                result = self.invoker.invoke(resolved)

            observation = self.formatter.format(result)
            logger.info(
                "Action dispatched",
                extra={
                    "iteration": iteration.count + 1,
                    "error_kind": result.error.kind.value if result.error else None,
                },
            )
            state["context"].add_user(as_context_text(observation))
            transcript.observation(observation)
            iteration.advance()
            return {"iteration": iteration}
        except Exception as exc:
            return self._internal_error(transcript, exc, stage="dispatch")

    def _refresh_registry(self) -> None:
        if self.registry is None:
            return
        try:
            self.registry.refresh()
        except ToolRegistryError:
            logger.warning("Tool registry refresh failed")

    def _model_error(
        self, transcript: Transcript, exc: Exception, model_calls: int
    ) -> Dict[str, Any]:
        mapping = map_model_error(exc)
        logger.exception(
            "Model call failed",
            extra={"reason": mapping.reason, "error": mapping.details},
        )
        transcript.system_error(f"Error during AI service call: {mapping.describe()}")
        return {
            "outcome": LoopOutcome.model_error(mapping.describe(), mapping.details),
            "model_calls": model_calls,
        }

    def _internal_error(
        self, transcript: Transcript, exc: Exception, stage: str
    ) -> Dict[str, Any]:
        details = build_exception_details(exc)
        logger.exception("Loop failed", extra={"stage": stage, "error": details})
        message = sanitize_text(f"Error during loop execution: {exc}")
        transcript.system_error(message)
        return {"outcome": LoopOutcome.internal_error(message, details)}

    @staticmethod
    def _result(
        outcome: LoopOutcome,
        transcript: Transcript,
        iterations: int,
        model_calls: int,
    ) -> LoopResult:
        return LoopResult(
            outcome=outcome,
            transcript=transcript.text,
            model_calls=model_calls,
            iterations=iterations,
        )
