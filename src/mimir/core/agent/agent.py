"""Agent — a single ReAct (reason, act, observe) loop.

The agent owns its run state and talks to three collaborators that are
injected at construction time: a :class:`ReasoningProvider`, a
:class:`ToolRegistry` and an :class:`Executor`.  Side effects only ever
happen through the registry's tools, which in turn go through the executor.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from mimir.core.agent.models import (
    DEFAULT_MAX_ITERATIONS,
    AgentAction,
    AgentActionType,
    AgentConfig,
    AgentContext,
    AgentObservation,
    AgentResult,
    AgentState,
    AgentStatus,
    AgentStep,
    Budget,
    StreamEvent,
    StreamEventType,
)
from mimir.core.interface.models import ChatMessage
from mimir.errors import AgentPausedError
from mimir.tools.models import ToolContext
from mimir.utils.telemetry import (
    ATTR_AGENT_ID,
    ATTR_AGENT_ROLE,
    ATTR_COST,
    ATTR_ITERATION,
    ATTR_STATUS,
    ATTR_TOKENS_INPUT,
    ATTR_TOKENS_OUTPUT,
    ATTR_TOOL_NAME,
    ATTR_TOOL_SUCCESS,
    get_tracer,
)

if TYPE_CHECKING:
    from mimir.core.interface.provider import ReasoningProvider
    from mimir.runtime.execution import Executor
    from mimir.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

INTERRUPTED_ERROR = "Execution interrupted"
BUDGET_ERROR = "Budget exceeded"
MAX_ITERATIONS_ERROR = "Maximum iterations reached"


class Agent:
    """A tool-using agent driven by a reasoning provider.

    Usage::

        agent = Agent(AgentConfig(name="helper"), provider, registry, executor)
        result = await agent.execute("List the Python files in src/")
        print(result.final_response)

    ``stop()`` and ``pause()`` are cooperative: they take effect at the top
    of the next iteration, after any in-flight reasoning call or tool
    execution has finished.
    """

    def __init__(
        self,
        config: AgentConfig,
        provider: ReasoningProvider,
        tools: ToolRegistry,
        executor: Executor,
        *,
        agent_id: str | None = None,
    ) -> None:
        self.id = agent_id or f"agent-{uuid4().hex[:12]}"
        self.config = config
        self.provider = provider
        self.tools = tools
        self.executor = executor
        self._state = self._fresh_state(AgentContext())
        self._stop_requested = False
        self._pause_requested = False
        self._deliveries: set[asyncio.Future[Any]] = set()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def execute(self, task: str, context: AgentContext | None = None) -> AgentResult:
        """Run the loop on *task* until it finishes, fails, or is interrupted."""
        self._state = self._fresh_state(context or AgentContext())
        self._stop_requested = False
        self._pause_requested = False
        started = time.monotonic()
        max_iterations = self._state.budget.max_iterations or DEFAULT_MAX_ITERATIONS

        with _tracer.start_as_current_span("agent.execute") as span:
            span.set_attribute(ATTR_AGENT_ID, self.id)
            span.set_attribute(ATTR_AGENT_ROLE, self.config.role)
            result = await self._run(task, max_iterations, started)
            span.set_attribute(ATTR_STATUS, result.status.value)
            span.set_attribute(ATTR_COST, result.total_cost)
        return result

    def stop(self) -> None:
        self._stop_requested = True

    def pause(self) -> AgentState:
        self._pause_requested = True
        return self.get_status()

    def resume(self, state: AgentState) -> None:
        """Restore a snapshot previously returned by :meth:`get_status`."""
        self._state = _snapshot(state)
        self._pause_requested = False
        self._stop_requested = False

    def get_status(self) -> AgentState:
        return _snapshot(self._state)

    def update_config(
        self,
        *,
        system_prompt: str | None = None,
        budget: Budget | dict[str, Any] | None = None,
        tools: list[str] | None = None,
    ) -> None:
        """Merge a partial configuration into the current one.

        Budget fields are merged individually; only fields that were
        explicitly set on *budget* replace the current values.
        """
        updates: dict[str, Any] = {}
        if system_prompt is not None:
            updates["system_prompt"] = system_prompt
        if budget is not None:
            patch = Budget.model_validate(budget) if isinstance(budget, dict) else budget
            updates["budget"] = self.config.budget.model_copy(
                update=patch.model_dump(exclude_unset=True)
            )
        if tools is not None:
            updates["tools"] = list(tools)
        self.config = self.config.model_copy(update=updates)
        if "budget" in updates:
            self._state.budget = self.config.budget.model_copy()

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    async def _run(self, task: str, max_iterations: int, started: float) -> AgentResult:
        iteration = 0
        try:
            while iteration < max_iterations:
                step_number = len(self._state.steps) + 1
                self._emit(StreamEventType.STEP_START, step_number=step_number)

                if self._stop_requested:
                    self._state.status = AgentStatus.INTERRUPTED
                    break
                if self._pause_requested:
                    self._state.status = AgentStatus.IDLE
                    raise AgentPausedError()
                if self._budget_exceeded(started):
                    self._state.status = AgentStatus.FAILED
                    logger.info("Agent %s stopped: budget exceeded", self.id)
                    return self._result(started, error=BUDGET_ERROR)

                self._state.current_step = step_number
                self._state.status = AgentStatus.REASONING
                action, tokens, cost = await self._reason(task, step_number)
                self._emit(StreamEventType.THOUGHT, thought=action.thought)

                self._state.status = AgentStatus.ACTING
                self._emit(StreamEventType.ACTION, action=action.model_dump(mode="json"))
                observation = await self._act(action)
                self._emit(
                    StreamEventType.OBSERVATION, observation=observation.model_dump(mode="json")
                )

                self._state.status = AgentStatus.OBSERVING
                self._observe(step_number, action, observation, tokens, cost)
                self._emit(StreamEventType.STEP_END, step_number=step_number)

                if action.type is AgentActionType.FINISH:
                    self._state.status = AgentStatus.COMPLETED
                    return self._result(started, final_response=action.response)

                iteration += 1
                self._emit(
                    StreamEventType.PROGRESS,
                    iteration=iteration,
                    max_iterations=max_iterations,
                    total_tokens=self._state.total_tokens,
                    total_cost=self._state.total_cost,
                )

            if self._state.status is AgentStatus.INTERRUPTED:
                return self._result(started, error=INTERRUPTED_ERROR)

            self._state.status = AgentStatus.FAILED
            return self._result(started, error=MAX_ITERATIONS_ERROR)
        except Exception as exc:
            logger.warning("Agent %s failed: %s", self.id, exc)
            self._state.status = AgentStatus.FAILED
            message = str(exc) or type(exc).__name__
            self._emit(StreamEventType.ERROR, error=message)
            return self._result(started, error=message)

    def _budget_exceeded(self, started: float) -> bool:
        budget = self._state.budget
        if budget.max_tokens is not None and self._state.total_tokens >= budget.max_tokens:
            return True
        if budget.max_cost is not None and self._state.total_cost >= budget.max_cost:
            return True
        if budget.max_duration_ms is not None:
            return (time.monotonic() - started) * 1000 >= budget.max_duration_ms
        return False

    async def _reason(self, task: str, step_number: int) -> tuple[AgentAction, int, float]:
        messages = self._build_messages(task)
        schemas = self.tools.get_schemas(self.config.tools)

        with _tracer.start_as_current_span("agent.reason") as span:
            span.set_attribute(ATTR_AGENT_ID, self.id)
            span.set_attribute(ATTR_ITERATION, step_number)

            response = await self.provider.chat(messages, schemas or None)

            if response.usage is not None:
                input_tokens = response.usage.input_tokens
                output_tokens = response.usage.output_tokens
            else:
                input_tokens = sum(
                    self.provider.count_tokens(json.dumps(m.model_dump())) for m in messages
                )
                output_tokens = self.provider.count_tokens(response.content)
            cost = self.provider.calculate_cost(input_tokens, output_tokens)

            span.set_attribute(ATTR_TOKENS_INPUT, input_tokens)
            span.set_attribute(ATTR_TOKENS_OUTPUT, output_tokens)
            span.set_attribute(ATTR_COST, cost)

        tokens = input_tokens + output_tokens
        self._state.total_tokens += tokens
        self._state.total_cost += cost

        thought = response.content
        if response.tool_calls:
            call = response.tool_calls[0]
            action = AgentAction(
                type=AgentActionType.TOOL, tool=call.name, input=call.arguments, thought=thought
            )
        elif self._is_completion(thought):
            action = AgentAction(type=AgentActionType.FINISH, thought=thought, response=thought)
        else:
            action = AgentAction(type=AgentActionType.THINK, thought=thought)
        logger.debug("Agent %s step %d: %s", self.id, step_number, action.type.value)
        return action, tokens, cost

    def _is_completion(self, content: str) -> bool:
        lowered = content.lower()
        return any(phrase.lower() in lowered for phrase in self.config.completion_phrases)

    async def _act(self, action: AgentAction) -> AgentObservation:
        if action.type is not AgentActionType.TOOL or not action.tool:
            return AgentObservation(success=True, output=action.thought)

        if self.config.tools is not None and action.tool not in self.config.tools:
            return AgentObservation(
                success=False, error=f"Tool '{action.tool}' is not available to this agent"
            )

        context = ToolContext(
            conversation_id=self._state.context.conversation_id,
            agent_id=self.id,
            working_directory=self.executor.get_cwd(),
            executor=self.executor,
            metadata=dict(self._state.context.metadata),
        )
        with _tracer.start_as_current_span("agent.tool") as span:
            span.set_attribute(ATTR_AGENT_ID, self.id)
            span.set_attribute(ATTR_TOOL_NAME, action.tool)
            result = await self.tools.execute(action.tool, action.input, context)
            span.set_attribute(ATTR_TOOL_SUCCESS, result.success)

        return AgentObservation(
            success=result.success,
            output=result.output,
            error=result.error,
            metadata=result.metadata,
        )

    def _observe(
        self,
        step_number: int,
        action: AgentAction,
        observation: AgentObservation,
        tokens: int,
        cost: float,
    ) -> None:
        step = AgentStep(
            step_number=step_number,
            timestamp=datetime.now(timezone.utc),
            thought=action.thought,
            action=action,
            observation=observation,
            tokens=tokens,
            cost=cost,
        )
        self._state.steps.append(step)

    # ------------------------------------------------------------------
    # Prompt construction
    # ------------------------------------------------------------------

    def _build_messages(self, task: str) -> list[ChatMessage]:
        messages = [ChatMessage.system(self._system_prompt()), ChatMessage.user(task)]
        for step in self._state.steps:
            messages.append(ChatMessage.assistant(step.thought))
            if step.observation is not None:
                messages.append(ChatMessage.user(_format_observation(step.observation)))
        return messages

    def _system_prompt(self) -> str:
        if self.config.system_prompt:
            return self.config.system_prompt

        available = [
            tool
            for tool in self.tools.list_enabled()
            if self.config.tools is None or tool.name in self.config.tools
        ]
        tool_lines = "\n".join(f"- {tool.name}: {tool.description}" for tool in available)
        return (
            f"You are {self.config.name}, an autonomous agent that solves tasks step by step.\n\n"
            "Work in a loop: think about what to do next, call a tool when you need "
            "information or need to change something, then read the observation before "
            "deciding the next step.\n\n"
            "When the task is done, reply with 'Task completed: [summary]' describing "
            "what you did.\n\n"
            f"Available tools:\n{tool_lines or '(none)'}"
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _fresh_state(self, context: AgentContext) -> AgentState:
        return AgentState(
            agent_id=self.id,
            status=AgentStatus.IDLE,
            context=context,
            budget=self.config.budget.model_copy(),
        )

    def _result(
        self,
        started: float,
        *,
        final_response: str | None = None,
        error: str | None = None,
    ) -> AgentResult:
        return AgentResult(
            success=self._state.status is AgentStatus.COMPLETED,
            status=self._state.status,
            steps=list(self._state.steps),
            final_response=final_response,
            error=error,
            total_tokens=self._state.total_tokens,
            total_cost=self._state.total_cost,
            duration_ms=(time.monotonic() - started) * 1000,
        )

    def _emit(self, event_type: StreamEventType, **data: Any) -> None:
        """Deliver an event; coroutine callbacks are scheduled, never awaited."""
        callback = self._state.context.on_stream
        if callback is None:
            return
        event = StreamEvent(type=event_type, agent_id=self.id, data=data)
        try:
            outcome = callback(event)
        except Exception:
            logger.warning("Stream callback failed on %s", event_type.value, exc_info=True)
            return
        if inspect.isawaitable(outcome):
            task = asyncio.ensure_future(outcome)
            self._deliveries.add(task)
            task.add_done_callback(self._delivered)

    def _delivered(self, task: asyncio.Future[Any]) -> None:
        self._deliveries.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning("Stream callback failed", exc_info=task.exception())


def _format_observation(observation: AgentObservation) -> str:
    label = "Success" if observation.success else "Error"
    body: Any = observation.output if observation.output is not None else observation.error
    if body is None:
        body = ""
    elif not isinstance(body, str):
        body = json.dumps(body, default=str)
    return f"Observation: {label}\n{body}"


def _snapshot(state: AgentState) -> AgentState:
    # Round-trips through plain data; the stream callback is not part of the snapshot.
    return AgentState.model_validate(state.model_dump())
