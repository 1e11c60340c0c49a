"""Processing orchestrator: screenshots in, structured solution out.

Drives the two processing queues:

    primary    IDLE -> EXTRACTING -> SOLVING -> SUCCEEDED
    secondary  IDLE -> DEBUGGING -> SUCCEEDED

Either queue can end in FAILED or CANCELLED from any non-terminal state.

A primary run makes two model calls: a vision call that extracts the
problem from the screenshots (parsed into :class:`ProblemInfo`), then a
text call that generates the solution (parsed into :class:`SolutionResult`).
A secondary (debug) run makes one vision call carrying the stored problem
plus the screenshots, and yields a debug-flavoured result.

Every run gets a private :class:`_RunContext` captured when it starts: the
adapter, interview mode, output language and a fresh cancellation token.
Config changes rebuild the orchestrator's adapter for *future* runs only.

Results travel two ways: each ``start_*`` call returns an
:class:`asyncio.Task` resolving to a :class:`RunOutcome`, and every state
change is mirrored to the injected :class:`IEventSink`.  Once a run is
cancelled no further events are emitted for it.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

import structlog

from interview_coder.interfaces.config_store import IConfigStore
from interview_coder.interfaces.event_sink import IEventSink
from interview_coder.interfaces.image_source import IImageSource
from interview_coder.interfaces.model_adapter import IModelAdapter
from interview_coder.models.config import AppConfig
from interview_coder.models.events import (
    ExtractionSucceededEvent,
    PipelineEvent,
    ProgressEvent,
    RunCancelledEvent,
    RunFailedEvent,
    RunSucceededEvent,
)
from interview_coder.models.images import CapturedImage
from interview_coder.models.messages import ModelMessage, RequestOptions
from interview_coder.models.pipeline import PipelineSession, QueueKind, RunOutcome, RunState
from interview_coder.models.problem import InterviewMode, ProblemInfo, SolutionResult
from interview_coder.prompts.registry import PromptTemplates, get_templates
from interview_coder.providers.llm.factory import adapter_from_config
from interview_coder.services.response_parser import ResponseParser
from interview_coder.utils.cancellation import CancellationToken
from interview_coder.utils.errors import (
    ConfigurationError,
    ErrorKind,
    InterviewCoderError,
    MissingProblemInfoError,
    NoImagesError,
    NotConfiguredError,
    OperationCancelledError,
    ParseError,
)
from interview_coder.utils.logging import get_logger

AdapterFactory = Callable[[AppConfig], IModelAdapter]

# Both passes use the same low-temperature budget.
_MAX_TOKENS = 4000
_TEMPERATURE = 0.2


@dataclass
class _RunContext:
    """Everything one run pins at start.  Only its own task mutates it."""

    session: PipelineSession
    adapter: IModelAdapter | None
    adapter_error: InterviewCoderError | None
    token: CancellationToken
    mode: InterviewMode
    language: str
    images: list[CapturedImage]
    problem_info: ProblemInfo | None = None
    logger: structlog.BoundLogger | None = None
    task: asyncio.Task[RunOutcome] | None = field(default=None, repr=False)

    @property
    def queue_kind(self) -> QueueKind:
        return self.session.queue_kind

    @property
    def run_id(self) -> str:
        return self.session.run_id

    @property
    def templates(self) -> PromptTemplates:
        return get_templates(self.mode)

    @property
    def options(self) -> RequestOptions:
        return RequestOptions(
            max_tokens=_MAX_TOKENS, temperature=_TEMPERATURE, cancel_token=self.token
        )


class ProcessingOrchestrator:
    """Runs extraction/solution and debug passes against the active model adapter.

    All collaborators are injected.  ``adapter_factory`` defaults to building
    the adapter for the config's active provider; tests inject fakes.
    """

    def __init__(
        self,
        config_store: IConfigStore,
        image_source: IImageSource,
        event_sink: IEventSink,
        parser: ResponseParser | None = None,
        adapter_factory: AdapterFactory | None = None,
    ) -> None:
        self._config_store = config_store
        self._image_source = image_source
        self._event_sink = event_sink
        self._parser = parser or ResponseParser()
        self._adapter_factory = adapter_factory or adapter_from_config
        self._logger: structlog.BoundLogger = get_logger(__name__)

        self._adapter: IModelAdapter | None = None
        self._adapter_error: InterviewCoderError | None = None
        self._adapter_key: tuple[object, ...] | None = None
        # Replaced adapters, closed once no pinned run still uses them.
        self._retired: list[IModelAdapter] = []
        self._closing: set[asyncio.Task[None]] = set()

        self._contexts: dict[QueueKind, _RunContext] = {}
        # Every run whose task has not finished, superseded ones included.
        self._live: list[_RunContext] = []
        self._sessions: dict[QueueKind, PipelineSession] = {}
        self._problem_info: ProblemInfo | None = None
        self._has_debugged = False

        self._rebuild_adapter(config_store.get())
        self._unsubscribe = config_store.subscribe(self._on_config_changed)

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def adapter(self) -> IModelAdapter | None:
        """The adapter the *next* run will pin."""
        return self._adapter

    @property
    def problem_info(self) -> ProblemInfo | None:
        return self._problem_info

    @property
    def has_debugged(self) -> bool:
        return self._has_debugged

    def current_state(self, queue_kind: QueueKind) -> RunState:
        session = self._sessions.get(queue_kind)
        return session.state if session is not None else RunState.IDLE

    def session(self, queue_kind: QueueKind) -> PipelineSession | None:
        """Return the latest session snapshot for *queue_kind*, if any run started."""
        return self._sessions.get(queue_kind)

    # ------------------------------------------------------------------
    # Run control
    # ------------------------------------------------------------------

    def start_primary(
        self, images: Sequence[CapturedImage] | None = None
    ) -> asyncio.Task[RunOutcome]:
        """Start a primary run and return its task.

        Parameters
        ----------
        images:
            Screenshots to process.  ``None`` reads the image source's
            primary queue.

        Returns
        -------
        asyncio.Task[RunOutcome]
            Resolves once the run reaches a terminal state.  Never raises
            for run failures; those are reported in the outcome.
        """
        return self._start(QueueKind.PRIMARY, images)

    def start_secondary(
        self, images: Sequence[CapturedImage] | None = None
    ) -> asyncio.Task[RunOutcome]:
        """Start a debug run; ``None`` sends the primary plus secondary queues."""
        return self._start(QueueKind.SECONDARY, images)

    async def run_primary(self, images: Sequence[CapturedImage] | None = None) -> RunOutcome:
        return await self.start_primary(images)

    async def run_secondary(self, images: Sequence[CapturedImage] | None = None) -> RunOutcome:
        return await self.start_secondary(images)

    def cancel_primary(self) -> bool:
        """Cancel the active primary run.  Returns ``False`` if there was none."""
        return self._cancel(QueueKind.PRIMARY, "cancelled by caller")

    def cancel_secondary(self) -> bool:
        """Cancel the active debug run.  Returns ``False`` if there was none."""
        return self._cancel(QueueKind.SECONDARY, "cancelled by caller")

    def reset(self) -> None:
        """Cancel both queues and forget the stored problem and debug flag."""
        self.cancel_primary()
        self.cancel_secondary()
        self._problem_info = None
        self._has_debugged = False
        self._sessions.clear()
        self._logger.info("orchestrator_reset")

    async def close(self) -> None:
        """Stop listening for config changes, cancel runs and close the adapter."""
        self._unsubscribe()
        tasks = [ctx.task for ctx in self._live if ctx.task is not None]
        self.cancel_primary()
        self.cancel_secondary()
        if tasks:
            await asyncio.wait(tasks)
        if self._closing:
            await asyncio.wait(list(self._closing))
        retired, self._retired = self._retired, []
        for adapter in [*retired, self._adapter]:
            if adapter is not None:
                await self._close_adapter(adapter)

    # ------------------------------------------------------------------
    # Adapter lifecycle
    # ------------------------------------------------------------------

    @staticmethod
    def _key_for(config: AppConfig) -> tuple[object, ...]:
        provider = config.provider_config()
        return (
            config.active_provider,
            provider.api_key,
            provider.model_id,
            config.request_timeout_sec,
        )

    def _rebuild_adapter(self, config: AppConfig) -> None:
        self._adapter_key = self._key_for(config)
        previous = self._adapter
        try:
            self._adapter = self._adapter_factory(config)
            self._adapter_error = None
        except ConfigurationError as exc:
            # Surfaced to the next run as a ConfigurationError failure.
            self._adapter = None
            self._adapter_error = exc
            self._logger.warning(
                "model_adapter_unavailable",
                provider=config.active_provider,
                error=exc.message,
            )
        self._retire(previous)
        if self._adapter is None:
            return
        self._logger.info(
            "model_adapter_ready",
            provider=self._adapter.provider_id,
            model=self._adapter.current_model(),
            configured=self._adapter.is_configured(),
        )

    def _on_config_changed(self, config: AppConfig) -> None:
        if self._key_for(config) == self._adapter_key:
            return
        # Runs in flight keep the adapter they pinned.
        self._rebuild_adapter(config)

    def _retire(self, previous: IModelAdapter | None) -> None:
        self._retired = [a for a in self._retired if a is not self._adapter]
        if previous is None or previous is self._adapter:
            return
        if all(a is not previous for a in self._retired):
            self._retired.append(previous)
        self._release_retired()

    def _release_retired(self) -> None:
        """Close retired adapters that no run in flight has pinned."""
        pinned = [ctx.adapter for ctx in self._live]
        idle = [a for a in self._retired if all(a is not p for p in pinned)]
        if not idle:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop yet: close() picks them up.
            return
        for adapter in idle:
            self._retired.remove(adapter)
            task = loop.create_task(self._close_adapter(adapter))
            self._closing.add(task)
            task.add_done_callback(self._closing.discard)

    async def _close_adapter(self, adapter: IModelAdapter) -> None:
        aclose = getattr(adapter, "aclose", None)
        if aclose is None:
            return
        try:
            await aclose()
        except Exception as exc:
            self._logger.warning(
                "model_adapter_close_failed", provider=adapter.provider_id, error=str(exc)
            )

    # ------------------------------------------------------------------
    # Run lifecycle
    # ------------------------------------------------------------------

    def _start(
        self, queue_kind: QueueKind, images: Sequence[CapturedImage] | None
    ) -> asyncio.Task[RunOutcome]:
        self._cancel(queue_kind, "superseded by a new run")

        config = self._config_store.get()
        session = PipelineSession(queue_kind=queue_kind)
        ctx = _RunContext(
            session=session,
            adapter=self._adapter,
            adapter_error=self._adapter_error,
            token=CancellationToken(),
            mode=InterviewMode.resolve(config.mode),
            language=config.language,
            images=list(images) if images is not None else self._queued_images(queue_kind),
            problem_info=self._problem_info if queue_kind == QueueKind.SECONDARY else None,
            logger=self._logger.bind(run_id=session.run_id, queue=queue_kind.value),
        )
        self._contexts[queue_kind] = ctx
        self._live.append(ctx)
        self._sessions[queue_kind] = session

        step = self._run_primary if queue_kind == QueueKind.PRIMARY else self._run_secondary
        ctx.task = asyncio.get_running_loop().create_task(
            self._execute(ctx, step), name=f"{queue_kind.value}-run-{session.run_id}"
        )
        ctx.task.add_done_callback(lambda task: self._finish(ctx, task))
        ctx.logger.info(
            "run_started",
            mode=ctx.mode.value,
            language=ctx.language,
            images=len(ctx.images),
            provider=ctx.adapter.provider_id if ctx.adapter else None,
        )
        return ctx.task

    def _queued_images(self, queue_kind: QueueKind) -> list[CapturedImage]:
        images = self._image_source.list_images(QueueKind.PRIMARY)
        if queue_kind == QueueKind.SECONDARY:
            images = images + self._image_source.list_images(QueueKind.SECONDARY)
        return images

    async def _execute(
        self, ctx: _RunContext, step: Callable[[_RunContext], Awaitable[RunOutcome]]
    ) -> RunOutcome:
        try:
            ctx.token.raise_if_cancelled()
            return await step(ctx)
        except OperationCancelledError:
            self._cancel_context(ctx, ctx.token.reason or "cancelled")
            return self._outcome(ctx)
        except asyncio.CancelledError:
            self._cancel_context(ctx, "task cancelled")
            raise
        except ParseError as exc:
            return self._fail(ctx, exc.kind, exc.message, raw_response=exc.raw_response)
        except InterviewCoderError as exc:
            return self._fail(ctx, exc.kind, exc.message)
        except Exception as exc:
            ctx.logger.exception("run_unexpected_error", error=str(exc))
            return self._fail(ctx, ErrorKind.UNKNOWN, str(exc) or type(exc).__name__)

    def _finish(self, ctx: _RunContext, task: asyncio.Task[RunOutcome]) -> None:
        if task.cancelled():
            # Cancelled before its first step ran.
            self._cancel_context(ctx, "task cancelled")
        if self._contexts.get(ctx.queue_kind) is ctx:
            del self._contexts[ctx.queue_kind]
        self._live = [live for live in self._live if live is not ctx]
        self._release_retired()

    def _cancel(self, queue_kind: QueueKind, reason: str) -> bool:
        ctx = self._contexts.get(queue_kind)
        if ctx is None:
            return False
        return self._cancel_context(ctx, reason)

    def _cancel_context(self, ctx: _RunContext, reason: str) -> bool:
        """Move *ctx* to CANCELLED and fire its token.  Idempotent."""
        ctx.token.cancel(reason)
        if ctx.session.state.is_terminal:
            return False

        self._set_session(ctx, ctx.session.advance(RunState.CANCELLED))
        if ctx.queue_kind == QueueKind.PRIMARY:
            ctx.problem_info = None
            if self._contexts.get(QueueKind.PRIMARY) is ctx:
                self._problem_info = None
        ctx.logger.info("run_cancelled", reason=reason)
        # Emitted directly: _emit drops everything once the token fired.
        self._event_sink.emit(RunCancelledEvent(run_id=ctx.run_id, queue_kind=ctx.queue_kind))
        return True

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def _run_primary(self, ctx: _RunContext) -> RunOutcome:
        adapter = self._require_adapter(ctx)
        images = self._require_images(ctx)
        templates = ctx.templates

        self._set_session(ctx, ctx.session.advance(RunState.EXTRACTING))
        self._progress(ctx, "Analyzing problem from screenshots...", 20)
        extraction = await adapter.vision(
            [
                ModelMessage.system(templates.extraction_system_prompt),
                ModelMessage.user(
                    templates.extraction_user_prompt(ctx.language),
                    *(image.to_part() for image in images),
                ),
            ],
            ctx.options,
        )
        ctx.token.raise_if_cancelled()

        problem = self._parser.parse_problem_info(extraction.text, ctx.mode)
        ctx.problem_info = problem
        if self._contexts.get(QueueKind.PRIMARY) is ctx:
            self._problem_info = problem
            self._has_debugged = False
        self._emit(ctx, ExtractionSucceededEvent(
            run_id=ctx.run_id, queue_kind=ctx.queue_kind, problem_info=problem
        ))
        self._progress(ctx, "Problem analyzed successfully. Preparing to generate solution...", 40)

        self._set_session(ctx, ctx.session.advance(RunState.SOLVING))
        self._progress(ctx, "Creating optimal solution with detailed explanations...", 60)
        solution = await adapter.complete(
            [
                ModelMessage.system(templates.solution_system_prompt),
                ModelMessage.user(templates.solution_prompt(problem, ctx.language)),
            ],
            ctx.options,
        )
        ctx.token.raise_if_cancelled()

        result = self._parse_result(ctx, solution.text, debug=False)
        return self._succeed(ctx, result, "Solution generated successfully")

    async def _run_secondary(self, ctx: _RunContext) -> RunOutcome:
        adapter = self._require_adapter(ctx)
        problem = ctx.problem_info
        if problem is None:
            raise MissingProblemInfoError()
        images = self._require_images(ctx)
        templates = ctx.templates

        self._set_session(ctx, ctx.session.advance(RunState.DEBUGGING))
        self._progress(ctx, "Processing debug screenshots...", 30)
        self._progress(ctx, "Analyzing code and generating debug feedback...", 60)
        response = await adapter.vision(
            [
                ModelMessage.system(templates.debug_system_prompt(ctx.language)),
                ModelMessage.user(
                    templates.debug_user_prompt(problem, ctx.language),
                    *(image.to_part() for image in images),
                ),
            ],
            ctx.options,
        )
        ctx.token.raise_if_cancelled()

        result = self._parse_result(ctx, response.text, debug=True)
        self._has_debugged = True
        return self._succeed(ctx, result, "Debug analysis complete", has_debugged=True)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _require_adapter(ctx: _RunContext) -> IModelAdapter:
        if ctx.adapter is None:
            raise ctx.adapter_error or NotConfiguredError()
        if not ctx.adapter.is_configured():
            raise NotConfiguredError(provider_name=ctx.adapter.provider_id)
        return ctx.adapter

    @staticmethod
    def _require_images(ctx: _RunContext) -> list[CapturedImage]:
        if not ctx.images:
            raise NoImagesError()
        return ctx.images

    def _parse_result(self, ctx: _RunContext, text: str, *, debug: bool) -> SolutionResult:
        try:
            if debug:
                return self._parser.parse_debug(text, ctx.mode)
            return self._parser.parse_solution(text, ctx.mode)
        except ParseError as exc:
            # Solution-side parse problems never fail the run.
            ctx.logger.warning("solution_parse_fallback", error=exc.message)
            return self._parser.fallback_solution(text, ctx.mode, is_debug=debug)

    def _set_session(self, ctx: _RunContext, session: PipelineSession) -> None:
        ctx.session = session
        if self._contexts.get(ctx.queue_kind) is ctx:
            self._sessions[ctx.queue_kind] = session

    def _emit(self, ctx: _RunContext, event: PipelineEvent) -> None:
        if ctx.token.cancelled:
            return
        self._event_sink.emit(event)

    def _progress(self, ctx: _RunContext, message: str, percent: int) -> None:
        ctx.logger.debug("run_progress", message=message, percent=percent)
        self._emit(ctx, ProgressEvent(
            run_id=ctx.run_id, queue_kind=ctx.queue_kind, message=message, percent=percent
        ))

    def _succeed(
        self, ctx: _RunContext, result: SolutionResult, message: str, **updates: object
    ) -> RunOutcome:
        self._set_session(ctx, ctx.session.advance(RunState.SUCCEEDED, **updates))
        self._progress(ctx, message, 100)
        self._emit(ctx, RunSucceededEvent(
            run_id=ctx.run_id, queue_kind=ctx.queue_kind, result=result
        ))
        ctx.logger.info(
            "run_succeeded",
            mode=ctx.mode.value,
            thoughts=len(result.thoughts),
            duration_sec=self._duration(ctx.session),
        )
        return self._outcome(ctx, result)

    def _fail(
        self, ctx: _RunContext, kind: ErrorKind, message: str, raw_response: str = ""
    ) -> RunOutcome:
        if ctx.token.cancelled or ctx.session.state.is_terminal:
            return self._outcome(ctx)
        self._set_session(ctx, ctx.session.advance(
            RunState.FAILED, error_kind=kind, error_message=message, raw_response=raw_response
        ))
        ctx.logger.warning("run_failed", error_kind=kind.value, error=message)
        self._emit(ctx, RunFailedEvent(
            run_id=ctx.run_id, queue_kind=ctx.queue_kind, error_kind=kind, message=message
        ))
        return self._outcome(ctx)

    @staticmethod
    def _outcome(ctx: _RunContext, result: SolutionResult | None = None) -> RunOutcome:
        return RunOutcome(
            run_id=ctx.run_id,
            queue_kind=ctx.queue_kind,
            state=ctx.session.state,
            problem_info=ctx.problem_info,
            result=result,
            error_kind=ctx.session.error_kind,
            error_message=ctx.session.error_message,
        )

    @staticmethod
    def _duration(session: PipelineSession) -> float | None:
        if session.finished_at is None:
            return None
        return round((session.finished_at - session.started_at).total_seconds(), 3)
