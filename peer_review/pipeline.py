"""Stage orchestration: initial answers -> cross-critiques -> summary.

Each stage starts all of its tasks together and is a barrier: the next stage
starts only when every task of the current one has succeeded. The first
failure cancels the rest of its stage and ends the run.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence

from config.config_loader import PromptsConfig
from peer_review.aggregator import aggregate
from peer_review.errors import ConfigurationError, ReviewError, UnknownError
from peer_review.invoker import ProviderInvoker
from peer_review.models import PipelineState, Prompt, ReviewResult, Role, StageOutput, StageTask

logger = logging.getLogger(__name__)

StageCallback = Callable[[int, dict[str, StageOutput]], None]


def critique_pairs(labels: Sequence[str]) -> dict[str, str]:
    """Map each critic to the reviewer whose output it critiques.

    A rotation, so nobody critiques themselves; for two labels it is the
    complement mapping.
    """
    return {critic: labels[(i + 1) % len(labels)] for i, critic in enumerate(labels)}


async def _cancel_all(tasks: Sequence[asyncio.Task]) -> None:
    for task in tasks:
        task.cancel()
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)


class StageGraph:
    """One peer review run over two reviewer roles and a summarizer.

    A graph runs once; ``state``, ``transitions`` and ``error`` describe
    how that run went.
    """

    def __init__(
        self,
        reviewers: Sequence[Role],
        summarizer: Role,
        prompts: PromptsConfig,
        invoker: ProviderInvoker | None = None,
        on_stage_complete: StageCallback | None = None,
    ) -> None:
        if len(reviewers) != 2:
            raise ConfigurationError(f"Peer review needs exactly 2 reviewers, got {len(reviewers)}.")
        if reviewers[0].label == reviewers[1].label:
            raise ConfigurationError(f"Reviewer labels must differ, both are '{reviewers[0].label}'.")
        self._reviewers = list(reviewers)
        self._summarizer = summarizer
        self._prompts = prompts
        self._invoker = invoker or ProviderInvoker()
        self._on_stage_complete = on_stage_complete
        self.state = PipelineState.PENDING
        self.transitions: list[PipelineState] = [PipelineState.PENDING]
        self.error: ReviewError | None = None

    @property
    def reviewer_labels(self) -> list[str]:
        return [r.label for r in self._reviewers]

    def _transition(self, state: PipelineState) -> None:
        logger.debug("Pipeline %s -> %s", self.state.value, state.value)
        self.state = state
        self.transitions.append(state)

    # --- task builders -----------------------------------------------------

    def _initial_tasks(self, prompt: Prompt) -> list[StageTask]:
        user_message = self._prompts.initial_user.format(prompt=prompt.text)
        return [
            StageTask(r.label, r.provider, self._prompts.initial_system, user_message)
            for r in self._reviewers
        ]

    def _critique_tasks(self, prompt: Prompt, initial: dict[str, StageOutput]) -> list[StageTask]:
        pairs = critique_pairs(self.reviewer_labels)
        tasks: list[StageTask] = []
        for critic in self._reviewers:
            target = pairs[critic.label]
            user_message = self._prompts.critique_user.format(
                prompt=prompt.text,
                target=target,
                response=initial[target].text,
            )
            tasks.append(StageTask(critic.label, critic.provider, self._prompts.critique_system, user_message))
        return tasks

    def _summary_task(self, critiques: dict[str, StageOutput]) -> StageTask:
        label_a, label_b = self.reviewer_labels
        names = {"reviewer_a": label_a, "reviewer_b": label_b}
        return StageTask(
            self._summarizer.label,
            self._summarizer.provider,
            self._prompts.summary_system.format(**names),
            self._prompts.summary_user.format(
                critique_a=critiques[label_a].text,
                critique_b=critiques[label_b].text,
                **names,
            ),
        )

    # --- execution ---------------------------------------------------------

    async def _invoke(self, task: StageTask) -> str:
        return await self._invoker.invoke(
            task.provider, task.system_instruction, task.user_message, role=task.role
        )

    async def _run_stage(self, number: int, state: PipelineState, tasks: list[StageTask]) -> dict[str, StageOutput]:
        """Run tasks concurrently; return outputs keyed by role or raise the first failure."""
        self._transition(state)
        logger.info("Starting stage %d with %d task(s)", number, len(tasks))

        running = {
            task.role: asyncio.create_task(self._invoke(task), name=f"stage{number}:{task.role}")
            for task in tasks
        }
        try:
            done, pending = await asyncio.wait(running.values(), return_when=asyncio.FIRST_EXCEPTION)
        except asyncio.CancelledError:
            await _cancel_all(list(running.values()))
            raise

        failed = [t for t in running.values() if t in done and not t.cancelled() and t.exception() is not None]
        if failed:
            if pending:
                logger.info("Stage %d failed, cancelling %d in-flight call(s)", number, len(pending))
            await _cancel_all(list(pending))
            raise failed[0].exception()

        outputs = {role: StageOutput(role, t.result()) for role, t in running.items()}
        logger.info("Stage %d complete", number)
        if self._on_stage_complete:
            self._on_stage_complete(number, outputs)
        return outputs

    async def run(self, prompt: Prompt) -> ReviewResult:
        """Run all three stages.

        Returns:
            The complete ReviewResult.

        Raises:
            ReviewError: Exactly one classified error if any stage failed.
        """
        if self.state is not PipelineState.PENDING:
            raise RuntimeError("A StageGraph can only be run once")

        try:
            initial = await self._run_stage(1, PipelineState.STAGE1_RUNNING, self._initial_tasks(prompt))
            critiques = await self._run_stage(2, PipelineState.STAGE2_RUNNING, self._critique_tasks(prompt, initial))
            summary = await self._run_stage(3, PipelineState.STAGE3_RUNNING, [self._summary_task(critiques)])
        except ReviewError as exc:
            self.error = exc
            self._transition(PipelineState.FAILED)
            raise
        except Exception as exc:
            logger.exception("Review pipeline failed unexpectedly")
            self.error = UnknownError()
            self._transition(PipelineState.FAILED)
            raise self.error from exc

        result = aggregate(prompt, self.reviewer_labels, initial, critiques, summary[self._summarizer.label])
        self._transition(PipelineState.COMPLETED)
        return result


async def run_review(
    prompt: Prompt,
    reviewers: Sequence[Role],
    summarizer: Role,
    prompts: PromptsConfig,
    invoker: ProviderInvoker | None = None,
    on_stage_complete: StageCallback | None = None,
) -> ReviewResult:
    """Run a fresh StageGraph for one prompt."""
    graph = StageGraph(reviewers, summarizer, prompts, invoker=invoker, on_stage_complete=on_stage_complete)
    return await graph.run(prompt)
