"""Bounded-retry unique-sampling loop.

The sampler drives an external interaction generator with a single seeded
random source until it has persisted ``target_count`` distinct interactions,
or until the shared retry budget is spent.

Every attempt is exactly one of:
- success: a new interaction, persisted under the next ordinal; free
- duplicate: an interaction equal to one already accepted; costs one retry
- failure: the generator produced nothing; costs one retry

The run is Exhausted as soon as the remaining budget is zero while the
target is not reached. That check happens before the first attempt and after
every attempt that costs a retry, so ``attempts <= retry_budget + produced``
always holds and a zero budget means no attempt is made at all.
"""

import logging
import random
from pathlib import Path
from typing import Any

from ..core.models import (
    AttemptOutcome,
    ProbabilityProfile,
    RunResult,
    SamplerState,
    SamplingConfig,
)
from ..utils.callbacks import AttemptCallback, ItemProgressCallback
from .dedup import DedupSet
from .interfaces import ArtifactGenerator, Persister


logger = logging.getLogger(__name__)


class SamplingError(Exception):
    """Raised when a sampling run cannot continue."""

    pass


class PersistenceError(SamplingError):
    """Raised when an accepted interaction cannot be written."""

    pass


def describe_run(config: SamplingConfig, profile: ProbabilityProfile) -> list[str]:
    """Header status lines describing a run's parameters."""
    return [
        "generated random interactions",
        f"with {profile.name} interaction symbols selection probabilities",
        f"num_ints : {config.target_count}, max_depth : {config.max_depth}, "
        f"min_symbols : {config.min_symbols}, seed : {config.seed}",
        f"in folder '{config.output_dir}'",
    ]


class BoundedUniqueSampler:
    """Single-use driver for one generation run.

    Args:
        config: Target count, structural bounds, retry budget and seed
        profile: Symbol selection probabilities handed to the generator
        generator: Builds one interaction per call, or returns None
        persister: Writes accepted interactions
        context: Opaque generation context passed to generator and persister
        on_progress: Optional callback(produced, target) after each success
        on_attempt: Optional callback(attempt, outcome) after each attempt
    """

    def __init__(
        self,
        config: SamplingConfig,
        profile: ProbabilityProfile,
        generator: ArtifactGenerator,
        persister: Persister,
        context: Any = None,
        on_progress: ItemProgressCallback | None = None,
        on_attempt: AttemptCallback | None = None,
    ):
        self.config = config
        self.profile = profile
        self.generator = generator
        self.persister = persister
        self.context = context
        self.on_progress = on_progress
        self.on_attempt = on_attempt

        self._rng = random.Random(config.seed)
        self._accepted = DedupSet()
        self._produced = 0
        self._remaining = config.retry_budget
        self._attempts = 0
        self._outcomes: list[AttemptOutcome] = []
        self._persisted: list[Path] = []
        self._state = SamplerState.RUNNING
        self._settle()

    @property
    def state(self) -> SamplerState:
        return self._state

    @property
    def produced_count(self) -> int:
        return self._produced

    @property
    def remaining_budget(self) -> int:
        return self._remaining

    @property
    def attempts(self) -> int:
        return self._attempts

    def _settle(self) -> None:
        if self._produced >= self.config.target_count:
            self._state = SamplerState.SUCCEEDED
        elif self._remaining <= 0:
            self._state = SamplerState.EXHAUSTED

    def _attempt(self) -> AttemptOutcome:
        artifact = self.generator(
            self.context,
            self._rng,
            self.config.max_depth,
            self.config.min_symbols,
            self.profile,
        )
        if artifact is None:
            return AttemptOutcome.FAILURE
        if artifact in self._accepted:
            return AttemptOutcome.DUPLICATE

        path = self.persister.persist(
            self.config.output_dir, self._produced, self.context, artifact
        )
        self._accepted.add(artifact)
        self._persisted.append(path)
        self._produced += 1
        return AttemptOutcome.SUCCESS

    def step(self) -> AttemptOutcome:
        """Make one generation attempt.

        An exception from the generator or the persister moves the sampler to
        FAILED and propagates; the interrupted attempt is not recorded.

        Raises:
            SamplingError: If the sampler already reached a terminal state.
            PersistenceError: If the accepted interaction cannot be written.
        """
        if self._state is not SamplerState.RUNNING:
            raise SamplingError(f"Sampler is {self._state.value}, no attempt allowed")

        logger.debug(
            "trying to generate interaction %d out of %d",
            self._produced,
            self.config.target_count,
        )
        try:
            outcome = self._attempt()
        except Exception:
            # The interrupted attempt is not counted and the run cannot resume
            self._state = SamplerState.FAILED
            raise

        self._attempts += 1
        self._outcomes.append(outcome)
        if outcome.consumes_budget:
            logger.debug("retrying... (%s)", outcome.value)
            self._remaining -= 1

        self._settle()
        if self._state is SamplerState.EXHAUSTED:
            logger.warning(
                "... max retries exceeded (%d out of %d interactions generated)",
                self._produced,
                self.config.target_count,
            )

        if self.on_attempt:
            self.on_attempt(self._attempts, outcome)
        if outcome is AttemptOutcome.SUCCESS and self.on_progress:
            self.on_progress(self._produced, self.config.target_count)
        return outcome

    def run(self) -> RunResult:
        """Attempt generation until the target is reached or the budget is spent.

        Raises:
            SamplingError: If an earlier attempt failed with an error.
        """
        while self._state is SamplerState.RUNNING:
            self.step()
        if self._state is SamplerState.FAILED:
            raise SamplingError("Sampler stopped after an error, start a new run")
        return self.result()

    def result(self) -> RunResult:
        """Snapshot of the run. Only meaningful once the sampler is terminal."""
        result = RunResult(
            status_lines=describe_run(self.config, self.profile),
            produced_count=self._produced,
            target_count=self.config.target_count,
            termination=self._state,
            attempts=self._attempts,
            remaining_budget=self._remaining,
            outcomes=list(self._outcomes),
            persisted=list(self._persisted),
            seed=self.config.seed,
        )
        result.status_lines.append(result.summary())
        return result


def run_sampling(
    config: SamplingConfig,
    profile: ProbabilityProfile,
    generator: ArtifactGenerator,
    persister: Persister,
    context: Any = None,
    on_progress: ItemProgressCallback | None = None,
    on_attempt: AttemptCallback | None = None,
) -> RunResult:
    """
    Generate up to ``config.target_count`` distinct interactions.

    Args:
        config: Run parameters
        profile: Symbol selection probabilities
        generator: Callable(context, rng, max_depth, min_symbols, profile)
            returning an interaction or None
        persister: Object whose persist(output_dir, ordinal, context, artifact)
            writes one interaction
        context: Generation context passed through to generator and persister
        on_progress: Optional callback(current, total) for progress updates
        on_attempt: Optional callback(attempt, outcome) after every attempt

    Returns:
        RunResult with status lines, produced count and termination state

    Raises:
        PersistenceError: If an accepted interaction cannot be written
    """
    sampler = BoundedUniqueSampler(
        config,
        profile,
        generator,
        persister,
        context=context,
        on_progress=on_progress,
        on_attempt=on_attempt,
    )
    result = sampler.run()
    logger.info(result.summary())
    return result
