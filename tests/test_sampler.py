"""Tests for the bounded-retry unique-sampling loop."""

import itertools
from pathlib import Path

import pytest

from interactgen.core.models import (
    AttemptOutcome,
    ProbabilityProfile,
    SamplerState,
    SamplingConfig,
    build_profile,
    default_retry_budget,
)
from interactgen.sampler.core import (
    BoundedUniqueSampler,
    PersistenceError,
    SamplingError,
    describe_run,
    run_sampling,
)
from interactgen.sampler.persistence import FilePersister


# =============================================================================
# Stub collaborators
# =============================================================================


class RecordingPersister:
    """Keeps persisted artifacts in memory instead of writing files."""

    def __init__(self):
        self.calls = []

    def persist(self, output_dir, ordinal, context, artifact):
        self.calls.append((ordinal, artifact))
        return Path(output_dir) / f"i{ordinal}.hif"


class FailingPersister:
    def persist(self, output_dir, ordinal, context, artifact):
        raise PersistenceError("disk full")


def scripted(*artifacts):
    """Generator returning the given artifacts in order, then None forever."""
    it = iter(artifacts)
    calls = []

    def generate(context, rng, max_depth, min_symbols, profile):
        calls.append((context, rng, max_depth, min_symbols, profile))
        return next(it, None)

    generate.calls = calls
    return generate


def distinct_generator(context, rng, max_depth, min_symbols, profile):
    return ("interaction", rng.getrandbits(64))


def same_generator(context, rng, max_depth, min_symbols, profile):
    rng.random()
    return "the-same-interaction"


def never_generator(context, rng, max_depth, min_symbols, profile):
    rng.random()
    return None


def word_generator(context, rng, max_depth, min_symbols, profile):
    """Small artifact space so duplicates and failures are frequent."""
    if rng.random() < 0.3:
        return None
    return "".join(rng.choice("ab") for _ in range(3))


def make_config(target, budget, seed=42, output_dir=Path("gen_ints")):
    return SamplingConfig(
        target_count=target,
        max_depth=4,
        min_symbols=2,
        retry_budget=budget,
        seed=seed,
        output_dir=output_dir,
    )


@pytest.fixture
def profile():
    return build_profile("default")


# =============================================================================
# Scenarios
# =============================================================================


class TestScenarios:
    """End-to-end runs with stub generators."""

    def test_custom_profile_always_succeeding(self, tmp_path):
        profile = ProbabilityProfile.from_explicit({"action": 1.0})
        config = make_config(3, 100, seed=42, output_dir=tmp_path)
        persister = FilePersister(lambda ctx, art: f"{art}\n")

        result = run_sampling(config, profile, distinct_generator, persister)

        assert result.produced_count == 3
        assert result.termination is SamplerState.SUCCEEDED
        assert result.succeeded
        assert [p.name for p in result.persisted] == ["i0.hif", "i1.hif", "i2.hif"]
        assert sorted(f.name for f in tmp_path.iterdir()) == ["i0.hif", "i1.hif", "i2.hif"]
        assert result.remaining_budget == 100

    def test_always_duplicate_exhausts(self, profile):
        persister = RecordingPersister()
        result = run_sampling(make_config(5, 3), profile, same_generator, persister)

        assert result.produced_count == 1
        assert result.termination is SamplerState.EXHAUSTED
        assert result.outcomes == [
            AttemptOutcome.SUCCESS,
            AttemptOutcome.DUPLICATE,
            AttemptOutcome.DUPLICATE,
            AttemptOutcome.DUPLICATE,
        ]
        assert result.remaining_budget == 0
        assert len(persister.calls) == 1

    def test_status_lines(self, profile):
        config = make_config(2, 10)
        result = run_sampling(config, profile, distinct_generator, RecordingPersister())

        assert result.status_lines[:4] == describe_run(config, profile)
        assert result.status_lines[0] == "generated random interactions"
        assert "default" in result.status_lines[1]
        assert "num_ints : 2, max_depth : 4, min_symbols : 2, seed : 42" in result.status_lines
        assert result.status_lines[-1] == "generated 2 out of 2 interactions"

    def test_exhausted_summary(self, profile):
        result = run_sampling(make_config(2, 1), profile, never_generator, RecordingPersister())
        assert result.status_lines[-1].startswith("max retries exceeded")
        assert "0 out of 2" in result.status_lines[-1]


# =============================================================================
# Boundaries and budget policy
# =============================================================================


class TestBoundaries:
    """Edge cases of termination and budget accounting."""

    def test_zero_target_makes_no_attempt(self, profile):
        generator = scripted("a")
        sampler = BoundedUniqueSampler(
            make_config(0, 10), profile, generator, RecordingPersister()
        )
        assert sampler.state is SamplerState.SUCCEEDED

        result = sampler.run()
        assert result.termination is SamplerState.SUCCEEDED
        assert result.attempts == 0
        assert generator.calls == []

    def test_zero_target_with_zero_budget_succeeds(self, profile):
        result = run_sampling(make_config(0, 0), profile, never_generator, RecordingPersister())
        assert result.termination is SamplerState.SUCCEEDED

    def test_zero_budget_never_succeeding(self, profile):
        result = run_sampling(make_config(3, 0), profile, never_generator, RecordingPersister())
        assert result.termination is SamplerState.EXHAUSTED
        assert result.produced_count == 0
        assert result.attempts == 0

    def test_zero_budget_makes_no_attempt_even_for_good_generator(self, profile):
        generator = scripted("a", "b")
        result = run_sampling(make_config(2, 0), profile, generator, RecordingPersister())
        assert result.termination is SamplerState.EXHAUSTED
        assert generator.calls == []

    def test_success_on_last_available_retry(self, profile):
        generator = scripted(None, "a")
        result = run_sampling(make_config(1, 2), profile, generator, RecordingPersister())
        assert result.termination is SamplerState.SUCCEEDED
        assert result.remaining_budget == 1
        assert result.attempts == 2

    def test_success_after_budget_reaches_one(self, profile):
        generator = scripted(None, "a", "b")
        result = run_sampling(make_config(2, 1), profile, generator, RecordingPersister())
        # The single failure spends the whole budget
        assert result.termination is SamplerState.EXHAUSTED
        assert result.attempts == 1

    def test_successes_do_not_consume_budget(self, profile):
        generator = scripted("a", None, "b", "a", "c")
        result = run_sampling(make_config(3, 3), profile, generator, RecordingPersister())
        assert result.termination is SamplerState.SUCCEEDED
        assert result.outcomes == [
            AttemptOutcome.SUCCESS,
            AttemptOutcome.FAILURE,
            AttemptOutcome.SUCCESS,
            AttemptOutcome.DUPLICATE,
            AttemptOutcome.SUCCESS,
        ]
        assert result.remaining_budget == 1

    def test_stops_as_soon_as_target_reached(self, profile):
        generator = scripted("a", "b", "c", "d")
        result = run_sampling(make_config(2, 50), profile, generator, RecordingPersister())
        assert len(generator.calls) == 2
        assert result.remaining_budget == 50

    def test_step_after_termination_raises(self, profile):
        sampler = BoundedUniqueSampler(
            make_config(1, 5), profile, distinct_generator, RecordingPersister()
        )
        sampler.run()
        with pytest.raises(SamplingError):
            sampler.step()

    def test_run_on_terminal_sampler_is_idempotent(self, profile):
        sampler = BoundedUniqueSampler(
            make_config(1, 5), profile, distinct_generator, RecordingPersister()
        )
        first = sampler.run()
        second = sampler.run()
        assert first == second

    def test_default_retry_budget(self):
        assert default_retry_budget(350, 100) == 3_500_000
        config = SamplingConfig.with_defaults(3, min_symbols=2)
        assert config.retry_budget == 600
        assert SamplingConfig.with_defaults(3, retry_budget=0).retry_budget == 0


# =============================================================================
# Invariants
# =============================================================================


class TestInvariants:
    """Properties that hold for every run."""

    @pytest.mark.parametrize(
        "seed,target,budget",
        list(itertools.product([0, 1, 42, 2**64 - 1], [0, 1, 5, 12], [0, 1, 4, 30])),
    )
    def test_accounting(self, profile, seed, target, budget):
        persister = RecordingPersister()
        result = run_sampling(
            make_config(target, budget, seed=seed), profile, word_generator, persister
        )

        assert result.produced_count <= target
        assert result.attempts <= budget + result.produced_count
        assert result.attempts == len(result.outcomes)
        consuming = sum(1 for o in result.outcomes if o.consumes_budget)
        assert consuming == budget - result.remaining_budget
        assert result.attempts == consuming + result.produced_count

        artifacts = [artifact for _, artifact in persister.calls]
        assert len(artifacts) == len(set(artifacts)) == result.produced_count
        assert [ordinal for ordinal, _ in persister.calls] == list(range(result.produced_count))

        if result.termination is SamplerState.SUCCEEDED:
            assert result.produced_count == target
        else:
            assert result.remaining_budget == 0

    def test_word_space_is_exhausted(self, profile):
        # Only 8 distinct 3-letter words over {a, b}
        result = run_sampling(make_config(9, 200), profile, word_generator, RecordingPersister())
        assert result.termination is SamplerState.EXHAUSTED
        assert result.produced_count == 8

    def test_unhashable_artifacts_are_deduplicated(self, profile):
        generator = scripted(["a"], ["a"], {"k": 1}, {"k": 1}, ["b"])
        persister = RecordingPersister()
        result = run_sampling(make_config(3, 5), profile, generator, persister)
        assert result.produced_count == 3
        assert [a for _, a in persister.calls] == [["a"], {"k": 1}, ["b"]]


class TestDeterminism:
    """Identical seed and config reproduce the run exactly."""

    def test_same_seed_same_result(self, profile):
        first_persister, second_persister = RecordingPersister(), RecordingPersister()
        first = run_sampling(make_config(6, 20, seed=7), profile, word_generator, first_persister)
        second = run_sampling(make_config(6, 20, seed=7), profile, word_generator, second_persister)

        assert first == second
        assert first_persister.calls == second_persister.calls

    def test_same_seed_same_files(self, tmp_path, profile):
        persister = FilePersister(lambda ctx, art: f"{ctx}:{art}")
        for name in ("a", "b"):
            config = make_config(4, 20, seed=123, output_dir=tmp_path / name)
            run_sampling(config, profile, distinct_generator, persister, context="sig")

        files_a = {p.name: p.read_text() for p in (tmp_path / "a").iterdir()}
        files_b = {p.name: p.read_text() for p in (tmp_path / "b").iterdir()}
        assert files_a == files_b
        assert len(files_a) == 4

    def test_rng_is_shared_across_attempts(self, profile):
        generator = scripted(None, "a", "b")
        run_sampling(make_config(2, 5), profile, generator, RecordingPersister())
        rngs = {id(call[1]) for call in generator.calls}
        assert len(rngs) == 1


# =============================================================================
# Collaborators
# =============================================================================


class TestCollaborators:
    """What the sampler hands to its generator, persister and callbacks."""

    def test_generator_receives_bounds_profile_and_context(self, profile):
        generator = scripted("a")
        run_sampling(make_config(1, 5), profile, generator, RecordingPersister(), context="ctx")
        context, _, max_depth, min_symbols, received = generator.calls[0]
        assert context == "ctx"
        assert (max_depth, min_symbols) == (4, 2)
        assert received is profile

    def test_persistence_error_propagates(self, profile):
        sampler = BoundedUniqueSampler(
            make_config(2, 5), profile, distinct_generator, FailingPersister()
        )
        with pytest.raises(PersistenceError):
            sampler.run()
        assert sampler.produced_count == 0
        assert sampler.state is SamplerState.FAILED
        assert sampler.attempts == 0
        assert sampler.remaining_budget == 5

    def test_unwritten_interaction_is_not_accepted(self, profile):
        class FailOnce:
            def __init__(self):
                self.calls = 0
                self.inner = RecordingPersister()

            def persist(self, output_dir, ordinal, context, artifact):
                self.calls += 1
                if self.calls == 1:
                    raise PersistenceError("disk full")
                return self.inner.persist(output_dir, ordinal, context, artifact)

        persister = FailOnce()
        sampler = BoundedUniqueSampler(
            make_config(1, 3), profile, scripted("a", "a"), persister
        )
        with pytest.raises(PersistenceError):
            sampler.step()
        assert "a" not in sampler._accepted
        assert len(sampler._accepted) == 0
        assert sampler.attempts == len(sampler._outcomes) == 0

        # A failed sampler cannot be resumed
        with pytest.raises(SamplingError):
            sampler.step()
        with pytest.raises(SamplingError):
            sampler.run()
        assert persister.calls == 1

        # A new run accepts the same interaction once it can be written
        retry = BoundedUniqueSampler(
            make_config(1, 3), profile, scripted("a"), persister
        )
        result = retry.run()
        assert result.succeeded
        assert result.outcomes == [AttemptOutcome.SUCCESS]

    def test_generator_error_stops_sampler(self, profile):
        def broken(context, rng, max_depth, min_symbols, profile):
            raise RuntimeError("grammar bug")

        sampler = BoundedUniqueSampler(
            make_config(1, 5), profile, broken, RecordingPersister()
        )
        with pytest.raises(RuntimeError):
            sampler.step()
        assert sampler.state is SamplerState.FAILED
        assert sampler.attempts == 0
        with pytest.raises(SamplingError):
            sampler.step()

    def test_unwritable_output_dir(self, tmp_path, profile):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        config = make_config(1, 5, output_dir=blocker / "out")
        persister = FilePersister(lambda ctx, art: str(art))
        with pytest.raises(PersistenceError):
            run_sampling(config, profile, distinct_generator, persister)

    def test_generator_errors_are_not_soft_failures(self, profile):
        def broken(context, rng, max_depth, min_symbols, profile):
            raise RuntimeError("grammar bug")

        with pytest.raises(RuntimeError, match="grammar bug"):
            run_sampling(make_config(1, 5), profile, broken, RecordingPersister())

    def test_callbacks(self, profile):
        progress, attempts = [], []
        generator = scripted("a", "a", None, "b")
        run_sampling(
            make_config(2, 5),
            profile,
            generator,
            RecordingPersister(),
            on_progress=lambda current, total: progress.append((current, total)),
            on_attempt=lambda n, outcome: attempts.append((n, outcome)),
        )
        assert progress == [(1, 2), (2, 2)]
        assert attempts == [
            (1, AttemptOutcome.SUCCESS),
            (2, AttemptOutcome.DUPLICATE),
            (3, AttemptOutcome.FAILURE),
            (4, AttemptOutcome.SUCCESS),
        ]

    def test_step_by_step(self, profile):
        sampler = BoundedUniqueSampler(
            make_config(2, 3), profile, scripted("a", None, "b"), RecordingPersister()
        )
        assert sampler.step() is AttemptOutcome.SUCCESS
        assert sampler.step() is AttemptOutcome.FAILURE
        assert sampler.remaining_budget == 2
        assert sampler.state is SamplerState.RUNNING
        assert sampler.step() is AttemptOutcome.SUCCESS
        assert sampler.state is SamplerState.SUCCEEDED
        assert sampler.produced_count == 2
        assert sampler.attempts == 3
