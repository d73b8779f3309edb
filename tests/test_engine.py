"""Tests for the evolutionary loop and run driver."""

import logging
import math
import threading

import numpy as np
import pytest

from cgp_evolve.core.config import CGPConfig
from cgp_evolve.core.functions import ARITHMETIC_FUNCTIONS, DEFAULT_FUNCTIONS, pass_through
from cgp_evolve.core.individual import Individual
from cgp_evolve.evolution.engine import CGP
from cgp_evolve.evolution.fitness import absolute_error, mismatch_count


def sine_config(seed=123, n_workers=1, **overrides):
    xs = np.linspace(-1, 1, 11)
    params = dict(
        population_size=5,
        num_genes=15,
        mutation_rate=0.1,
        num_inputs=1,
        num_outputs=1,
        max_arity=2,
        functions=DEFAULT_FUNCTIONS,
        rand_const=lambda rng: rng.random(),
        evaluator=absolute_error([[x] for x in xs], np.sin(xs) + xs * xs),
        rng=np.random.default_rng(seed),
        n_workers=n_workers,
    )
    params.update(overrides)
    return CGPConfig(**params)


class TestGeneration:
    """Tests for a single generation step."""

    def test_population_filled(self):
        gp = CGP(sine_config(evaluator=lambda ind: 1.0))
        assert len(gp.population) == 1
        gp.run_generation()
        assert len(gp.population) == 5
        assert all(ind.fitness == 1.0 for ind in gp.population[1:])

    def test_evaluation_count(self):
        gp = CGP(sine_config())
        for _ in range(3):
            gp.run_generation()
        assert gp.num_evaluations == 12
        assert gp.generation == 3
        assert len(gp.history) == 3

    def test_each_offspring_evaluated_once(self):
        seen = []
        lock = threading.Lock()

        def evaluator(ind):
            with lock:
                seen.append(id(ind))
            return 1.0

        gp = CGP(sine_config(n_workers=4, population_size=9, evaluator=evaluator))
        gp.run_generation()
        assert len(seen) == 8
        assert len(set(seen)) == 8

    @pytest.mark.parametrize("n_workers", [1, 4])
    def test_evaluator_errors_propagate(self, n_workers):
        def evaluator(ind):
            raise RuntimeError("broken evaluator")

        gp = CGP(sine_config(n_workers=n_workers, evaluator=evaluator))
        with pytest.raises(RuntimeError, match="broken evaluator"):
            gp.run_generation()


class TestSelection:
    """Tests for elitist parent replacement."""

    def _population(self, parent_fitness, offspring_fitness):
        config = sine_config()
        population = []
        for fitness in [parent_fitness] + offspring_fitness:
            ind = Individual.random(config)
            ind.fitness = fitness
            population.append(ind)
        return population

    def test_best_offspring_replaces_parent(self):
        gp = CGP(sine_config())
        gp.population = self._population(5.0, [4.0, 2.0, 3.0, 6.0])
        best = gp.population[2]
        assert gp.select_parent()
        assert gp.parent is best

    def test_ties_go_to_first_offspring(self):
        gp = CGP(sine_config())
        gp.population = self._population(5.0, [3.0, 2.0, 2.0, 4.0])
        first = gp.population[2]
        gp.select_parent()
        assert gp.parent is first

    def test_equal_fitness_replaces_parent(self):
        """Neutral offspring replace the parent."""
        gp = CGP(sine_config())
        gp.population = self._population(2.0, [3.0, 2.0, 2.5, 4.0])
        equal = gp.population[2]
        assert gp.select_parent()
        assert gp.parent is equal

    def test_worse_offspring_rejected(self):
        gp = CGP(sine_config())
        gp.population = self._population(1.0, [3.0, 2.0, 2.5, 4.0])
        parent = gp.population[0]
        assert not gp.select_parent()
        assert gp.parent is parent

    def test_unevaluated_offspring_never_selected(self):
        gp = CGP(sine_config())
        gp.population = self._population(math.inf, [math.inf, math.nan])
        parent = gp.population[0]
        assert not gp.select_parent()
        assert gp.parent is parent


class TestSolve:
    """Tests for the run driver."""

    def test_fitness_never_worse(self):
        gp = CGP(sine_config())
        gp.solve(200, fitness_threshold=-1.0)
        assert len(gp.history) == 200
        assert all(b <= a for a, b in zip(gp.history, gp.history[1:]))

    def test_threshold_stops(self):
        gp = CGP(sine_config(evaluator=lambda ind: 0.0))
        gens, elapsed = gp.solve(100)
        assert gens == 1
        assert elapsed >= 0.0
        assert gp.parent.fitness == 0.0

    def test_max_generations(self):
        gp = CGP(sine_config(evaluator=lambda ind: 1.0))
        gens, _ = gp.solve(7)
        assert gens == 7
        assert gp.num_evaluations == 28

    def test_callback(self):
        calls = []
        gp = CGP(sine_config())
        gp.solve(5, fitness_threshold=-1.0, callback=lambda gen, parent: calls.append((gen, parent.fitness)))
        assert [gen for gen, _ in calls] == [1, 2, 3, 4, 5]
        assert [f for _, f in calls] == gp.history

    def test_progress_logged(self, caplog):
        caplog.set_level(logging.INFO, logger="cgp_evolve")
        gp = CGP(sine_config())
        gp.solve(20, fitness_threshold=-1.0, report_progress=True)
        assert any(r.getMessage().startswith("gen: 1, fitness: ") for r in caplog.records)

    def test_config_logged_at_start(self, caplog):
        caplog.set_level(logging.DEBUG, logger="cgp_evolve")
        gp = CGP(sine_config())
        gp.solve(1, fitness_threshold=-1.0)
        started = [r for r in caplog.records if r.getMessage().startswith("solve started: ")]
        assert len(started) == 1
        assert started[0].levelno == logging.DEBUG
        assert "'population_size': 5" in started[0].getMessage()
        assert "'functions': ['const', " in started[0].getMessage()

    def test_no_progress_by_default(self, caplog):
        caplog.set_level(logging.INFO, logger="cgp_evolve")
        gp = CGP(sine_config())
        gp.solve(5, fitness_threshold=-1.0)
        assert not any(r.getMessage().startswith("gen: ") for r in caplog.records)


class TestCancellation:
    """Stop requests are honoured between generations."""

    def test_stop_from_callback(self):
        gp = CGP(sine_config())

        def callback(gen, parent):
            if gen == 3:
                gp.request_stop()

        gens, _ = gp.solve(100, fitness_threshold=-1.0, callback=callback)
        assert gens == 3
        assert gp.stop_requested

    def test_stop_during_evaluation_finishes_generation(self):
        """A stop requested mid-generation lets every offspring be evaluated."""
        holder = {}

        def evaluator(ind):
            holder['gp'].request_stop()
            return 1.0

        gp = CGP(sine_config(n_workers=4, evaluator=evaluator))
        holder['gp'] = gp
        gens, _ = gp.solve(100)
        assert gens == 1
        assert gp.num_evaluations == 4
        assert all(ind.fitness == 1.0 for ind in gp.population[1:])

    def test_stop_before_solve(self):
        gp = CGP(sine_config())
        gp.request_stop()
        gens, _ = gp.solve(10)
        assert gens == 0
        assert gp.num_evaluations == 0


class TestDeterminism:
    """Same seed, same run, whatever the number of workers."""

    def _trace(self, n_workers):
        gp = CGP(sine_config(seed=99, n_workers=n_workers))
        trace = [gp.parent.genotype()]
        gp.solve(40, fitness_threshold=-1.0, callback=lambda gen, parent: trace.append(parent.genotype()))
        return trace, gp.history

    def test_worker_count_does_not_matter(self):
        serial, serial_history = self._trace(1)
        parallel, parallel_history = self._trace(4)
        assert serial == parallel
        assert serial_history == parallel_history

    def test_different_seeds_differ(self):
        a = CGP(sine_config(seed=1)).parent.genotype()
        b = CGP(sine_config(seed=2)).parent.genotype()
        assert a != b


class TestScenarios:
    """End-to-end evolution runs."""

    def test_reverse_inputs(self):
        """Evolve a program mapping (1, 2, 3) to (3, 2, 1) with pass-through functions."""
        config = CGPConfig(
            population_size=5,
            num_genes=10,
            mutation_rate=0.01,
            num_inputs=3,
            num_outputs=3,
            max_arity=2,
            functions=[pass_through("pass1", 1, 2), pass_through("pass2", 2, 2)],
            rand_const=lambda rng: 0.0,
            evaluator=mismatch_count([1, 2, 3], [3, 2, 1]),
            rng=np.random.default_rng(42),
            n_workers=1,
        )
        gp = CGP(config)
        gp.solve(20000, 0.0)
        assert gp.parent.fitness == 0.0
        np.testing.assert_array_equal(gp.parent.run([1, 2, 3]), [3, 2, 1])

    def test_evolve_pi(self):
        """Evolve the constant pi from zero inputs with arithmetic functions."""
        num_train = 50
        train = [[0.0] for _ in range(num_train)]
        target = [math.pi] * num_train

        config = CGPConfig(
            population_size=10,
            num_genes=20,
            mutation_rate=0.1,
            num_inputs=1,
            num_outputs=1,
            max_arity=2,
            functions=ARITHMETIC_FUNCTIONS,
            rand_const=lambda rng: rng.random(),
            evaluator=absolute_error(train, target),
            rng=np.random.default_rng(7),
            n_workers=1,
        )
        gp = CGP(config)
        threshold = 0.05 * num_train
        gp.solve(5000, threshold)
        assert gp.parent.fitness <= threshold
        assert abs(gp.parent.run([0.0])[0] - math.pi) <= 0.05
