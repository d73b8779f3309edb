"""(1 + lambda) evolutionary loop for Cartesian Genetic Programming.

Each generation mutates the parent into ``population_size - 1`` offspring,
evaluates them in parallel and keeps the best offspring if it is at least as
fit as the parent. Fitness is a cost: lower is better.

Offspring are created sequentially from the shared random source before any
evaluation is dispatched, so a fixed seed reproduces the same run no matter
how many evaluation workers are used.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Tuple

from cgp_evolve.core.config import CGPConfig
from cgp_evolve.core.individual import Individual

logger = logging.getLogger(__name__)


ProgressCallback = Callable[[int, Individual], None]


class CGP:
    """Evolves a population of individuals towards lower fitness.

    Attributes:
        config: Run configuration.
        population: Parent at index 0, offspring of the last generation after it.
        num_evaluations: Evaluator calls made so far.
        generation: Generations completed so far.
        history: Parent fitness after each completed generation.
    """

    def __init__(self, config: CGPConfig):
        self.config = config
        self.population: List[Individual] = [Individual.random(config)]
        self.num_evaluations = 0
        self.generation = 0
        self.history: List[float] = []
        self._stop = threading.Event()

    @property
    def parent(self) -> Individual:
        """Best individual found so far."""
        return self.population[0]

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def request_stop(self) -> None:
        """Ask ``solve`` to halt once the current generation has finished.

        Safe to call from signal handlers, other threads or the evaluator.
        """
        self._stop.set()

    @property
    def stop_requested(self) -> bool:
        return self._stop.is_set()

    # ------------------------------------------------------------------
    # Generation step
    # ------------------------------------------------------------------

    def _evaluate(self, individual: Individual) -> float:
        return self.config.evaluator(individual)

    def evaluate_offspring(self) -> None:
        """Assign a fitness to every offspring in the population.

        Each task reads its own offspring and the read-only configuration and
        writes back to its own slot only. Evaluator exceptions propagate.
        """
        offspring = self.population[1:]
        n_workers = min(self.config.n_workers, len(offspring))

        if n_workers <= 1:
            fitnesses = [self._evaluate(ind) for ind in offspring]
        else:
            with ThreadPoolExecutor(max_workers=n_workers) as executor:
                fitnesses = list(executor.map(self._evaluate, offspring))

        for individual, fitness in zip(offspring, fitnesses):
            individual.fitness = fitness
        self.num_evaluations += len(offspring)

    def select_parent(self) -> bool:
        """Replace the parent with the best offspring if it is at least as fit.

        Ties between offspring go to the first one. Returns True when the
        parent was replaced.
        """
        best_fitness = math.inf
        best_index = 0
        for i in range(1, len(self.population)):
            if self.population[i].fitness < best_fitness:
                best_fitness = self.population[i].fitness
                best_index = i

        if best_index > 0 and best_fitness <= self.population[0].fitness:
            self.population[0] = self.population[best_index]
            return True
        return False

    def run_generation(self) -> None:
        """Create offspring from the parent, evaluate them and select the new parent."""
        parent = self.population[0]
        self.population = [parent]
        for _ in range(1, self.config.population_size):
            self.population.append(parent.mutate())

        self.evaluate_offspring()
        self.select_parent()

        self.generation += 1
        self.history.append(self.population[0].fitness)

    # ------------------------------------------------------------------
    # Run driver
    # ------------------------------------------------------------------

    def solve(
        self,
        max_generations: int,
        fitness_threshold: float = 0.0,
        report_progress: bool = False,
        callback: Optional[ProgressCallback] = None,
    ) -> Tuple[int, float]:
        """Evolve until the fitness threshold or the generation budget is reached.

        The stop flag set by ``request_stop`` is checked between generations.

        Args:
            max_generations: Maximum number of generations to run.
            fitness_threshold: Stop once the parent's fitness is at or below this.
            report_progress: Log a line whenever the parent's fitness improves.
            callback: Optional function called after each generation with
                (generation, parent).

        Returns:
            Tuple of (generations run, elapsed seconds).
        """
        logger.debug("solve started: %s", self.config.to_dict())
        start_time = time.time()
        gens = 0
        fitness = math.inf

        while gens < max_generations and not self.stop_requested:
            self.run_generation()
            gens += 1

            parent = self.population[0]
            if parent.fitness < fitness:
                fitness = parent.fitness
                if report_progress:
                    logger.info("gen: %d, fitness: %f, %s", gens, parent.fitness, parent.expr())

            if callback:
                callback(gens, parent)

            if parent.fitness <= fitness_threshold:
                break

        elapsed = time.time() - start_time

        if self.stop_requested:
            logger.info("Stopped on request after %d generations", gens)
        logger.debug(
            "solve finished: generations=%d evaluations=%d fitness=%f elapsed=%.2fs",
            gens, self.num_evaluations, self.population[0].fitness, elapsed,
        )

        return gens, elapsed
