# src/slbl_insar/calibration/optimizers.py
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Protocol
import logging
import threading
import time
import numpy as np
from scipy.optimize import differential_evolution

from .types import OptimizeResult, SwarmConfig

logger = logging.getLogger(__name__)

Objective = Callable[[np.ndarray], float]


class BoundedOptimizer(Protocol):
    """Anything able to minimise a scalar objective inside a box."""

    def minimize(
        self,
        objective: Objective,
        lower: np.ndarray,
        upper: np.ndarray,
        x0: np.ndarray | None = None,
    ) -> OptimizeResult:
        ...


def _check_bounds(lower, upper, x0) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    lower = np.asarray(lower, dtype=float).reshape(-1)
    upper = np.asarray(upper, dtype=float).reshape(-1)
    if lower.shape != upper.shape:
        raise ValueError(f"lower {lower.shape} and upper {upper.shape} bounds must match")
    if lower.size == 0:
        raise ValueError("at least one parameter is required")
    if not (np.all(np.isfinite(lower)) and np.all(np.isfinite(upper))):
        raise ValueError("bounds must be finite")
    if np.any(upper <= lower):
        raise ValueError("every upper bound must exceed its lower bound")

    if x0 is None:
        x0 = 0.5 * (lower + upper)
    x0 = np.asarray(x0, dtype=float).reshape(-1)
    if x0.shape != lower.shape:
        raise ValueError(f"x0 shape {x0.shape} must match bounds shape {lower.shape}")
    return lower, upper, np.clip(x0, lower, upper)


def _safe_eval(objective: Objective, x: np.ndarray) -> float:
    value = float(objective(x))
    return value if np.isfinite(value) else np.inf


class ParticleSwarm:
    """
    Global-best particle swarm in a box.

    Particles are clipped to the bounds (their velocity is zeroed on the
    clipped axes). The initial guess is always one of the particles, so the
    result is never worse than `x0`.

    The objective must be side-effect free: with `n_workers > 1` the
    particles of one generation are evaluated on a thread pool.
    """

    def __init__(self, config: SwarmConfig = SwarmConfig(), stop_event: threading.Event | None = None):
        self.config = config
        self.stop_event = stop_event

    def _evaluate(self, objective: Objective, positions: np.ndarray, pool: ThreadPoolExecutor | None) -> np.ndarray:
        if pool is None:
            return np.array([_safe_eval(objective, p) for p in positions])
        return np.fromiter(pool.map(lambda p: _safe_eval(objective, p), positions), dtype=float, count=len(positions))

    def minimize(
        self,
        objective: Objective,
        lower: np.ndarray,
        upper: np.ndarray,
        x0: np.ndarray | None = None,
    ) -> OptimizeResult:
        cfg = self.config
        lower, upper, x0 = _check_bounds(lower, upper, x0)
        rng = np.random.default_rng(cfg.seed)
        n_dim = lower.size
        span = upper - lower

        positions = rng.uniform(lower, upper, size=(cfg.n_particles, n_dim))
        positions[0] = x0
        velocities = rng.uniform(-span, span, size=(cfg.n_particles, n_dim)) * 0.1

        use_pool = cfg.n_workers is not None and cfg.n_workers > 1 and cfg.n_particles > 1
        pool = ThreadPoolExecutor(max_workers=cfg.n_workers) if use_pool else None
        t0 = time.monotonic()
        try:
            scores = self._evaluate(objective, positions, pool)
            n_eval = cfg.n_particles

            best_pos = positions.copy()
            best_scores = scores.copy()
            g = int(np.argmin(best_scores))
            g_pos, g_score = best_pos[g].copy(), float(best_scores[g])

            patience_counter = 0
            n_iter = 0
            cancelled = False
            message = f"maximum number of generations ({cfg.max_iter}) reached"

            for it in range(cfg.max_iter):
                if self.stop_event is not None and self.stop_event.is_set():
                    cancelled = True
                    message = f"cancelled after {n_iter} generations"
                    break
                if cfg.time_budget_s is not None and time.monotonic() - t0 >= cfg.time_budget_s:
                    message = f"time budget of {cfg.time_budget_s:g} s exhausted after {n_iter} generations"
                    break

                r1 = rng.random((cfg.n_particles, n_dim))
                r2 = rng.random((cfg.n_particles, n_dim))
                velocities = (
                    cfg.inertia * velocities
                    + cfg.cognitive * r1 * (best_pos - positions)
                    + cfg.social * r2 * (g_pos - positions)
                )
                positions = positions + velocities
                clipped = (positions < lower) | (positions > upper)
                positions = np.clip(positions, lower, upper)
                velocities[clipped] = 0.0

                scores = self._evaluate(objective, positions, pool)
                n_eval += cfg.n_particles
                n_iter = it + 1

                improved = scores < best_scores
                best_pos[improved] = positions[improved]
                best_scores[improved] = scores[improved]

                g = int(np.argmin(best_scores))
                improvement = g_score - float(best_scores[g])
                if improvement > 0.0:
                    g_pos, g_score = best_pos[g].copy(), float(best_scores[g])

                logger.debug("generation %d: best=%.6g", n_iter, g_score)

                # early stopping on best objective
                if improvement > cfg.min_delta:
                    patience_counter = 0
                else:
                    patience_counter += 1
                    if patience_counter >= cfg.patience:
                        message = f"no improvement > {cfg.min_delta:g} for {cfg.patience} generations"
                        break
        finally:
            if pool is not None:
                pool.shutdown(wait=True)

        success = bool(np.isfinite(g_score)) and not cancelled
        if not np.isfinite(g_score):
            message = "objective was not finite for any particle"
        logger.info("Particle swarm stopped: %s (best=%.6g)", message, g_score)

        return OptimizeResult(
            x=g_pos,
            fun=g_score,
            n_iterations=n_iter,
            n_evaluations=n_eval,
            success=success,
            message=message,
        )


class DifferentialEvolution:
    """Bounded global minimiser backed by `scipy.optimize.differential_evolution`."""

    def __init__(
        self,
        max_iter: int = 200,
        popsize: int = 15,
        tol: float = 1e-8,
        seed: int | None = None,
        polish: bool = True,
        stop_event: threading.Event | None = None,
    ):
        self.max_iter = int(max_iter)
        self.popsize = int(popsize)
        self.tol = float(tol)
        self.seed = seed
        self.polish = bool(polish)
        self.stop_event = stop_event

    def minimize(
        self,
        objective: Objective,
        lower: np.ndarray,
        upper: np.ndarray,
        x0: np.ndarray | None = None,
    ) -> OptimizeResult:
        lower, upper, x0 = _check_bounds(lower, upper, x0)

        def _callback(xk, convergence=None):
            return self.stop_event is not None and self.stop_event.is_set()

        res = differential_evolution(
            lambda x: _safe_eval(objective, x),
            bounds=list(zip(lower, upper)),
            maxiter=self.max_iter,
            popsize=self.popsize,
            tol=self.tol,
            seed=self.seed,
            polish=self.polish,
            x0=x0,
            callback=_callback,
        )
        logger.info("Differential evolution stopped: %s (best=%.6g)", res.message, res.fun)

        return OptimizeResult(
            x=np.clip(np.asarray(res.x, dtype=float), lower, upper),
            fun=float(res.fun),
            n_iterations=int(res.nit),
            n_evaluations=int(res.nfev),
            success=bool(res.success) and bool(np.isfinite(res.fun)),
            message=str(res.message),
        )
