"""Reproducible example data: MCMC draws, observations and replications."""

import numpy as np

from .draws import Draws

N_OBSERVATIONS = 434
N_REPLICATIONS = 500


def example_mcmc_draws(
    chains: int = 4, params: int = 4, seed: int = 1234
) -> Draws:
    """Reproducible autocorrelated draws for examples and tests.

    Parameters are named ``alpha``, ``sigma``, ``beta[1]`` ... ``beta[8]``
    and truncated to ``params``. There are 250 iterations per chain.
    """
    if not 1 <= chains <= 4:
        raise ValueError("'chains' must be between 1 and 4.")
    if not 1 <= params <= 10:
        raise ValueError("'params' must be between 1 and 10.")

    n_iter = 250
    names = ["alpha", "sigma"] + [f"beta[{k}]" for k in range(1, 9)]
    names = names[:params]
    rng = np.random.default_rng(seed)
    means = rng.normal(0.0, 2.0, size=params)
    scales = rng.uniform(0.3, 1.5, size=params)
    rho = 0.3

    noise = rng.normal(size=(n_iter, chains, params))
    values = np.empty_like(noise)
    values[0] = noise[0]
    for t in range(1, n_iter):
        values[t] = rho * values[t - 1] + np.sqrt(1 - rho**2) * noise[t]
    values = means + scales * values

    if params > 1:
        # sigma is a scale parameter
        values[:, :, 1] = np.exp(0.3 * values[:, :, 1])
    return Draws(values, tuple(names))


def example_y_data(seed: int = 1234) -> np.ndarray:
    """Skewed positive outcome vector of length 434."""
    rng = np.random.default_rng(seed)
    return rng.gamma(shape=9.0, scale=9.5, size=N_OBSERVATIONS).round(1)


def example_yrep_draws(seed: int = 1234) -> np.ndarray:
    """Replicated datasets for :func:`example_y_data`.

    Draws from the posterior predictive of a normal model with a flat prior,
    so the replications miss the skew of ``y``. Shape is
    ``(500, 434)``, one row per posterior draw.
    """
    y = example_y_data(seed)
    n = y.size
    rng = np.random.default_rng(seed + 1)
    sigma = y.std(ddof=1) * np.sqrt(
        rng.chisquare(n - 1, size=N_REPLICATIONS) / (n - 1)
    )
    mu = rng.normal(y.mean(), sigma / np.sqrt(n))
    return rng.normal(
        mu[:, np.newaxis], sigma[:, np.newaxis], size=(N_REPLICATIONS, n)
    )
