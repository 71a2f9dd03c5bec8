"""Posterior uncertainty intervals and density areas."""

from __future__ import annotations

from typing import Any, Optional

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from scipy.stats import gaussian_kde

from ..logger import logger
from .base import (
    COLORS,
    PlotConfig,
    prepare_draws,
    setup_plot_style,
    strip_spines,
)

_POINT_ESTIMATES = ("median", "mean", "none")


def _check_probs(prob: float, prob_outer: float) -> None:
    if not 0 < prob <= prob_outer <= 1:
        raise ValueError(
            "Probabilities must satisfy 0 < prob <= prob_outer <= 1; got "
            f"prob={prob}, prob_outer={prob_outer}."
        )


def mcmc_intervals_data(
    x: Any,
    pars=None,
    regex_pars=None,
    transformations=None,
    prob: float = 0.5,
    prob_outer: float = 0.9,
    point_est: str = "median",
) -> pd.DataFrame:
    """Central interval summary of the pooled draws, one row per parameter.

    Columns: ``parameter``, ``ll`` and ``hh`` (outer interval), ``l`` and
    ``h`` (inner interval), ``m`` (point estimate, NaN for ``"none"``).
    """
    _check_probs(prob, prob_outer)
    if point_est not in _POINT_ESTIMATES:
        raise ValueError(
            f"'point_est' must be one of {_POINT_ESTIMATES}; got "
            f"{point_est!r}."
        )
    draws = prepare_draws(x, pars, regex_pars, transformations)
    pooled = draws.values.reshape(-1, draws.n_parameters)

    a_inner = (1 - prob) / 2
    a_outer = (1 - prob_outer) / 2
    ll, lo, hi, hh = np.quantile(
        pooled, [a_outer, a_inner, 1 - a_inner, 1 - a_outer], axis=0
    )
    if point_est == "median":
        m = np.median(pooled, axis=0)
    elif point_est == "mean":
        m = pooled.mean(axis=0)
    else:
        m = np.full(draws.n_parameters, np.nan)

    return pd.DataFrame(
        {
            "parameter": list(draws.parameters),
            "outer_width": prob_outer,
            "inner_width": prob,
            "point_est": point_est,
            "ll": ll,
            "l": lo,
            "m": m,
            "h": hi,
            "hh": hh,
        }
    )


def _label_parameters(ax: plt.Axes, names, positions) -> None:
    ax.set_yticks(positions)
    ax.set_yticklabels(names)
    strip_spines(ax)


def mcmc_intervals(
    x: Any,
    pars=None,
    regex_pars=None,
    transformations=None,
    prob: float = 0.5,
    prob_outer: float = 0.9,
    point_est: str = "median",
    config: Optional[PlotConfig] = None,
) -> plt.Figure:
    """Inner and outer central intervals for each parameter on one axes."""
    config = setup_plot_style(config)
    data = mcmc_intervals_data(
        x, pars, regex_pars, transformations, prob, prob_outer, point_est
    )
    n = len(data)
    y = np.arange(n)[::-1]

    fig, ax = plt.subplots(
        figsize=(config.panel_size[0] * 1.5, 0.6 + 0.4 * n)
    )
    ax.hlines(
        y,
        data["ll"],
        data["hh"],
        color=COLORS["outer"],
        linewidth=config.linewidth * 1.5,
        label=f"{prob_outer:.0%} interval",
    )
    ax.hlines(
        y,
        data["l"],
        data["h"],
        color=COLORS["inner"],
        linewidth=config.linewidth * 4,
        label=f"{prob:.0%} interval",
    )
    if point_est != "none":
        ax.scatter(
            data["m"],
            y,
            s=config.markersize * 6,
            color=COLORS["point"],
            edgecolor="white",
            zorder=3,
            label=point_est,
        )
    _label_parameters(ax, data["parameter"], y)
    fig.tight_layout()
    return fig


def mcmc_areas(
    x: Any,
    pars=None,
    regex_pars=None,
    transformations=None,
    prob: float = 0.5,
    prob_outer: float = 0.9,
    point_est: str = "median",
    config: Optional[PlotConfig] = None,
) -> plt.Figure:
    """Kernel density ridges over the outer interval, inner interval shaded."""
    config = setup_plot_style(config)
    data = mcmc_intervals_data(
        x, pars, regex_pars, transformations, prob, prob_outer, point_est
    )
    draws = prepare_draws(x, pars, regex_pars, transformations)
    pooled = draws.values.reshape(-1, draws.n_parameters)
    n = len(data)
    y = np.arange(n)[::-1]

    fig, ax = plt.subplots(
        figsize=(config.panel_size[0] * 1.5, 0.6 + 0.6 * n)
    )
    for k, row in data.iterrows():
        samples = pooled[:, k]
        base = y[k]
        if np.ptp(samples) == 0:
            logger.warning(
                f"Parameter {row['parameter']!r} has constant draws; "
                "drawing a point mass."
            )
            ax.vlines(samples[0], base, base + 0.9, color=COLORS["inner"])
            continue

        grid = np.linspace(row["ll"], row["hh"], 256)
        dens = gaussian_kde(samples)(grid)
        dens = 0.9 * dens / dens.max()

        ax.fill_between(
            grid, base, base + dens, color=COLORS["fill"], linewidth=0
        )
        inner = (grid >= row["l"]) & (grid <= row["h"])
        ax.fill_between(
            grid[inner],
            base,
            base + dens[inner],
            color=COLORS["outer"],
            linewidth=0,
        )
        ax.plot(
            grid,
            base + dens,
            color=COLORS["inner"],
            linewidth=config.linewidth,
        )
        if point_est != "none":
            height = np.interp(row["m"], grid, dens)
            ax.vlines(
                row["m"],
                base,
                base + height,
                color=COLORS["point"],
                linewidth=config.linewidth * 1.5,
            )

    _label_parameters(ax, data["parameter"], y)
    fig.tight_layout()
    return fig
