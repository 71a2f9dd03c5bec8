"""Bivariate scatter plot of pooled draws."""

from __future__ import annotations

from typing import Any, Optional

import matplotlib.pyplot as plt

from ..divergences import align_divergences
from .base import (
    COLORS,
    PlotConfig,
    prepare_draws,
    setup_plot_style,
    strip_spines,
)


def mcmc_scatter(
    x: Any,
    pars=None,
    regex_pars=None,
    transformations=None,
    divergences=None,
    alpha: float = 0.8,
    size: float = 6.0,
    config: Optional[PlotConfig] = None,
) -> plt.Figure:
    """Scatter the draws of exactly two parameters, pooled over chains.

    Divergent draws, when given and present, are overlaid in red and
    labelled ``"Divergent"``.
    """
    config = setup_plot_style(config)
    draws = prepare_draws(x, pars, regex_pars, transformations)
    if draws.n_parameters != 2:
        raise ValueError(
            "mcmc_scatter requires exactly 2 parameters; got "
            f"{draws.n_parameters}."
        )
    flags = align_divergences(
        divergences, draws.n_iterations, draws.n_chains
    )

    xs = draws.values[:, :, 0].ravel()
    ys = draws.values[:, :, 1].ravel()
    fig, ax = plt.subplots(figsize=(config.panel_size[0] * 1.2,) * 2)
    ax.scatter(
        xs,
        ys,
        s=size,
        alpha=alpha,
        color=COLORS["point"],
        edgecolor="none",
        label="Draws",
    )
    if flags is not None:
        mask = flags.ravel()
        ax.scatter(
            xs[mask],
            ys[mask],
            s=size * 1.5,
            color=COLORS["divergent"],
            edgecolor="none",
            label="Divergent",
            zorder=3,
        )
        ax.legend(loc="best", fontsize="small")

    ax.set_xlabel(draws.parameters[0])
    ax.set_ylabel(draws.parameters[1])
    strip_spines(ax)
    fig.tight_layout()
    return fig
