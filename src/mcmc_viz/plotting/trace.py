"""Trace plots of MCMC draws, optionally marking divergent transitions."""

from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np

from ..divergences import align_divergences
from ..draws import require_multiple_chains
from ..logger import logger
from .base import (
    COLORS,
    PlotConfig,
    chain_color,
    facet_axes,
    prepare_draws,
    setup_plot_style,
    strip_spines,
)


def _check_window(window: Optional[Sequence[float]]) -> None:
    if window is None:
        return
    if len(window) != 2:
        raise ValueError(
            f"'window' must be a (start, end) pair; got {tuple(window)}."
        )
    if not window[0] < window[1]:
        raise ValueError(
            f"'window' start must be smaller than its end; got "
            f"{tuple(window)}."
        )


def _check_trace_args(n_warmup: int, iter1: int, window) -> None:
    if n_warmup < 0:
        raise ValueError(f"'n_warmup' must be >= 0; got {n_warmup}.")
    if iter1 < 0:
        raise ValueError(f"'iter1' must be >= 0; got {iter1}.")
    _check_window(window)


def _add_divergence_rug(
    ax: plt.Axes, iterations: np.ndarray, flags: np.ndarray
) -> None:
    lo, hi = ax.get_ylim()
    div_iters = iterations[flags.any(axis=1)]
    ax.vlines(
        div_iters,
        lo,
        lo + 0.05 * (hi - lo),
        colors=COLORS["divergent"],
        linewidth=0.8,
        label="Divergent",
        zorder=3,
    )
    ax.set_ylim(lo, hi)


def _finish_axes(
    ax: plt.Axes,
    name: str,
    iterations: np.ndarray,
    n_warmup: int,
    window: Optional[Tuple[float, float]],
) -> None:
    if n_warmup > 0:
        ax.axvspan(
            iterations[0] - 0.5,
            iterations[0] + n_warmup - 0.5,
            color=COLORS["warmup"],
            alpha=0.15,
            label="Warmup",
            zorder=0,
        )
    ax.set_title(name)
    ax.set_xlabel("Iteration")
    strip_spines(ax)
    if window is not None:
        ax.set_xlim(window[0], window[1])


def mcmc_trace(
    x: Any,
    pars=None,
    regex_pars=None,
    transformations=None,
    divergences=None,
    n_warmup: int = 0,
    iter1: int = 0,
    window: Optional[Tuple[float, float]] = None,
    ncol: Optional[int] = None,
    config: Optional[PlotConfig] = None,
) -> plt.Figure:
    """Trace plot with one panel per parameter and one line per chain.

    Parameters
    ----------
    x
        Posterior draws in any container accepted by
        :func:`mcmc_viz.draws.as_draws`.
    pars, regex_pars
        Exact parameter names and/or regular expressions to select.
    transformations
        A callable/name applied to all parameters, or a mapping from
        parameter name to callable/name.
    divergences
        Optional divergence flags (see
        :func:`mcmc_viz.divergences.align_divergences`). Iterations where
        any chain diverged are marked with a rug labelled ``"Divergent"``.
    n_warmup
        Number of warm-up iterations to shade.
    iter1
        Number of iterations discarded before the first draw; the x-axis
        runs from ``iter1 + 1``.
    window
        ``(start, end)`` x-axis limits applied to every panel.
    ncol
        Maximum number of panel columns.
    config
        Plot styling.

    Returns
    -------
    matplotlib.figure.Figure
    """
    config = setup_plot_style(config)
    _check_trace_args(n_warmup, iter1, window)
    draws = prepare_draws(x, pars, regex_pars, transformations)
    flags = align_divergences(
        divergences, draws.n_iterations, draws.n_chains
    )

    iterations = np.arange(1, draws.n_iterations + 1) + iter1
    fig, axes = facet_axes(draws.n_parameters, ncol, config)
    for k, (ax, name) in enumerate(zip(axes, draws.parameters)):
        for chain in range(draws.n_chains):
            ax.plot(
                iterations,
                draws.values[:, chain, k],
                color=chain_color(chain),
                linewidth=config.linewidth,
                alpha=config.alpha,
                label=f"Chain {chain}",
                zorder=1,
            )
        if flags is not None:
            _add_divergence_rug(ax, iterations, flags)
        _finish_axes(ax, name, iterations, n_warmup, window)

    axes[0].legend(loc="upper right", fontsize="small")
    fig.tight_layout()
    logger.debug(
        f"mcmc_trace: {draws.n_parameters} parameter(s), "
        f"{draws.n_chains} chain(s), {draws.n_iterations} iteration(s)"
    )
    return fig


def mcmc_trace_highlight(
    x: Any,
    pars=None,
    regex_pars=None,
    transformations=None,
    highlight: int = 0,
    alpha: float = 0.2,
    n_warmup: int = 0,
    window: Optional[Tuple[float, float]] = None,
    ncol: Optional[int] = None,
    config: Optional[PlotConfig] = None,
) -> plt.Figure:
    """Trace plot with every chain faded except the ``highlight`` chain.

    ``highlight`` is a 0-based chain index. Requires multiple chains.
    """
    config = setup_plot_style(config)
    _check_trace_args(n_warmup, 0, window)
    draws = prepare_draws(x, pars, regex_pars, transformations)
    require_multiple_chains(draws, "mcmc_trace_highlight")
    if not 0 <= highlight < draws.n_chains:
        raise ValueError(
            f"'highlight' must be a chain index in [0, {draws.n_chains - 1}]"
            f"; got {highlight}."
        )
    if not 0 <= alpha <= 1:
        raise ValueError(f"'alpha' must be in [0, 1]; got {alpha}.")

    iterations = np.arange(1, draws.n_iterations + 1)
    fig, axes = facet_axes(draws.n_parameters, ncol, config)
    for k, (ax, name) in enumerate(zip(axes, draws.parameters)):
        for chain in range(draws.n_chains):
            chosen = chain == highlight
            ax.plot(
                iterations,
                draws.values[:, chain, k],
                color=chain_color(chain),
                linewidth=config.linewidth,
                alpha=1.0 if chosen else alpha,
                label=f"Chain {chain}",
                zorder=2 if chosen else 1,
            )
        _finish_axes(ax, name, iterations, n_warmup, window)

    axes[0].legend(loc="upper right", fontsize="small")
    fig.tight_layout()
    return fig
