import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import arviz as az
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from ..draws import Draws, as_draws, require_multiple_chains
from ..logger import logger
from .base import (
    COLORS,
    PlotConfig,
    prepare_draws,
    safe_plot,
    setup_plot_style,
    strip_spines,
)
from .intervals import mcmc_intervals
from .trace import mcmc_trace


@dataclass
class DiagnosticsConfig:
    """Configuration for diagnostics plotting parameters."""

    dpi: int = 150
    rhat_thresholds: Tuple[float, float] = (1.05, 1.1)
    neff_thresholds: Tuple[float, float] = (0.1, 0.5)


def rhat_values(draws: Draws) -> pd.Series:
    """Rank-normalised split R-hat per parameter."""
    rhat = az.rhat(draws.to_inference_data())
    return pd.Series(
        {p: float(rhat[p]) for p in draws.parameters}, name="rhat"
    )


def neff_ratios(draws: Draws) -> pd.Series:
    """Bulk effective sample size divided by the total number of draws."""
    ess = az.ess(draws.to_inference_data(), method="bulk")
    total = draws.n_iterations * draws.n_chains
    return pd.Series(
        {p: float(ess[p]) / total for p in draws.parameters},
        name="neff_ratio",
    )


def _rhat_color(value: float, thresholds: Tuple[float, float]) -> str:
    if value <= thresholds[0]:
        return COLORS["good"]
    if value <= thresholds[1]:
        return COLORS["warn"]
    return COLORS["bad"]


def _neff_color(value: float, thresholds: Tuple[float, float]) -> str:
    if value <= thresholds[0]:
        return COLORS["bad"]
    if value <= thresholds[1]:
        return COLORS["warn"]
    return COLORS["good"]


def _bar_chart(values: pd.Series, colors, config: PlotConfig):
    n = len(values)
    y = np.arange(n)[::-1]
    fig, ax = plt.subplots(
        figsize=(config.panel_size[0] * 1.5, 0.6 + 0.4 * n)
    )
    ax.barh(y, values.to_numpy(), color=colors, height=0.6)
    ax.set_yticks(y)
    ax.set_yticklabels(values.index)
    strip_spines(ax)
    return fig, ax


def mcmc_rhat(
    x: Any,
    pars=None,
    regex_pars=None,
    config: Optional[PlotConfig] = None,
    diagnostics_config: Optional[DiagnosticsConfig] = None,
) -> plt.Figure:
    """Horizontal bars of R-hat per parameter. Requires multiple chains."""
    config = setup_plot_style(config)
    diagnostics_config = diagnostics_config or DiagnosticsConfig()
    draws = prepare_draws(x, pars, regex_pars)
    require_multiple_chains(draws, "mcmc_rhat")

    values = rhat_values(draws)
    thresholds = diagnostics_config.rhat_thresholds
    colors = [_rhat_color(v, thresholds) for v in values]
    fig, ax = _bar_chart(values, colors, config)
    ax.set_xlim(left=min(1.0, float(values.min())) - 0.01)
    for threshold in (1.0,) + tuple(thresholds):
        ax.axvline(threshold, color="gray", linestyle="--", linewidth=0.8)
    ax.set_xlabel(r"$\hat{R}$")
    fig.tight_layout()

    worst = values.idxmax()
    if values[worst] > thresholds[1]:
        logger.warning(
            f"R-hat above {thresholds[1]} for {worst!r}: "
            f"{values[worst]:.3f}"
        )
    return fig


def mcmc_neff(
    x: Any,
    pars=None,
    regex_pars=None,
    config: Optional[PlotConfig] = None,
    diagnostics_config: Optional[DiagnosticsConfig] = None,
) -> plt.Figure:
    """Horizontal bars of the effective sample size ratio per parameter."""
    config = setup_plot_style(config)
    diagnostics_config = diagnostics_config or DiagnosticsConfig()
    draws = prepare_draws(x, pars, regex_pars)

    values = neff_ratios(draws)
    thresholds = diagnostics_config.neff_thresholds
    colors = [_neff_color(v, thresholds) for v in values]
    fig, ax = _bar_chart(values, colors, config)
    ax.set_xlim(left=0)
    for threshold in tuple(thresholds) + (1.0,):
        ax.axvline(threshold, color="gray", linestyle="--", linewidth=0.8)
    ax.set_xlabel(r"$N_{\mathrm{eff}}/N$")
    fig.tight_layout()
    return fig


def plot_diagnostics(
    x: Any,
    outdir: Optional[str],
    divergences=None,
    config: Optional[DiagnosticsConfig] = None,
) -> Dict[str, bool]:
    """
    Write trace, interval, R-hat and N_eff plots to ``outdir/diagnostics``.

    A failing plot is logged and reported as ``False`` without aborting the
    rest. R-hat is skipped for single-chain draws.
    """
    if outdir is None:
        return {}

    if config is None:
        config = DiagnosticsConfig()

    diag_dir = os.path.join(outdir, "diagnostics")
    os.makedirs(diag_dir, exist_ok=True)

    logger.info("Generating MCMC diagnostics...")
    draws = as_draws(x)
    results: Dict[str, bool] = {}

    @safe_plot(f"{diag_dir}/trace.png", config.dpi)
    def create_trace_plot():
        mcmc_trace(draws, divergences=divergences)

    results["trace.png"] = create_trace_plot()

    @safe_plot(f"{diag_dir}/intervals.png", config.dpi)
    def create_intervals_plot():
        mcmc_intervals(draws)

    results["intervals.png"] = create_intervals_plot()

    if not draws.is_single_chain:

        @safe_plot(f"{diag_dir}/rhat.png", config.dpi)
        def create_rhat_plot():
            mcmc_rhat(draws, diagnostics_config=config)

        results["rhat.png"] = create_rhat_plot()

    @safe_plot(f"{diag_dir}/neff.png", config.dpi)
    def create_neff_plot():
        mcmc_neff(draws, diagnostics_config=config)

    results["neff.png"] = create_neff_plot()

    n_failed = sum(not ok for ok in results.values())
    if n_failed:
        logger.warning(f"{n_failed} diagnostic plot(s) failed.")
    return results
