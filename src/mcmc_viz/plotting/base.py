"""
Base plotting utilities for shared functionality across plotting modules.
"""

import math
import os
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, List, Optional, Tuple

import matplotlib.pyplot as plt

from ..draws import Draws, apply_transformations, as_draws, select_parameters
from ..logger import logger

COLORS = {
    "divergent": "#d62728",  # tab:red
    "warmup": "#7f7f7f",  # gray
    "inner": "#1f4e79",
    "outer": "#6fa8dc",
    "point": "#0b2545",
    "fill": "#cfe2f3",
    "good": "#6fa8dc",
    "warn": "#f4b183",
    "bad": "#c00000",
    "y": "#011f4b",
    "yrep": "#9ecae1",
}

# One colour per chain, cycled for more chains than entries
CHAIN_COLORS = (
    "#011f4b",
    "#6497b1",
    "#b3cde0",
    "#d1495b",
    "#edae49",
    "#66a182",
)


@dataclass
class PlotConfig:
    """Configuration for plotting parameters."""

    panel_size: tuple = (4.0, 2.6)
    dpi: int = 100
    fontsize: int = 10
    labelsize: int = 10
    titlesize: int = 11
    linewidth: float = 0.8
    markersize: float = 6.0
    alpha: float = 0.9


def chain_color(chain: int) -> str:
    return CHAIN_COLORS[chain % len(CHAIN_COLORS)]


def safe_plot(filename: str, dpi: int = 150):
    """Decorator for safe plotting with error handling."""

    def decorator(plot_func: Callable):
        @wraps(plot_func)
        def wrapper(*args, **kwargs):
            try:
                logger.debug(f"--- plotting: {os.path.basename(filename)}")
                plot_func(*args, **kwargs)
                plt.savefig(filename, dpi=dpi, bbox_inches="tight")
                plt.close()
                return True
            except Exception as e:
                logger.warning(
                    f"Failed to create {os.path.basename(filename)}: {e}"
                )
                plt.close("all")
                return False

        return wrapper

    return decorator


def setup_plot_style(config: Optional[PlotConfig] = None) -> PlotConfig:
    """Setup consistent matplotlib styling for plots."""
    if config is None:
        config = PlotConfig()

    plt.rcParams.update(
        {
            "font.size": config.fontsize,
            "axes.labelsize": config.labelsize,
            "axes.titlesize": config.titlesize,
            "xtick.labelsize": config.fontsize - 1,
            "ytick.labelsize": config.fontsize - 1,
            "legend.fontsize": config.fontsize - 1,
            "figure.dpi": config.dpi,
            "savefig.dpi": config.dpi * 2,
        }
    )

    return config


def prepare_draws(
    x: Any,
    pars=None,
    regex_pars=None,
    transformations=None,
) -> Draws:
    """Normalise ``x``, select parameters and apply transformations."""
    draws = as_draws(x)
    selected = select_parameters(draws.parameters, pars, regex_pars)
    draws = draws.subset(selected)
    return apply_transformations(draws, transformations)


def facet_axes(
    n_panels: int, ncol: Optional[int], config: PlotConfig
) -> Tuple[plt.Figure, List[plt.Axes]]:
    """One axes per panel on a grid with at most ``ncol`` columns."""
    if ncol is None:
        ncol = math.ceil(math.sqrt(n_panels))
    if ncol < 1:
        raise ValueError(f"'ncol' must be a positive integer; got {ncol}.")
    ncol = min(ncol, n_panels)
    nrow = math.ceil(n_panels / ncol)

    fig, axes = plt.subplots(
        nrow,
        ncol,
        figsize=(config.panel_size[0] * ncol, config.panel_size[1] * nrow),
        squeeze=False,
    )
    axes = list(axes.ravel())
    for ax in axes[n_panels:]:
        fig.delaxes(ax)
    return fig, axes[:n_panels]


def strip_spines(ax: plt.Axes) -> None:
    ax.spines["right"].set_visible(False)
    ax.spines["top"].set_visible(False)
