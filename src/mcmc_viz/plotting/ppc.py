"""Graphical posterior predictive checks of ``y`` against replications."""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np
from scipy.stats import gaussian_kde

from ..logger import logger
from .base import (
    COLORS,
    PlotConfig,
    facet_axes,
    setup_plot_style,
    strip_spines,
)

Statistic = Union[str, Callable[[np.ndarray], float]]

_NAMED_STATS: Dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "mean": lambda a: np.mean(a, axis=-1),
    "median": lambda a: np.median(a, axis=-1),
    "sd": lambda a: np.std(a, axis=-1, ddof=1),
    "var": lambda a: np.var(a, axis=-1, ddof=1),
    "min": lambda a: np.min(a, axis=-1),
    "max": lambda a: np.max(a, axis=-1),
}


def validate_y(y: Any) -> np.ndarray:
    """Return ``y`` as a finite 1-D float array."""
    arr = np.asarray(y)
    if arr.ndim != 1:
        raise ValueError(f"'y' must be a vector; got {arr.ndim}-D array.")
    if arr.size == 0:
        raise ValueError("'y' must contain at least one observation.")
    if arr.dtype.kind not in "biuf":
        raise ValueError(f"'y' must be numeric; got dtype {arr.dtype}.")
    arr = arr.astype(np.float64)
    if not np.all(np.isfinite(arr)):
        raise ValueError("NAs not allowed in 'y'.")
    return arr


def validate_yrep(yrep: Any, y: np.ndarray) -> np.ndarray:
    """Return ``yrep`` as a finite ``(draws, observations)`` float array."""
    arr = np.asarray(yrep)
    if arr.ndim != 2:
        raise ValueError(
            "'yrep' must be a (draws, observations) matrix; got "
            f"{arr.ndim}-D array."
        )
    if arr.shape[0] == 0:
        raise ValueError("'yrep' must contain at least one draw.")
    if arr.dtype.kind not in "biuf":
        raise ValueError(f"'yrep' must be numeric; got dtype {arr.dtype}.")
    if arr.shape[1] != y.size:
        raise ValueError(
            "ncol(yrep) must be equal to length(y) "
            f"(got {arr.shape[1]}, expected {y.size})."
        )
    arr = arr.astype(np.float64)
    if not np.all(np.isfinite(arr)):
        raise ValueError("NAs not allowed in 'yrep'.")
    return arr


def _density(
    values: np.ndarray, grid: np.ndarray, trim: bool
) -> Optional[np.ndarray]:
    if np.ptp(values) == 0:
        return None
    dens = gaussian_kde(values)(grid)
    if trim:
        outside = (grid < values.min()) | (grid > values.max())
        dens[outside] = np.nan
    return dens


def _bin_edges(
    values: np.ndarray, bins: int, binwidth: Optional[float]
) -> np.ndarray:
    if binwidth is None:
        if bins < 1:
            raise ValueError(f"'bins' must be a positive integer; got {bins}.")
        return np.histogram_bin_edges(values, bins=bins)
    if binwidth <= 0:
        raise ValueError(f"'binwidth' must be positive; got {binwidth}.")
    lo = np.floor(values.min() / binwidth) * binwidth
    n_bins = int(np.floor((values.max() - lo) / binwidth)) + 1
    return lo + binwidth * np.arange(n_bins + 1)


def ppc_dens_overlay(
    y: Any,
    yrep: Any,
    size: float = 0.25,
    alpha: float = 0.7,
    trim: bool = False,
    n_grid: int = 512,
    config: Optional[PlotConfig] = None,
) -> plt.Figure:
    """Kernel density of ``y`` drawn over the density of each ``yrep`` row.

    Parameters
    ----------
    y
        Observed outcome vector.
    yrep
        ``(draws, observations)`` matrix of replicated datasets.
    size, alpha
        Line width and opacity of the replicated densities.
    trim
        Restrict each density to the range of its own values instead of the
        range shared by ``y`` and all of ``yrep``.
    n_grid
        Number of evaluation points per density.
    config
        Plot styling.

    Returns
    -------
    matplotlib.figure.Figure
    """
    config = setup_plot_style(config)
    y = validate_y(y)
    yrep = validate_yrep(yrep, y)

    grid = np.linspace(
        min(y.min(), yrep.min()), max(y.max(), yrep.max()), n_grid
    )
    fig, ax = plt.subplots(
        figsize=(config.panel_size[0] * 1.5, config.panel_size[1] * 1.5)
    )

    n_skipped = 0
    label = "y_rep"
    for row in yrep:
        dens = _density(row, grid, trim)
        if dens is None:
            n_skipped += 1
            continue
        ax.plot(
            grid,
            dens,
            color=COLORS["yrep"],
            linewidth=size,
            alpha=alpha,
            label=label,
            zorder=1,
        )
        label = "_nolegend_"
    if n_skipped:
        logger.warning(
            f"Skipped {n_skipped} constant 'yrep' draw(s) with no density."
        )

    dens = _density(y, grid, trim)
    if dens is None:
        logger.warning("'y' is constant; drawing a point mass.")
        ax.axvline(y[0], color=COLORS["y"], linewidth=1.5, label="y")
    else:
        ax.plot(
            grid, dens, color=COLORS["y"], linewidth=1.5, label="y", zorder=2
        )

    ax.set_ylim(bottom=0)
    ax.set_yticks([])
    ax.legend(loc="upper right", fontsize="small")
    strip_spines(ax)
    fig.tight_layout()
    return fig


def ppc_hist(
    y: Any,
    yrep: Any,
    bins: int = 30,
    binwidth: Optional[float] = None,
    ncol: Optional[int] = None,
    config: Optional[PlotConfig] = None,
) -> plt.Figure:
    """Histogram of ``y`` next to one histogram per ``yrep`` row.

    Panels are titled ``"y"``, ``"y_rep 1"``, ``"y_rep 2"`` ... and share
    bin edges so they can be compared directly. Pass only a handful of
    ``yrep`` rows.
    """
    config = setup_plot_style(config)
    y = validate_y(y)
    yrep = validate_yrep(yrep, y)
    edges = _bin_edges(np.concatenate([y, yrep.ravel()]), bins, binwidth)

    datasets = [("y", y, COLORS["y"])] + [
        (f"y_rep {i + 1}", row, COLORS["yrep"])
        for i, row in enumerate(yrep)
    ]
    fig, axes = facet_axes(len(datasets), ncol, config)
    for ax, (title, values, color) in zip(axes, datasets):
        ax.hist(values, bins=edges, color=color, edgecolor="white")
        ax.set_title(title)
        ax.set_xlim(edges[0], edges[-1])
        ax.set_yticks([])
        strip_spines(ax)
    fig.tight_layout()
    return fig


def _resolve_stat(stat: Statistic) -> Tuple[Callable, str, bool]:
    """Return ``(function, label, vectorised)`` for a statistic."""
    if isinstance(stat, str):
        if stat not in _NAMED_STATS:
            raise ValueError(
                f"Unknown statistic {stat!r}; choose from "
                f"{sorted(_NAMED_STATS)} or pass a callable."
            )
        return _NAMED_STATS[stat], stat, True
    if not callable(stat):
        raise ValueError(
            "'stat' must be a callable or a statistic name, got "
            f"{type(stat).__name__}."
        )
    label = getattr(stat, "__name__", "T")
    if label.startswith("<"):
        label = "T"
    return stat, label, False


def ppc_stat(
    y: Any,
    yrep: Any,
    stat: Statistic = "mean",
    bins: int = 30,
    binwidth: Optional[float] = None,
    config: Optional[PlotConfig] = None,
) -> plt.Figure:
    """Distribution of a statistic over ``yrep`` against its value for ``y``.

    ``stat`` is a name (``mean``, ``median``, ``sd``, ``var``, ``min``,
    ``max``) or a callable reducing one dataset to a number. The histogram
    of ``T(y_rep)`` is labelled ``"T(y_rep)"``; the observed value is a
    vertical line labelled ``"T(y)"``.
    """
    config = setup_plot_style(config)
    y = validate_y(y)
    yrep = validate_yrep(yrep, y)
    fn, label, vectorised = _resolve_stat(stat)

    if vectorised:
        t_yrep = np.asarray(fn(yrep), dtype=np.float64)
    else:
        t_yrep = np.array([fn(row) for row in yrep], dtype=np.float64)
    t_y = float(fn(y))
    if not (np.all(np.isfinite(t_yrep)) and np.isfinite(t_y)):
        raise ValueError(f"Statistic {label!r} produced non-finite values.")

    edges = _bin_edges(np.append(t_yrep, t_y), bins, binwidth)
    fig, ax = plt.subplots(
        figsize=(config.panel_size[0] * 1.5, config.panel_size[1] * 1.5)
    )
    ax.hist(
        t_yrep,
        bins=edges,
        color=COLORS["yrep"],
        edgecolor="white",
        label="T(y_rep)",
    )
    ax.axvline(t_y, color=COLORS["y"], linewidth=2.0, label="T(y)")
    ax.set_xlabel(f"T = {label}")
    ax.set_yticks([])
    ax.legend(loc="upper right", fontsize="small")
    strip_spines(ax)
    fig.tight_layout()

    p_value = float(np.mean(t_yrep >= t_y))
    logger.debug(f"ppc_stat: T = {label}, T(y) = {t_y:.4g}, p = {p_value:.3f}")
    return fig
