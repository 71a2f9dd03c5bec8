from .base import (
    CHAIN_COLORS,
    COLORS,
    PlotConfig,
    facet_axes,
    prepare_draws,
    safe_plot,
    setup_plot_style,
)
from .diagnostics import (
    DiagnosticsConfig,
    mcmc_neff,
    mcmc_rhat,
    neff_ratios,
    plot_diagnostics,
    rhat_values,
)
from .intervals import mcmc_areas, mcmc_intervals, mcmc_intervals_data
from .ppc import ppc_dens_overlay, ppc_hist, ppc_stat
from .scatter import mcmc_scatter
from .trace import mcmc_trace, mcmc_trace_highlight

__all__ = [
    # Base utilities
    "CHAIN_COLORS",
    "COLORS",
    "PlotConfig",
    "facet_axes",
    "prepare_draws",
    "safe_plot",
    "setup_plot_style",
    # Main plotting functions
    "mcmc_trace",
    "mcmc_trace_highlight",
    "mcmc_intervals",
    "mcmc_intervals_data",
    "mcmc_areas",
    "mcmc_scatter",
    "mcmc_rhat",
    "mcmc_neff",
    # Posterior predictive checks
    "ppc_dens_overlay",
    "ppc_hist",
    "ppc_stat",
    # Diagnostics
    "DiagnosticsConfig",
    "rhat_values",
    "neff_ratios",
    "plot_diagnostics",
]
