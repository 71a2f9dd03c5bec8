from .divergences import align_divergences, nuts_params
from .draws import (
    Draws,
    apply_transformations,
    as_draws,
    require_multiple_chains,
    select_parameters,
)
from .example_data import (
    example_mcmc_draws,
    example_y_data,
    example_yrep_draws,
)
from .plotting import (
    DiagnosticsConfig,
    PlotConfig,
    mcmc_areas,
    mcmc_intervals,
    mcmc_intervals_data,
    mcmc_neff,
    mcmc_rhat,
    mcmc_scatter,
    mcmc_trace,
    mcmc_trace_highlight,
    plot_diagnostics,
    ppc_dens_overlay,
    ppc_hist,
    ppc_stat,
)

__all__ = [
    "Draws",
    "as_draws",
    "select_parameters",
    "apply_transformations",
    "require_multiple_chains",
    "example_mcmc_draws",
    "example_y_data",
    "example_yrep_draws",
    "align_divergences",
    "nuts_params",
    "PlotConfig",
    "DiagnosticsConfig",
    "mcmc_trace",
    "mcmc_trace_highlight",
    "mcmc_intervals",
    "mcmc_intervals_data",
    "mcmc_areas",
    "mcmc_scatter",
    "mcmc_rhat",
    "mcmc_neff",
    "plot_diagnostics",
    "ppc_dens_overlay",
    "ppc_hist",
    "ppc_stat",
]
