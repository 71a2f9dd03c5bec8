"""Alignment of NUTS divergence flags with the (iteration, chain) grid."""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import arviz as az
import numpy as np
import pandas as pd
import xarray as xr

from .logger import logger

DIVERGENCE_NAMES = ("divergent__", "diverging")

# ArviZ sample_stats name -> Stan-style NUTS parameter name
STAN_NUTS_NAMES: Dict[str, str] = {
    "acceptance_rate": "accept_stat__",
    "accept_prob": "accept_stat__",
    "step_size": "stepsize__",
    "tree_depth": "treedepth__",
    "n_steps": "n_leapfrog__",
    "diverging": "divergent__",
    "energy": "energy__",
}


def _sample_stats(obj: Any) -> xr.Dataset:
    if isinstance(obj, az.InferenceData):
        if "sample_stats" not in obj.groups():
            raise ValueError(
                "InferenceData has no sample_stats group; NUTS parameters "
                "are unavailable."
            )
        return obj.sample_stats
    return obj


def _columns_by_name(df: pd.DataFrame) -> Dict[str, Any]:
    return {str(c).lower(): c for c in df.columns}


def _is_long_frame(df: pd.DataFrame) -> bool:
    cols = _columns_by_name(df)
    return any(
        c in cols for c in ("iteration", "chain", "parameter", "value")
    )


def _from_nuts_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Pivot a long NUTS table to an (iteration, chain) frame of flags."""
    cols = _columns_by_name(df)
    missing = [c for c in ("iteration", "chain", "value") if c not in cols]
    if missing:
        raise ValueError(
            f"NUTS parameter table is missing columns: {', '.join(missing)}."
        )
    if "parameter" in cols:
        df = df.loc[df[cols["parameter"]].isin(DIVERGENCE_NAMES)]
        if df.empty:
            raise ValueError(
                "NUTS parameter table has no 'divergent__' rows."
            )
    grid = df.pivot(
        index=cols["iteration"], columns=cols["chain"], values=cols["value"]
    )
    return grid.sort_index(axis=0).sort_index(axis=1)


def _from_sample_stats(ds: xr.Dataset) -> np.ndarray:
    key = next((k for k in DIVERGENCE_NAMES if k in ds.data_vars), None)
    if key is None:
        raise ValueError("sample_stats has no 'diverging' variable.")
    return np.asarray(ds[key].transpose("draw", "chain").values)


def _as_flags(arr: np.ndarray) -> np.ndarray:
    if arr.dtype == bool:
        return arr
    if arr.dtype.kind not in "biuf" or not np.all(np.isin(arr, (0, 1))):
        raise ValueError(
            "divergences must contain only 0/1 or boolean values."
        )
    return arr.astype(bool)


def _check_grid(arr: np.ndarray, n_iterations: int, n_chains: int) -> None:
    if arr.shape[0] != n_iterations:
        raise ValueError(
            "num_iters(divergences) == n_iter is not satisfied "
            f"(got {arr.shape[0]}, expected {n_iterations})."
        )
    if arr.shape[1] != n_chains:
        raise ValueError(
            "num_chains(divergences) == n_chain is not satisfied "
            f"(got {arr.shape[1]}, expected {n_chains})."
        )


def align_divergences(
    divergences: Any, n_iterations: int, n_chains: int
) -> Optional[np.ndarray]:
    """Align divergence flags with the draws' (iteration, chain) grid.

    Parameters
    ----------
    divergences
        A long NUTS parameter table (``iteration``, ``parameter``,
        ``value``, ``chain``), an ``(iteration, chain)`` matrix or wide
        DataFrame, a vector with one flag per iteration (shared by every
        chain), or an
        :class:`arviz.InferenceData` / :class:`xarray.Dataset` holding a
        ``diverging`` sample statistic.
    n_iterations, n_chains
        Dimensions of the draws the flags must match.

    Returns
    -------
    numpy.ndarray or None
        Boolean ``(n_iterations, n_chains)`` array, or ``None`` when
        ``divergences`` is ``None`` or flags no divergent iteration.
    """
    if divergences is None:
        return None

    if isinstance(divergences, (az.InferenceData, xr.Dataset)):
        arr = _from_sample_stats(_sample_stats(divergences))
    elif isinstance(divergences, pd.DataFrame) and not _is_long_frame(
        divergences
    ):
        # wide (iteration x chain) table of flags
        arr = divergences.to_numpy()
    elif isinstance(divergences, pd.DataFrame):
        grid = _from_nuts_frame(divergences)
        if grid.isna().to_numpy().any():
            raise ValueError(
                "NUTS parameter table does not cover every (iteration, "
                "chain) pair."
            )
        arr = grid.to_numpy()
    else:
        arr = np.asarray(divergences)
        if arr.ndim <= 1:
            arr = np.atleast_1d(arr)
            if arr.shape[0] != n_iterations:
                raise ValueError(
                    "length(divergences) == n_iter is not satisfied "
                    f"(got {arr.shape[0]}, expected {n_iterations})."
                )
            arr = np.repeat(arr[:, np.newaxis], n_chains, axis=1)
        elif arr.ndim != 2:
            raise ValueError(
                "divergences must be a vector, an (iteration, chain) matrix "
                f"or a NUTS parameter table; got {arr.ndim}-D array."
            )

    _check_grid(arr, n_iterations, n_chains)
    flags = _as_flags(arr)
    if not flags.any():
        logger.info("No divergences to plot.")
        return None
    logger.debug(
        f"Aligned {int(flags.sum())} divergent transition(s) across "
        f"{n_chains} chain(s)."
    )
    return flags


def nuts_params(
    idata: Any, pars: Optional[Sequence[str]] = None
) -> pd.DataFrame:
    """Extract NUTS sampler statistics as a long table.

    Columns are ``iteration`` (1-based), ``parameter`` (Stan-style names
    such as ``divergent__``), ``value`` and ``chain`` (0-based).
    """
    sample_stats = _sample_stats(idata)
    if pars is not None:
        pars = [pars] if isinstance(pars, str) else list(pars)
        known = set(STAN_NUTS_NAMES.values())
        unknown = [p for p in pars if p not in known]
        if unknown:
            raise KeyError(
                f"Unknown NUTS parameters: {', '.join(unknown)}. Choose from "
                f"{sorted(known)}."
            )

    frames = []
    seen = set()
    for name, stan_name in STAN_NUTS_NAMES.items():
        if name not in sample_stats.data_vars or stan_name in seen:
            continue
        if pars is not None and stan_name not in pars:
            continue
        seen.add(stan_name)
        values = np.asarray(
            sample_stats[name].transpose("chain", "draw").values,
            dtype=np.float64,
        )
        n_chain, n_draw = values.shape
        frames.append(
            pd.DataFrame(
                {
                    "iteration": np.tile(np.arange(1, n_draw + 1), n_chain),
                    "parameter": stan_name,
                    "value": values.ravel(),
                    "chain": np.repeat(np.arange(n_chain), n_draw),
                }
            )
        )

    if not frames:
        raise ValueError("No NUTS sampler statistics found in sample_stats.")
    return pd.concat(frames, ignore_index=True)
