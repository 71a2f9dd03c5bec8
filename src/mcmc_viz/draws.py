"""Normalisation of MCMC draws into an (iteration, chain, parameter) cube."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

import arviz as az
import numpy as np
import pandas as pd
import xarray as xr

_CHAIN_COLUMNS = ("chain", "Chain")
_ITERATION_COLUMNS = ("iteration", "Iteration")

_NAMED_TRANSFORMS: Dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "log": np.log,
    "log10": np.log10,
    "log1p": np.log1p,
    "exp": np.exp,
    "sqrt": np.sqrt,
    "abs": np.abs,
    "square": np.square,
}

Transformation = Union[str, Callable[[np.ndarray], np.ndarray]]


@dataclass(frozen=True, eq=False)
class Draws:
    """Posterior draws laid out as ``(iteration, chain, parameter)``.

    Attributes
    ----------
    values
        Float array of shape ``(n_iterations, n_chains, n_parameters)``.
    parameters
        Unique parameter names, one per entry of the last axis.
    """

    values: np.ndarray
    parameters: Tuple[str, ...]

    def __post_init__(self):
        values = np.asarray(self.values)
        if values.dtype.kind not in "biuf":
            raise ValueError(
                f"Draws must be numeric; got array of dtype {values.dtype}."
            )
        values = values.astype(np.float64)
        if values.ndim != 3:
            raise ValueError(
                "Draws must have shape (iteration, chain, parameter); "
                f"got {values.ndim}-D array."
            )
        n_iter, n_chain, n_par = values.shape
        if n_iter == 0:
            raise ValueError("Draws must contain at least one iteration.")
        if n_chain == 0:
            raise ValueError("Draws must contain at least one chain.")
        if n_par == 0:
            raise ValueError("Draws must contain at least one parameter.")

        parameters = tuple(str(p) for p in self.parameters)
        if len(parameters) != n_par:
            raise ValueError(
                f"Got {len(parameters)} parameter names for {n_par} "
                "parameters."
            )
        duplicates = sorted(
            {p for p in parameters if parameters.count(p) > 1}
        )
        if duplicates:
            raise ValueError(
                f"Parameter names must be unique; duplicated: {duplicates}."
            )
        if not np.all(np.isfinite(values)):
            raise ValueError(
                "Draws contain non-finite values (NaN or inf), which are "
                "not allowed."
            )

        object.__setattr__(self, "values", values)
        object.__setattr__(self, "parameters", parameters)

    @property
    def n_iterations(self) -> int:
        return self.values.shape[0]

    @property
    def n_chains(self) -> int:
        return self.values.shape[1]

    @property
    def n_parameters(self) -> int:
        return self.values.shape[2]

    @property
    def is_single_chain(self) -> bool:
        return self.n_chains == 1

    def __repr__(self) -> str:
        return (
            f"Draws(n_iterations={self.n_iterations}, "
            f"n_chains={self.n_chains}, parameters={list(self.parameters)})"
        )

    def chain(self, index: int) -> np.ndarray:
        """Return the ``(iteration, parameter)`` matrix of one chain."""
        if not 0 <= index < self.n_chains:
            raise IndexError(
                f"Chain index {index} out of range for {self.n_chains} "
                "chain(s)."
            )
        return self.values[:, index, :]

    def subset(self, parameters: Sequence[str]) -> "Draws":
        missing = [p for p in parameters if p not in self.parameters]
        if missing:
            raise KeyError(f"Unknown parameters: {', '.join(missing)}")
        idx = [self.parameters.index(p) for p in parameters]
        return Draws(self.values[:, :, idx], tuple(parameters))

    def to_frame(self) -> pd.DataFrame:
        """Tidy long-format view, one row per (iteration, chain, parameter).

        Iterations are 1-based, chains are 0-based.
        """
        cube = np.transpose(self.values, (2, 1, 0))
        par_idx, chain_idx, iter_idx = np.indices(cube.shape)
        names = np.asarray(self.parameters, dtype=object)
        return pd.DataFrame(
            {
                "iteration": iter_idx.ravel() + 1,
                "chain": chain_idx.ravel(),
                "parameter": names[par_idx.ravel()],
                "value": cube.ravel(),
            }
        )

    def to_inference_data(self) -> az.InferenceData:
        """One posterior variable per parameter, shaped ``(chain, draw)``."""
        posterior = {
            name: self.values[:, :, k].T
            for k, name in enumerate(self.parameters)
        }
        return az.from_dict(posterior=posterior)


def _default_names(n: int) -> List[str]:
    return [f"V{i + 1}" for i in range(n)]


def _names_or(
    parameter_names: Optional[Sequence[str]], fallback: Optional[List[str]]
) -> Optional[List[str]]:
    if parameter_names is not None:
        return [str(p) for p in parameter_names]
    return fallback


def _from_array(
    arr: Any, parameter_names: Optional[Sequence[str]]
) -> Draws:
    arr = np.asarray(arr)
    if arr.ndim == 2:
        arr = arr[:, np.newaxis, :]
    elif arr.ndim != 3:
        raise ValueError(
            "Arrays of draws must be 2-D (iteration, parameter) or 3-D "
            f"(iteration, chain, parameter); got {arr.ndim}-D."
        )
    if parameter_names is None:
        parameter_names = _default_names(arr.shape[2])
    return Draws(arr, tuple(parameter_names))


def _from_dataarray(
    da: xr.DataArray, parameter_names: Optional[Sequence[str]]
) -> Draws:
    if parameter_names is None and da.ndim in (2, 3):
        last_dim = da.dims[-1]
        if last_dim in da.coords:
            parameter_names = [str(v) for v in da.coords[last_dim].values]
    return _from_array(da.values, parameter_names)


def _from_frame(
    df: pd.DataFrame, parameter_names: Optional[Sequence[str]]
) -> Draws:
    df = df.drop(columns=[c for c in _ITERATION_COLUMNS if c in df.columns])
    chain_col = next((c for c in _CHAIN_COLUMNS if c in df.columns), None)
    if chain_col is None:
        names = _names_or(parameter_names, [str(c) for c in df.columns])
        return _from_array(df.to_numpy(), names)

    param_cols = [c for c in df.columns if c != chain_col]
    groups = [
        group[param_cols].to_numpy()
        for _, group in df.groupby(chain_col, sort=True)
    ]
    lengths = sorted({len(g) for g in groups})
    if len(lengths) > 1:
        raise ValueError(
            "All chains must have the same number of iterations; got chain "
            f"lengths {lengths}."
        )
    if not groups:
        raise ValueError("Draws must contain at least one iteration.")
    names = _names_or(parameter_names, [str(c) for c in param_cols])
    return _from_array(np.stack(groups, axis=1), names)


def _from_chain_list(
    chains: Sequence[Any], parameter_names: Optional[Sequence[str]]
) -> Draws:
    if len(chains) == 0:
        raise ValueError("A list of chains must contain at least one chain.")

    matrices = []
    columns = None
    for i, chain in enumerate(chains):
        if isinstance(chain, pd.DataFrame):
            chain_columns = [str(c) for c in chain.columns]
            if columns is None:
                columns = chain_columns
            elif chain_columns != columns:
                raise ValueError(
                    f"Chain {i} has parameters {chain_columns}, expected "
                    f"{columns}."
                )
            chain = chain.to_numpy()
        mat = np.asarray(chain)
        if mat.ndim != 2:
            raise ValueError(
                f"Each chain must be a 2-D (iteration, parameter) matrix; "
                f"chain {i} is {mat.ndim}-D."
            )
        matrices.append(mat)

    shapes = sorted({m.shape for m in matrices})
    if len(shapes) > 1:
        raise ValueError(
            f"All chains must have the same dimensions; got shapes {shapes}."
        )
    names = _names_or(parameter_names, columns)
    return _from_array(np.stack(matrices, axis=1), names)


def _from_dataset(
    ds: xr.Dataset, parameter_names: Optional[Sequence[str]]
) -> Draws:
    columns: List[np.ndarray] = []
    labels: List[str] = []
    for var, da in ds.data_vars.items():
        if "chain" not in da.dims or "draw" not in da.dims:
            raise ValueError(
                f"Variable {var!r} must have 'chain' and 'draw' dimensions; "
                f"got {da.dims}."
            )
        arr = np.asarray(da.transpose("draw", "chain", ...).values)
        extra = arr.shape[2:]
        if not extra:
            columns.append(arr)
            labels.append(str(var))
            continue
        for idx in np.ndindex(*extra):
            columns.append(arr[(slice(None), slice(None)) + idx])
            labels.append(f"{var}[{','.join(str(i) for i in idx)}]")

    if not columns:
        raise ValueError("Dataset contains no posterior variables.")
    return _from_array(
        np.stack(columns, axis=-1), _names_or(parameter_names, labels)
    )


def as_draws(
    x: Any, parameter_names: Optional[Sequence[str]] = None
) -> Draws:
    """Normalise a container of posterior draws into :class:`Draws`.

    Parameters
    ----------
    x
        One of: :class:`Draws`; a 3-D ``(iteration, chain, parameter)`` or
        2-D ``(iteration, parameter)`` array or :class:`xarray.DataArray`;
        a :class:`pandas.DataFrame` with one column per parameter and an
        optional ``chain`` column; a list of per-chain matrices or frames;
        an :class:`arviz.InferenceData` or :class:`xarray.Dataset` with
        ``(chain, draw, ...)`` variables.
    parameter_names
        Optional names overriding those carried by ``x``. Containers
        without names get ``V1..Vn``.

    Returns
    -------
    Draws
    """
    if isinstance(x, Draws):
        if parameter_names is not None:
            return Draws(x.values, tuple(parameter_names))
        return x
    if isinstance(x, az.InferenceData):
        if "posterior" not in x.groups():
            raise ValueError("InferenceData has no posterior group.")
        return _from_dataset(x.posterior, parameter_names)
    if isinstance(x, xr.Dataset):
        return _from_dataset(x, parameter_names)
    if isinstance(x, xr.DataArray):
        return _from_dataarray(x, parameter_names)
    if isinstance(x, pd.DataFrame):
        return _from_frame(x, parameter_names)
    if isinstance(x, (list, tuple)):
        return _from_chain_list(x, parameter_names)
    if isinstance(x, np.ndarray):
        return _from_array(x, parameter_names)
    raise TypeError(
        f"Unsupported container for MCMC draws: {type(x).__name__}. Use an "
        "array, DataFrame, list of chains, xarray object or InferenceData."
    )


def _as_list(value: Union[str, Sequence[str]]) -> List[str]:
    if isinstance(value, str):
        return [value]
    return list(value)


def select_parameters(
    parameters: Sequence[str],
    pars: Optional[Union[str, Sequence[str]]] = None,
    regex_pars: Optional[Union[str, Sequence[str]]] = None,
) -> List[str]:
    """Resolve exact names and regex patterns against ``parameters``.

    Exact names come first in the order given, followed by regex matches in
    parameter order, without duplicates. With neither argument every
    parameter is selected.
    """
    parameters = list(parameters)
    if pars is None and regex_pars is None:
        return parameters

    selected: List[str] = []
    if pars is not None:
        pars = _as_list(pars)
        missing = [p for p in pars if p not in parameters]
        if missing:
            raise KeyError(
                "Some 'pars' don't match parameter names: "
                f"{', '.join(missing)}"
            )
        selected.extend(pars)

    if regex_pars is not None:
        for pattern in _as_list(regex_pars):
            matches = [p for p in parameters if re.search(pattern, p)]
            if not matches:
                raise KeyError(
                    f"No parameter names match 'regex_pars' pattern "
                    f"{pattern!r}."
                )
            selected.extend(matches)

    return list(dict.fromkeys(selected))


def _resolve_transformation(
    transformation: Transformation,
) -> Tuple[Callable[[np.ndarray], np.ndarray], str]:
    if isinstance(transformation, str):
        if transformation not in _NAMED_TRANSFORMS:
            raise ValueError(
                f"Unknown transformation {transformation!r}; choose from "
                f"{sorted(_NAMED_TRANSFORMS)} or pass a callable."
            )
        return _NAMED_TRANSFORMS[transformation], transformation
    if not callable(transformation):
        raise ValueError(
            f"Transformations must be callables or names, got "
            f"{type(transformation).__name__}."
        )
    label = getattr(transformation, "__name__", "t")
    if label.startswith("<"):
        label = "t"
    return transformation, label


def apply_transformations(
    draws: Draws,
    transformations: Optional[
        Union[Transformation, Mapping[str, Transformation]]
    ],
) -> Draws:
    """Apply per-parameter transformations and relabel as ``f(param)``.

    ``transformations`` is either a single callable/name applied to every
    parameter or a mapping from parameter name to callable/name.
    """
    if transformations is None:
        return draws
    if callable(transformations) or isinstance(transformations, str):
        transformations = {p: transformations for p in draws.parameters}

    unknown = [p for p in transformations if p not in draws.parameters]
    if unknown:
        raise KeyError(
            "Transformations given for unknown parameters: "
            f"{', '.join(unknown)}"
        )

    values = draws.values.copy()
    names = list(draws.parameters)
    for param, transformation in transformations.items():
        fn, label = _resolve_transformation(transformation)
        k = draws.parameters.index(param)
        with np.errstate(all="ignore"):
            transformed = np.asarray(fn(values[:, :, k]), dtype=np.float64)
        if not np.all(np.isfinite(transformed)):
            raise ValueError(
                f"Transformation {label!r} produced non-finite values for "
                f"parameter {param!r}."
            )
        values[:, :, k] = transformed
        names[k] = f"{label}({param})"
    return Draws(values, tuple(names))


def require_multiple_chains(draws: Draws, caller: str) -> None:
    if draws.is_single_chain:
        raise ValueError(f"{caller} requires multiple chains.")
