import numpy as np
import pytest

from mcmc_viz import as_draws, example_mcmc_draws
from mcmc_viz.plotting import (
    mcmc_areas,
    mcmc_intervals,
    mcmc_intervals_data,
)


def _ytick_labels(ax):
    """Tick labels from top to bottom."""
    ticks = sorted(ax.get_yticklabels(), key=lambda t: -t.get_position()[1])
    return [t.get_text() for t in ticks]


def test_intervals_data_matches_pooled_quantiles(arr, params):
    data = mcmc_intervals_data(
        as_draws(arr, params), regex_pars="beta", prob=0.5, prob_outer=0.9
    )
    pooled = arr[:, :, 1].ravel()

    assert data["parameter"].tolist() == ["beta[1]", "beta[2]"]
    row = data.iloc[0]
    assert row["ll"] == pytest.approx(np.quantile(pooled, 0.05))
    assert row["l"] == pytest.approx(np.quantile(pooled, 0.25))
    assert row["m"] == pytest.approx(np.median(pooled))
    assert row["h"] == pytest.approx(np.quantile(pooled, 0.75))
    assert row["hh"] == pytest.approx(np.quantile(pooled, 0.95))
    assert (data["ll"] <= data["l"]).all()
    assert (data["h"] <= data["hh"]).all()


def test_intervals_data_point_estimates(arr):
    mean = mcmc_intervals_data(arr, pars="V1", point_est="mean")
    assert mean["m"].item() == pytest.approx(arr[:, :, 0].mean())
    none = mcmc_intervals_data(arr, pars="V1", point_est="none")
    assert np.isnan(none["m"].item())
    with pytest.raises(ValueError, match="point_est"):
        mcmc_intervals_data(arr, point_est="mode")


@pytest.mark.parametrize(
    "prob, prob_outer", [(0.0, 0.9), (0.9, 0.5), (0.5, 1.5)]
)
def test_invalid_probabilities(arr, prob, prob_outer):
    with pytest.raises(ValueError, match="prob"):
        mcmc_intervals(arr, prob=prob, prob_outer=prob_outer)


def test_mcmc_intervals_figure(arr, params):
    fig = mcmc_intervals(as_draws(arr, params))
    ax = fig.axes[0]
    assert _ytick_labels(ax) == params
    assert len(ax.collections) == 3


def test_mcmc_intervals_without_point(arr):
    fig = mcmc_intervals(arr, point_est="none")
    assert len(fig.axes[0].collections) == 2


def test_mcmc_areas_figure():
    draws = example_mcmc_draws(chains=2, params=3)
    fig = mcmc_areas(draws, transformations={"sigma": "log"})
    ax = fig.axes[0]
    assert _ytick_labels(ax) == ["alpha", "log(sigma)", "beta[1]"]
    assert len(ax.lines) == 3


def test_mcmc_areas_constant_parameter(log_messages):
    values = np.ones((20, 2, 1))
    fig = mcmc_areas(values)
    assert len(fig.axes) == 1
    assert any("constant draws" in m for m in log_messages)
