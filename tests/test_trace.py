import matplotlib.pyplot as plt
import numpy as np
import pytest
from matplotlib.collections import LineCollection
from matplotlib.patches import Polygon, Rectangle

from mcmc_viz import as_draws, nuts_params
from mcmc_viz.plotting import mcmc_trace, mcmc_trace_highlight


def _labelled(ax, label, kind=None):
    artists = list(ax.lines) + list(ax.collections) + list(ax.patches)
    return [
        a
        for a in artists
        if a.get_label() == label and (kind is None or isinstance(a, kind))
    ]


def test_mcmc_trace_returns_figure(
    arr,
    arr1chain,
    mat,
    dframe,
    dframe_multiple_chains,
    chainlist,
    arr1,
    mat1,
    dframe1,
    chainlist1,
    params,
):
    fig = mcmc_trace(
        as_draws(arr, params), pars="beta[1]", regex_pars=r"x\:"
    )
    assert isinstance(fig, plt.Figure)
    assert [ax.get_title() for ax in fig.axes] == ["beta[1]", "x:1", "x:2"]

    fig = mcmc_trace(
        as_draws(arr1chain, params), pars="beta[2]", regex_pars=r"x\:"
    )
    assert len(fig.axes) == 3

    for x in (mat, dframe, dframe_multiple_chains, chainlist):
        assert len(mcmc_trace(x).axes) == 6
    for x in (arr1, mat1, dframe1, chainlist1):
        assert len(mcmc_trace(x).axes) == 1


def test_mcmc_trace_draws_one_line_per_chain(arr, params):
    fig = mcmc_trace(arr, pars="V1")
    ax = fig.axes[0]
    assert [line.get_label() for line in ax.lines] == [
        "Chain 0",
        "Chain 1",
        "Chain 2",
        "Chain 3",
    ]
    xdata = ax.lines[0].get_xdata()
    assert xdata[0] == 1 and xdata[-1] == 100
    np.testing.assert_allclose(ax.lines[2].get_ydata(), arr[:, 2, 0])


def test_mcmc_trace_iter1_shifts_iterations(arr):
    fig = mcmc_trace(arr, pars="V1", iter1=500)
    xdata = fig.axes[0].lines[0].get_xdata()
    assert xdata[0] == 501 and xdata[-1] == 600


def test_mcmc_trace_highlight_returns_figure(
    arr, dframe_multiple_chains, params
):
    fig = mcmc_trace_highlight(
        as_draws(arr, params), regex_pars=["beta", r"x\:"]
    )
    assert len(fig.axes) == 4

    fig = mcmc_trace_highlight(dframe_multiple_chains, highlight=2)
    alphas = [line.get_alpha() for line in fig.axes[0].lines]
    assert alphas == [0.2, 0.2, 1.0, 0.2]


def test_mcmc_trace_highlight_requires_multiple_chains(
    mat, dframe, arr1chain
):
    with pytest.raises(ValueError, match="requires multiple"):
        mcmc_trace_highlight(mat)
    with pytest.raises(ValueError, match="requires multiple chains"):
        mcmc_trace_highlight(dframe, highlight=1)
    with pytest.raises(ValueError, match="requires multiple chains"):
        mcmc_trace_highlight(arr1chain, highlight=1)


def test_mcmc_trace_highlight_invalid_chain(arr):
    with pytest.raises(ValueError, match="highlight"):
        mcmc_trace_highlight(arr, highlight=4)
    with pytest.raises(ValueError, match="alpha"):
        mcmc_trace_highlight(arr, alpha=2)


def test_mcmc_trace_window_sets_axis_limits(arr, params):
    fig = mcmc_trace(
        as_draws(arr, params), regex_pars="beta", window=(5, 10)
    )
    for ax in fig.axes:
        assert ax.get_xlim() == (5, 10)

    fig = mcmc_trace_highlight(arr, window=(20, 40))
    assert fig.axes[0].get_xlim() == (20, 40)


@pytest.mark.parametrize("window", [(10, 5), (1, 2, 3)])
def test_mcmc_trace_invalid_window(arr, window):
    with pytest.raises(ValueError, match="window"):
        mcmc_trace(arr, window=window)


def test_mcmc_trace_warmup_is_shaded(arr, params):
    fig = mcmc_trace(as_draws(arr, params), regex_pars="beta", n_warmup=10)
    for ax in fig.axes:
        spans = _labelled(ax, "Warmup", (Polygon, Rectangle))
        assert len(spans) == 1
    with pytest.raises(ValueError, match="n_warmup"):
        mcmc_trace(arr, n_warmup=-1)
    with pytest.raises(ValueError, match="iter1"):
        mcmc_trace(arr, iter1=-1)


def _span_extent(span):
    if isinstance(span, Rectangle):
        return span.get_x(), span.get_x() + span.get_width()
    xs = np.asarray(span.get_xy())[:, 0]
    return xs.min(), xs.max()


def test_mcmc_trace_warmup_follows_iter1(arr):
    fig = mcmc_trace(arr, pars="V1", n_warmup=10, iter1=100)
    ax = fig.axes[0]
    (span,) = _labelled(ax, "Warmup", (Polygon, Rectangle))
    start, end = _span_extent(span)
    assert start == pytest.approx(100.5)
    assert end == pytest.approx(110.5)
    lo, hi = ax.get_xlim()
    assert 90 < lo < 101
    assert 200 < hi < 210


def test_mcmc_trace_divergences_layer(make_nuts_idata):
    idata = make_nuts_idata()
    draws = as_draws(idata)

    divs = nuts_params(idata, pars="divergent__")
    fig = mcmc_trace(draws, pars="mu", divergences=divs)
    ax = fig.axes[0]
    rugs = _labelled(ax, "Divergent", LineCollection)
    assert len(rugs) == 1
    assert len(rugs[0].get_segments()) == 3
    assert ax.get_legend() is not None

    flags = np.random.default_rng(0).choice([0, 1], size=100)
    fig = mcmc_trace(draws, pars="mu", divergences=flags)
    rugs = _labelled(fig.axes[0], "Divergent", LineCollection)
    assert len(rugs[0].get_segments()) == int(flags.sum())


def test_mcmc_trace_divergence_errors_and_notice(
    log_messages, make_nuts_idata
):
    idata = make_nuts_idata()
    draws = as_draws(idata)
    divs = nuts_params(idata, pars="divergent__")

    with pytest.raises(ValueError, match=r"length\(divergences\) == n_iter"):
        mcmc_trace(draws, pars="mu", divergences=1)
    two_chains = as_draws(draws.values[:, :2, :], draws.parameters)
    with pytest.raises(ValueError, match=r"num_chains\(divergences\)"):
        mcmc_trace(two_chains, pars="mu", divergences=divs)
    with pytest.raises(ValueError, match=r"num_iters\(divergences\)"):
        mcmc_trace(
            draws, pars="mu", divergences=divs[divs["iteration"] <= 10]
        )

    fig = mcmc_trace(draws, pars="mu", divergences=np.zeros(100))
    assert "No divergences to plot." in log_messages
    assert not _labelled(fig.axes[0], "Divergent")


def test_mcmc_trace_transformations(arr, params):
    fig = mcmc_trace(
        as_draws(arr, params), pars="sigma", transformations={"sigma": "log"}
    )
    ax = fig.axes[0]
    assert ax.get_title() == "log(sigma)"
    np.testing.assert_allclose(ax.lines[0].get_ydata(), np.log(arr[:, 0, 3]))


def test_mcmc_trace_layout(arr):
    fig = mcmc_trace(arr, ncol=2)
    assert len(fig.axes) == 6
    width, height = fig.get_size_inches()
    assert width == pytest.approx(8.0)
    assert height == pytest.approx(2.6 * 3)
    with pytest.raises(ValueError, match="ncol"):
        mcmc_trace(arr, ncol=0)


def test_mcmc_trace_unknown_pars(arr, params):
    with pytest.raises(KeyError, match="don't match"):
        mcmc_trace(as_draws(arr, params), pars="tau")
    with pytest.raises(KeyError, match="regex_pars"):
        mcmc_trace(as_draws(arr, params), regex_pars="^tau")
