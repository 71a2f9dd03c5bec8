import arviz as az
import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest

from mcmc_viz.logger import logger, set_level

set_level("DEBUG")

PARAMS = ["(Intercept)", "beta[1]", "beta[2]", "sigma", "x:1", "x:2"]
N_ITER = 100
N_CHAIN = 4


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during a test."""
    messages = []
    handler_id = logger.add(
        lambda msg: messages.append(msg.record["message"]), level="DEBUG"
    )
    yield messages
    logger.remove(handler_id)


@pytest.fixture(scope="session")
def arr():
    rng = np.random.default_rng(42)
    values = rng.normal(size=(N_ITER, N_CHAIN, len(PARAMS)))
    values[:, :, 3] = np.abs(values[:, :, 3]) + 0.5
    return values


@pytest.fixture(scope="session")
def arr1chain(arr):
    return arr[:, :1, :]


@pytest.fixture(scope="session")
def mat(arr):
    return arr[:, 0, :]


@pytest.fixture(scope="session")
def dframe(arr):
    return pd.DataFrame(arr[:, 0, :], columns=PARAMS)


@pytest.fixture(scope="session")
def dframe_multiple_chains(arr):
    frames = [
        pd.DataFrame(arr[:, c, :], columns=PARAMS).assign(chain=c + 1)
        for c in range(N_CHAIN)
    ]
    return pd.concat(frames, ignore_index=True)


@pytest.fixture(scope="session")
def chainlist(arr):
    return [pd.DataFrame(arr[:, c, :], columns=PARAMS) for c in range(N_CHAIN)]


@pytest.fixture(scope="session")
def arr1(arr):
    return arr[:, :, :1]


@pytest.fixture(scope="session")
def mat1(arr):
    return arr[:, 0, :1]


@pytest.fixture(scope="session")
def dframe1(dframe):
    return dframe[[PARAMS[0]]]


@pytest.fixture(scope="session")
def chainlist1(chainlist):
    return [chain[[PARAMS[0]]] for chain in chainlist]


@pytest.fixture
def params():
    return list(PARAMS)


def _make_nuts_idata(n_chain=4, n_draw=100, n_divergent=3):
    rng = np.random.default_rng(3)
    diverging = np.zeros((n_chain, n_draw), dtype=bool)
    diverging[1, :n_divergent] = True
    return az.from_dict(
        posterior={"mu": rng.normal(size=(n_chain, n_draw))},
        sample_stats={
            "diverging": diverging,
            "tree_depth": rng.integers(1, 6, size=(n_chain, n_draw)),
            "step_size": np.full((n_chain, n_draw), 0.1),
            "energy": rng.normal(size=(n_chain, n_draw)),
        },
    )


@pytest.fixture
def make_nuts_idata():
    """Factory for InferenceData with NUTS sample stats; chain 1 diverges."""
    return _make_nuts_idata
