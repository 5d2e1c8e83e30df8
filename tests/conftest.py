import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pytest

from fluidbed_figures.datasets import synthetic_step_response


@pytest.fixture
def step_run():
    """Synthetic measured/simulated pair with a 0.2 m bed height offset."""
    return synthetic_step_response(duration=300.0, bed_height=0.2)


@pytest.fixture
def inset_image(tmp_path):
    path = tmp_path / "inset.png"
    plt.imsave(path, np.linspace(0, 1, 64 * 64).reshape(64, 64), cmap="gray")
    return path


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")
