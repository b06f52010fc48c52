import numpy as np

from permtest.viz import plot_null_distribution


def test_returns_figure_with_legend():
    rng = np.random.default_rng(0)
    null = rng.normal(size=500)
    fig = plot_null_distribution(null, 1.8, 0.75, 0.03)
    ax = fig.axes[0]
    assert ax.get_xlabel() == "Random differences"
    assert ax.get_ylabel() == "Count"
    text = ax.get_legend().get_texts()[0].get_text()
    assert "Effect size: 0.75" in text
    assert "p = 0.030000" in text


def test_saves_to_path(tmp_path):
    out = tmp_path / "plots" / "null.png"
    ret = plot_null_distribution(np.array([0.0, 1.0, np.nan, -1.0]), 0.5, np.nan, 0.4,
                                 output_path=out)
    assert ret is None
    assert out.exists()
