"""Tests for series summaries and plots."""

from chaos.report import SeriesSummary, render_plot, save_plot, summarize

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


class TestSummarize:
    """Tests for summarize() and SeriesSummary."""

    def test_min_max(self):
        summary = summarize([3.0, 1.0, 2.0])
        assert (summary.count, summary.minimum, summary.maximum) == (3, 1.0, 3.0)
        assert not summary.flat
        assert summary.describe() == "min is 1.0 and max is 3.0"

    def test_flat_series(self):
        summary = summarize([2.0, 2.0])
        assert summary.flat
        assert summary.describe() == "min and max are equal: 2.0"

    def test_empty_series(self):
        summary = summarize([])
        assert summary.count == 0
        assert summary.flat

    def test_to_dict(self):
        assert SeriesSummary(2, 0.5, 1.5).to_dict() == {"count": 2, "min": 0.5, "max": 1.5, "flat": False}


class TestPlots:
    """Tests for render_plot() and save_plot()."""

    def test_render_plot_png(self):
        png = render_plot([0.0, 0.5, 0.2], title="trace", ylabel="distance")
        assert png.startswith(PNG_MAGIC)

    def test_render_with_x(self):
        assert render_plot([1.0, 2.0], x=[0.1, 0.2]).startswith(PNG_MAGIC)

    def test_save_plot_creates_directories(self, tmp_path):
        path = tmp_path / "nested" / "plot.png"
        assert save_plot([1.0, 2.0, 4.0], str(path), title="bn") == str(path)
        assert path.read_bytes().startswith(PNG_MAGIC)
