"""Summaries and line plots of result series (per-event distances, per-trial critical times)."""

import io
import os

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure


class SeriesSummary:
    __slots__ = ("count", "minimum", "maximum")

    def __init__(self, count, minimum, maximum):
        self.count = count
        self.minimum = minimum
        self.maximum = maximum

    @property
    def flat(self):
        return self.maximum - self.minimum == 0.0

    def to_dict(self):
        return {"count": self.count, "min": self.minimum, "max": self.maximum, "flat": self.flat}

    def describe(self):
        if self.flat:
            return f"min and max are equal: {self.minimum}"
        return f"min is {self.minimum} and max is {self.maximum}"


def summarize(values):
    values = list(values)
    if not values:
        return SeriesSummary(0, 0.0, 0.0)
    return SeriesSummary(len(values), min(values), max(values))


def render_plot(values, title="", xlabel="index", ylabel="value", x=None):
    """PNG bytes of ``values`` drawn as a line against their index (or ``x``)."""
    values = list(values)
    fig = Figure(figsize=(6, 6))
    FigureCanvasAgg(fig)
    ax = fig.add_subplot(111)
    ax.plot(list(x) if x is not None else range(len(values)), values, color="C0", linewidth=1.0)
    if title:
        ax.set_title(title, fontsize=12)
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    ax.grid(True, linestyle="--", alpha=0.5)
    fig.tight_layout()

    buffer = io.BytesIO()
    fig.savefig(buffer, format="png", dpi=100)
    return buffer.getvalue()


def save_plot(values, path, **kwargs):
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "wb") as file:
        file.write(render_plot(values, **kwargs))
    return path
