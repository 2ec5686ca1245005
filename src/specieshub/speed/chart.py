"""Plotly bar chart of animal speeds coloured by diet."""

import math

import plotly.graph_objects as go
import plotly.io as pio

from specieshub.speed.dataset import AnimalDatum, Diet

WIDTH = 960
HEIGHT = 500
MARGIN = {"t": 20, "r": 120, "b": 100, "l": 60}

DIET_COLORS = {
    Diet.HERBIVORE: "#66c2a5",
    Diet.OMNIVORE: "#fc8d62",
    Diet.CARNIVORE: "#8da0cb",
}
UNKNOWN_DIET_COLOR = "#bbbbbb"


def _tick_increment(start: float, stop: float, count: int) -> float:
    """Step between 'nice' ticks (1, 2 or 5 times a power of ten)."""
    step = (stop - start) / max(0, count)
    if step <= 0 or not math.isfinite(step):
        return 0.0
    power = math.floor(math.log10(step))
    error = step / 10**power
    if error >= math.sqrt(50):
        factor = 10
    elif error >= math.sqrt(10):
        factor = 5
    elif error >= math.sqrt(2):
        factor = 2
    else:
        factor = 1
    return factor * 10.0**power


def nice_upper_bound(max_value: float, tick_count: int = 10) -> float:
    """Extend ``[0, max_value]`` so the upper end lands on a round tick.

    Repeats until the tick step settles, e.g. 113 becomes 120 and 0.87 becomes 0.9.
    """
    stop = max_value
    previous_step = None
    for _ in range(10):
        step = _tick_increment(0.0, stop, tick_count)
        if step == 0 or step == previous_step:
            break
        stop = round(math.ceil(round(stop / step, 9)) * step, 12)
        previous_step = step
    return stop


def build_speed_figure(data: list[AnimalDatum]) -> go.Figure | None:
    """Build the speed bar chart, or None when there is nothing to draw."""
    if not data:
        return None

    fig = go.Figure()
    for diet, color in DIET_COLORS.items():
        rows = [d for d in data if d.diet is diet]
        fig.add_trace(
            go.Bar(
                x=[d.name for d in rows],
                y=[d.speed for d in rows],
                name=diet.value,
                marker_color=color,
                legendgroup=diet.value,
            )
        )

    unknown = [d for d in data if d.diet is None]
    if unknown:
        fig.add_trace(
            go.Bar(
                x=[d.name for d in unknown],
                y=[d.speed for d in unknown],
                name="unknown",
                marker_color=UNKNOWN_DIET_COLOR,
                showlegend=False,
            )
        )

    upper = nice_upper_bound(max(d.speed for d in data))
    yaxis: dict[str, object] = {"title": {"text": "Average Speed (km/h)"}, "rangemode": "tozero"}
    if upper > 0:
        yaxis["range"] = [0, upper]

    fig.update_layout(
        width=WIDTH,
        height=HEIGHT,
        margin=MARGIN,
        # One trace per diet; overlay keeps every bar centred on its own category
        barmode="overlay",
        bargap=0.1,
        xaxis={
            "type": "category",
            "categoryorder": "array",
            "categoryarray": [d.name for d in data],
            "tickangle": -40,
        },
        yaxis=yaxis,
        legend={"x": 1.02, "y": 1, "xanchor": "left", "yanchor": "top"},
        plot_bgcolor="white",
    )
    return fig


def render_speed_chart_json(data: list[AnimalDatum]) -> str | None:
    """Serialise the chart for Plotly.newPlot in the page, or None for no chart."""
    fig = build_speed_figure(data)
    if fig is None:
        return None
    return pio.to_json(fig)
