"""Tests for the speed bar chart."""

import json

import pytest

from specieshub.speed.chart import (
    DIET_COLORS,
    HEIGHT,
    UNKNOWN_DIET_COLOR,
    WIDTH,
    build_speed_figure,
    nice_upper_bound,
    render_speed_chart_json,
)
from specieshub.speed.dataset import AnimalDatum, Diet


@pytest.fixture
def animals():
    """Provide a small dataset covering every diet."""
    return [
        AnimalDatum(name="Cheetah", speed=113, diet=Diet.CARNIVORE),
        AnimalDatum(name="Zebra", speed=64, diet=Diet.HERBIVORE),
        AnimalDatum(name="Human", speed=37.5, diet=Diet.OMNIVORE),
        AnimalDatum(name="Lion", speed=80, diet=Diet.CARNIVORE),
    ]


class TestNiceUpperBound:
    """Test the rounded y-axis maximum."""

    @pytest.mark.parametrize(
        "value,expected",
        [(113, 120), (97, 100), (0.87, 0.9), (100, 100), (1234, 1300)],
    )
    def test_rounds_up_to_a_tick(self, value, expected):
        """Should extend the maximum to the next round tick."""
        assert nice_upper_bound(value) == pytest.approx(expected)

    def test_zero_stays_zero(self):
        """Should leave an all-zero domain alone."""
        assert nice_upper_bound(0) == 0


class TestBuildSpeedFigure:
    """Test the plotly figure layout and traces."""

    def test_empty_data_has_no_chart(self):
        """Should render nothing for empty data."""
        assert build_speed_figure([]) is None
        assert render_speed_chart_json([]) is None

    def test_one_trace_per_diet(self, animals):
        """Should colour bars by diet with one legend entry per diet."""
        fig = build_speed_figure(animals)

        traces = {trace.name: trace for trace in fig.data}
        assert set(traces) == {"herbivore", "omnivore", "carnivore"}
        assert traces["carnivore"].marker.color == DIET_COLORS[Diet.CARNIVORE]
        assert list(traces["carnivore"].x) == ["Cheetah", "Lion"]

    def test_layout(self, animals):
        """Should keep CSV order on the x axis and fix the chart geometry."""
        fig = build_speed_figure(animals)

        assert list(fig.layout.xaxis.categoryarray) == ["Cheetah", "Zebra", "Human", "Lion"]
        assert fig.layout.xaxis.tickangle == -40
        assert tuple(fig.layout.yaxis.range) == (0, 120)
        assert (fig.layout.width, fig.layout.height) == (WIDTH, HEIGHT)
        assert fig.layout.margin.r == 120

    def test_unknown_diet_is_grey_without_legend(self, animals):
        """Should draw unknown diets in grey and keep them out of the legend."""
        fig = build_speed_figure([*animals, AnimalDatum(name="Robot", speed=5, diet=None)])

        unknown = [trace for trace in fig.data if trace.name == "unknown"][0]
        assert unknown.marker.color == UNKNOWN_DIET_COLOR
        assert unknown.showlegend is False

    def test_json_is_plotly_figure(self, animals):
        """Should serialise data and layout for Plotly.newPlot."""
        payload = json.loads(render_speed_chart_json(animals))

        assert {"data", "layout"} <= set(payload)
