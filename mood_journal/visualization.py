"""
Visualization functions for journal records.

Provides plotting capabilities using plotly.
"""

import logging
from typing import Dict, Optional, Sequence

try:
    import plotly.graph_objects as go  # type: ignore[import-untyped]

    PLOTLY_AVAILABLE = True
except ImportError:
    PLOTLY_AVAILABLE = False

from mood_journal.models import MoodRecord
from mood_journal.sync.valence import mood_to_valence

logger = logging.getLogger(__name__)


def _write(fig, output_file: Optional[str]) -> None:
    if output_file:
        fig.write_html(output_file)
        logger.info(f"Chart written to {output_file}")


def plot_mood_distribution(
    mood_counts: Dict[str, int], output_file: Optional[str] = None
) -> Optional["go.Figure"]:
    """
    Bar chart of how often each mood was recorded.

    Args:
        mood_counts: Mood label → count (e.g. summarize_records()["mood_counts"]).
        output_file: Optional HTML file to write the chart to.

    Returns:
        The figure, or None if plotly is unavailable.
    """
    if not PLOTLY_AVAILABLE:
        logger.error("Plotly not available. Cannot create plot.")
        return None

    fig = go.Figure(go.Bar(x=list(mood_counts.keys()), y=list(mood_counts.values())))
    fig.update_layout(title="Mood distribution", xaxis_title="Mood", yaxis_title="Records")
    _write(fig, output_file)
    return fig


def plot_mood_timeline(
    records: Sequence[MoodRecord], output_file: Optional[str] = None
) -> Optional["go.Figure"]:
    """
    Scatter of records over time, placed on the valence scale.

    Moods without a known valence sit on the neutral line.

    Args:
        records: Records to plot.
        output_file: Optional HTML file to write the chart to.

    Returns:
        The figure, or None if plotly is unavailable.
    """
    if not PLOTLY_AVAILABLE:
        logger.error("Plotly not available. Cannot create plot.")
        return None

    ordered = sorted(records, key=lambda r: r.event_time)
    fig = go.Figure(
        go.Scatter(
            x=[r.event_time for r in ordered],
            y=[mood_to_valence(r.mood) for r in ordered],
            mode="lines+markers",
            text=[f"{r.mood} · {r.activity or ''}" for r in ordered],
            hoverinfo="x+text",
        )
    )
    fig.update_layout(
        title="Mood over time",
        xaxis_title="Time",
        yaxis_title="Valence",
        yaxis_range=[-1.05, 1.05],
    )
    _write(fig, output_file)
    return fig
