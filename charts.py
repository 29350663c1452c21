from __future__ import annotations

import logging
from io import BytesIO
from typing import TYPE_CHECKING, Sequence

from matplotlib.figure import Figure

if TYPE_CHECKING:
    from expense_view import AggregatedCategoryTotal


logger = logging.getLogger(__name__)

ACTIVE_COLOR = "#1D4ED8"


class ChartError(ValueError):
    """Raised when a chart cannot be rendered."""


def pie_slices(
    totals: Sequence["AggregatedCategoryTotal"], active_index: int | None = None
) -> list[tuple["AggregatedCategoryTotal", str]]:
    """Positive totals with their fill color; ``active_index`` refers to ``totals``."""
    return [
        (t, ACTIVE_COLOR if index == active_index else t.color)
        for index, t in enumerate(totals)
        if t.amount > 0
    ]


def render_pie_chart(
    totals: Sequence["AggregatedCategoryTotal"],
    title: str = "Expense Breakdown",
    active_index: int | None = 0,
    figsize: tuple[float, float] = (10, 8),
    dpi: int = 100,
) -> bytes:
    """
    Draws the category totals as a pie chart and returns PNG bytes.

    An empty or all-zero set of totals gives a chart with no slices.
    """
    figure = Figure(figsize=figsize, dpi=dpi)
    ax = figure.add_subplot()
    ax.set_title(title)

    slices = pie_slices(totals, active_index)
    if slices:
        ax.pie(
            [float(t.amount) for t, _ in slices],
            labels=[f"{t.name}: {t.amount}" for t, _ in slices],
            colors=[color for _, color in slices],
            startangle=90,
        )
        ax.legend(loc="lower right")
        ax.axis("equal")
    else:
        ax.axis("off")

    buffer = BytesIO()
    try:
        figure.savefig(buffer, format="png", bbox_inches="tight")
    except (ValueError, RuntimeError) as e:
        raise ChartError(f"Failed to render chart: {e!s}") from e
    logger.debug("Rendered pie chart with %d slices", len(slices))
    return buffer.getvalue()
