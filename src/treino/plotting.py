"""
Trend chart rendering.

Draws an analytics series as a line chart and writes it to an image file.
"""

import logging
from pathlib import Path

import matplotlib

matplotlib.use('Agg')
import matplotlib.pyplot as plt  # noqa: E402

from .engine.analytics import AnalyticsResult

logger = logging.getLogger(__name__)


def render_series(result: AnalyticsResult, output_path: Path) -> Path:
    """
    Save a line chart of the bucket means.

    Args:
        result: Analytics query result
        output_path: Destination file (PNG by extension)

    Returns:
        Path written
    """
    output_path = Path(output_path)
    labels = [p.label for p in result.series]
    values = [p.value for p in result.series]

    fig, ax = plt.subplots(figsize=(10, 5))
    ax.plot(range(len(values)), values, marker='o', linewidth=2, color='black')
    ax.set_xticks(range(len(labels)))
    ax.set_xticklabels(labels, rotation=45, ha='right')
    ax.set_ylabel('Peso (kg)')
    ax.set_title(f'{result.exercise} - {result.granularity.value} - {result.nav.month_label}')
    ax.grid(True, alpha=0.3)

    if result.metrics is not None:
        ax.axhline(result.metrics.latest, color='gray', linestyle='--', alpha=0.5)

    fig.tight_layout()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=150)
    plt.close(fig)

    logger.info("Chart saved to %s", output_path)
    return output_path
