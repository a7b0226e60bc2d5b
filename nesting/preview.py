"""
Sheet preview
=============
PNG rendering of a packed sheet with matplotlib (Agg backend, no display).
"""

import logging

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from matplotlib.patches import Polygon as MplPolygon, Rectangle

from core.models import index_parts
from .models import NestResultSheet
from .validation import placed_part_polygon

logger = logging.getLogger(__name__)


def render_sheet_preview(sheet: NestResultSheet, parts, path: str,
                         dpi: int = 100, show_labels: bool = True) -> str:
    """
    Render a packed sheet to PNG.

    Args:
        sheet: Packed sheet
        parts: Part table (list or dict by id)
        path: Output PNG path
        dpi: Output resolution
        show_labels: Print the part id in each outline

    Returns:
        Path of the written file
    """
    lookup = index_parts(parts)
    aspect = sheet.height / sheet.width if sheet.width else 1.0
    fig, ax = plt.subplots(1, 1, figsize=(12, max(2.0, 12 * aspect)))

    ax.set_facecolor('#1a1a1a')
    ax.add_patch(Rectangle((0, 0), sheet.width, sheet.height, facecolor='#2b2b2b',
                           edgecolor='white', linewidth=1.0))

    for placed in sheet.placed_parts:
        part = lookup.get(placed.part_id)
        if part is None:
            continue
        poly = placed_part_polygon(part, placed)
        ax.add_patch(MplPolygon(
            list(poly.exterior.coords),
            closed=True,
            facecolor='#3b82f6',
            edgecolor='white',
            linewidth=0.8,
            alpha=0.8
        ))
        if show_labels:
            c = poly.centroid
            ax.text(c.x, c.y, placed.part_id, color='white', fontsize=7,
                    ha='center', va='center')

    margin = 10
    ax.set_xlim(-margin, sheet.width + margin)
    ax.set_ylim(-margin, sheet.height + margin)
    ax.set_aspect('equal')
    ax.set_title(f"{sheet.sheet_name}  {sheet.width:.0f} x {sheet.height:.0f} mm  "
                 f"used {sheet.used_area:.1f}%  x{sheet.quantity}",
                 color='white', fontsize=11)
    ax.tick_params(colors='white')
    for spine in ax.spines.values():
        spine.set_color('white')

    fig.patch.set_facecolor('#1a1a1a')
    plt.tight_layout()
    plt.savefig(path, dpi=dpi, facecolor='#1a1a1a', edgecolor='none')
    plt.close(fig)
    logger.info(f"Saved: {path}")
    return str(path)
