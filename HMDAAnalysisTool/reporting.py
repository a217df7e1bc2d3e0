"""
HTML report rendering.

Combines narrative text, finalized summary tables and charts into a single
self-contained HTML document. Matplotlib figures are embedded as base64 PNG
data URIs; plotly figures as inline HTML fragments.
"""

import base64
import io
import logging
from html import escape
from typing import Any, List, Optional

import matplotlib.pyplot as plt
import pandas as pd

logger = logging.getLogger(__name__)

REPORT_CSS = """
    body { font-family: Arial, sans-serif; margin: 40px; }
    h1, h2, h3 { color: #2c3e50; }
    table { border-collapse: collapse; margin: 20px 0; }
    th, td { border: 1px solid #ddd; padding: 6px 10px; text-align: right; }
    th { background-color: #f2f2f2; }
    .summary { background-color: #f8f9fa; padding: 15px; border-radius: 5px; }
    .figure-container { margin: 20px 0; }
"""


def figure_to_base64(fig) -> str:
    """Render a matplotlib Figure to a PNG data URI and close it."""
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=110, bbox_inches="tight",
                facecolor="white", edgecolor="none")
    buf.seek(0)
    encoded = base64.b64encode(buf.read()).decode("ascii")
    buf.close()
    plt.close(fig)
    return f"data:image/png;base64,{encoded}"


class HTMLReport:
    """Sequential builder for the analysis report."""

    def __init__(self, title: str):
        self.title = title
        self._parts: List[str] = []

    def heading(self, text: str, level: int = 2) -> 'HTMLReport':
        self._parts.append(f"<h{level}>{escape(text)}</h{level}>")
        return self

    def paragraph(self, text: str) -> 'HTMLReport':
        self._parts.append(f"<p>{escape(text)}</p>")
        return self

    def summary_box(self, items: dict) -> 'HTMLReport':
        rows = ''.join(
            f"<p><strong>{escape(str(k))}:</strong> {escape(str(v))}</p>" for k, v in items.items()
        )
        self._parts.append(f'<div class="summary">{rows}</div>')
        return self

    def table(self, frame: pd.DataFrame, float_format: str = '{:,.3f}',
              caption: Optional[str] = None) -> 'HTMLReport':
        if frame is None or frame.empty:
            return self
        if caption:
            self._parts.append(f"<h4>{escape(caption)}</h4>")
        self._parts.append(frame.to_html(float_format=float_format.format, border=0))
        return self

    def figure(self, fig: Any, alt: str = "figure") -> 'HTMLReport':
        """Embed a matplotlib or plotly figure; None is skipped."""
        if fig is None:
            return self

        if hasattr(fig, 'savefig'):
            uri = figure_to_base64(fig)
            self._parts.append(
                f'<div class="figure-container">'
                f'<img src="{uri}" alt="{escape(alt)}" style="max-width:100%; height:auto;" />'
                f'</div>'
            )
        elif hasattr(fig, 'to_html'):
            self._parts.append(
                f'<div class="figure-container">'
                f'{fig.to_html(full_html=False, include_plotlyjs="cdn")}'
                f'</div>'
            )
        else:
            logger.warning(f"Cannot embed figure of type {type(fig).__name__}")

        return self

    def render(self) -> str:
        body = '\n'.join(self._parts)
        return (
            "<!DOCTYPE html>\n<html>\n<head>\n"
            f"<meta charset=\"utf-8\">\n<title>{escape(self.title)}</title>\n"
            f"<style>{REPORT_CSS}</style>\n</head>\n<body>\n"
            f"<h1>{escape(self.title)}</h1>\n{body}\n</body>\n</html>\n"
        )
