"""
Render a practice dashboard dataset as a single self-contained HTML file.

No external JS/CSS so the report opens directly from disk. Chart images,
when given, are referenced relative to the HTML file.
"""

from __future__ import annotations

import os
from html import escape
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger


def build_html_report(
    dataset: Dict[str, Any],
    output_path: Path,
    chart_paths: Optional[Iterable[Path]] = None,
) -> Path:
    """
    Write the HTML report for one practice.

    Args:
        dataset: Output of ``DashboardDataBuilder.build_dataset``
        output_path: Destination HTML file
        chart_paths: Optional PNG charts to embed by relative path

    Returns:
        Path to the generated HTML file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    images = []
    for chart in chart_paths or []:
        images.append(os.path.relpath(Path(chart), output_path.parent))

    output_path.write_text(render_html(dataset, images), encoding="utf-8")
    logger.info(f"Wrote practice HTML report: {output_path}")
    return output_path


def render_html(dataset: Dict[str, Any], images: Optional[List[str]] = None) -> str:
    practice = dataset.get("practice", {})
    name = escape(str(practice.get("name") or "Unknown practice"))

    sections = "\n".join(_render_area(area) for area in dataset.get("diseaseAreas", []))
    cards = "\n".join(_render_card(card) for card in dataset.get("summaryCards", []))
    figures = "\n".join(
        f'<img src="{escape(src)}" alt="chart" />' for src in (images or [])
    )

    return f"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>{name}: QOF CVD earnings</title>
    <style>
      body {{ font-family: system-ui, -apple-system, Segoe UI, Roboto, Helvetica, Arial, sans-serif; margin: 24px; color: #1f2937; }}
      .card {{ background: #f8f3f0; border-radius: 10px; padding: 16px 20px; margin-bottom: 20px; }}
      table {{ border-collapse: collapse; width: 100%; margin-bottom: 8px; }}
      th, td {{ padding: 8px 12px; text-align: center; border-bottom: 1px solid #e5e7eb; }}
      th {{ background: #f9fafb; font-size: 12px; text-transform: uppercase; color: #6b7280; }}
      tr.total td {{ font-weight: 600; background: #f9fafb; }}
      .summary {{ display: grid; grid-template-columns: repeat(4, 1fr); gap: 16px; }}
      .summary .value {{ font-size: 22px; font-weight: 700; }}
      .muted {{ color: #6b7280; font-size: 13px; }}
      img {{ max-width: 100%; margin: 12px 0; }}
    </style>
  </head>
  <body>
    <div class="card">
      <h1>{name}</h1>
      {_render_practice(practice)}
    </div>
    {sections}
    <h2>Total Financial Summary</h2>
    <div class="summary">
      {cards}
    </div>
    {figures}
  </body>
</html>
"""


def _render_practice(practice: Dict[str, Any]) -> str:
    rows = [
        ("Practice Code", practice.get("code")),
        ("ICB", f"{practice.get('icb_name') or ''} ({practice.get('icb_code') or ''})"),
        ("PCN", f"{practice.get('pcn_name') or ''} ({practice.get('pcn_code') or ''})"),
        ("List Size", practice.get("list_size")),
    ]
    return "\n".join(
        f'<p class="muted">{escape(label)}: {escape(str(value if value is not None else ""))}</p>'
        for label, value in rows
    )


def _render_area(area: Dict[str, Any]) -> str:
    body = []
    for row in area.get("tableRows", []):
        css = ' class="total"' if row.get("indicator") == "Total" else ""
        cells = "".join(
            f"<td>{escape(str(row.get(key, '')))}</td>"
            for key in ("indicator", "earnings2324", "earnings2526", "fullTarget", "prevalence")
        )
        body.append(f"<tr{css}>{cells}</tr>")

    return f"""<section>
      <h2>{escape(area.get('title', ''))}</h2>
      <table>
        <thead><tr><th>Indicator</th><th>23/24</th><th>25/26</th><th>Target</th><th>{escape(area.get('prevalenceLabel', ''))}</th></tr></thead>
        <tbody>{''.join(body)}</tbody>
      </table>
      <p class="muted">2023/24 to 2025/26: {escape(str(area.get('changeFrom2324', 'N/A')))}</p>
    </section>"""


def _render_card(card: Dict[str, Any]) -> str:
    change = card.get("change")
    change_html = f'<div class="muted">{escape(change)}</div>' if change else ""
    return f"""<div class="card">
        <div class="muted">{escape(str(card.get('title', '')))}</div>
        <div class="value">{escape(str(card.get('formatted', '')))}</div>
        {change_html}
      </div>"""
