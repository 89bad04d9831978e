"""
Report generation utilities (CSV/Excel/PDF).
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import inch
from reportlab.pdfgen import canvas

from .core.ai_registry import AIRegistry, load_registry
from .core.dedupe import ScanRecord


logger = logging.getLogger(__name__)

DEFAULT_COLUMNS = ("01", "10", "17", "21", "22")
EXPORTS_DIR = Path("exports")

PROVIDER_COLUMN = "Provider"
SCANNED_AT_COLUMN = "Scanned At"


def ensure_exports_dir(exports_dir: Path) -> None:
    exports_dir.mkdir(parents=True, exist_ok=True)


def column_label(code: str, registry: Optional[AIRegistry] = None) -> str:
    """Column heading for an AI, e.g. "Batch/Lot Number (10)"."""
    registry = registry or load_registry()
    return f"{registry.describe(code)} ({code})"


def records_to_dataframe(
    records: Iterable[ScanRecord],
    columns: Sequence[str] = DEFAULT_COLUMNS,
    registry: Optional[AIRegistry] = None,
    include_meta: bool = True,
) -> pd.DataFrame:
    """
    One row per record, one column per selected AI.

    Columns are labelled from the registry descriptions; missing AIs are
    empty strings.
    """
    registry = registry or load_registry()
    labels = [column_label(code, registry) for code in columns]
    rows = []
    for record in records:
        row: Dict[str, str] = {}
        if include_meta:
            row[PROVIDER_COLUMN] = record.provider
            row[SCANNED_AT_COLUMN] = record.scanned_at
        for code, label in zip(columns, labels):
            row[label] = record.get(code)
        rows.append(row)
    order = ([PROVIDER_COLUMN, SCANNED_AT_COLUMN] if include_meta else []) + labels
    return pd.DataFrame(rows, columns=order)


def _export_path(filename: str, exports_dir: Optional[Union[str, Path]]) -> Path:
    directory = Path(exports_dir) if exports_dir else EXPORTS_DIR
    ensure_exports_dir(directory)
    return directory / filename


def export_csv(df: pd.DataFrame, filename: str, exports_dir: Optional[Union[str, Path]] = None) -> Path:
    path = _export_path(filename, exports_dir)
    df.to_csv(path, index=False)
    logger.info("Exported %d rows to %s", len(df), path)
    return path


def export_excel(
    df: pd.DataFrame,
    filename: str,
    exports_dir: Optional[Union[str, Path]] = None,
    sheet_name: str = "Scans",
    metadata: Optional[Dict[str, str]] = None,
) -> Path:
    path = _export_path(filename, exports_dir)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        if metadata:
            meta_df = pd.DataFrame(list(metadata.items()), columns=["Field", "Value"])
            meta_df.to_excel(writer, sheet_name="Metadata", index=False)
        df.to_excel(writer, sheet_name=sheet_name, index=False)
    logger.info("Exported %d rows to %s", len(df), path)
    return path


def _compute_col_widths(df: pd.DataFrame, width: float, weights: Optional[Dict[str, float]] = None) -> List[float]:
    col_names = list(df.columns)
    if not col_names:
        return []
    max_lens = []
    sample = df.head(50)
    for col in col_names:
        max_len = len(str(col))
        for v in sample[col].tolist():
            max_len = max(max_len, len(str(v)) if v is not None else 0)
        weight = 1.0
        if weights and col in weights:
            weight = max(0.2, weights[col])
        max_lens.append(max_len * weight)
    total = sum(max_lens) or 1
    raw = [width * (l / total) for l in max_lens]
    min_w = width * 0.03
    max_w = width * 0.35
    clamped = [min(max(r, min_w), max_w) for r in raw]
    scale = width / sum(clamped)
    return [w * scale for w in clamped]


def _draw_footer(c: canvas.Canvas, page_width: float, footer_left: str) -> None:
    y = 0.35 * inch
    c.setFont("Helvetica-Oblique", 8)
    c.drawString(0.5 * inch, y, footer_left)
    c.drawRightString(page_width - 0.5 * inch, y, f"Page {c.getPageNumber()}")


def _draw_table(
    c: canvas.Canvas,
    df: pd.DataFrame,
    x: float,
    y: float,
    width: float,
    min_y: float,
    page_size: tuple,
    footer_text: str,
    max_chars: int = 40,
) -> float:
    if df.empty:
        c.setFont("Helvetica-Oblique", 9)
        c.drawString(x, y, "No scans recorded.")
        return y - 0.25 * inch

    page_width, page_height = page_size
    col_names = list(df.columns)
    col_widths = _compute_col_widths(df, width)
    row_height = 0.22 * inch

    def draw_row(values, y_pos):
        x_pos = x
        for idx, v in enumerate(values):
            text = str(v) if v is not None else ""
            if len(text) > max_chars:
                text = text[: max(0, max_chars - 3)] + "..."
            c.drawString(x_pos + 2, y_pos, text)
            x_pos += col_widths[idx]

    def draw_header(y_pos):
        c.setFillGray(0.9)
        c.rect(x, y_pos - 0.06 * inch, width, row_height, fill=1, stroke=0)
        c.setFillGray(0)
        c.setFont("Helvetica-Bold", 8.5)
        draw_row(col_names, y_pos)
        c.line(x, y_pos - 0.06 * inch, x + width, y_pos - 0.06 * inch)
        c.setFont("Helvetica", 8.5)

    draw_header(y)
    y -= row_height

    for row_index, (_, row) in enumerate(df.iterrows()):
        if y < min_y:
            _draw_footer(c, page_width, footer_text)
            c.showPage()
            y = page_height - 0.5 * inch
            draw_header(y)
            y -= row_height
        if row_index % 2 == 1:
            c.setFillGray(0.97)
            c.rect(x, y - 0.06 * inch, width, row_height, fill=1, stroke=0)
            c.setFillGray(0)
        draw_row(row.tolist(), y)
        y -= row_height
    return y


def export_pdf(
    report_title: str,
    df: pd.DataFrame,
    filename: str,
    exports_dir: Optional[Union[str, Path]] = None,
    metadata: Optional[Dict[str, str]] = None,
) -> Path:
    path = _export_path(filename, exports_dir)
    page_size = landscape(A4)
    width, height = page_size
    c = canvas.Canvas(str(path), pagesize=page_size)
    x = 0.5 * inch
    y = height - 0.5 * inch

    c.setFont("Helvetica-Bold", 16)
    c.drawString(x, y, report_title)
    y -= 0.35 * inch

    c.setFont("Helvetica", 9.5)
    for key, value in (metadata or {}).items():
        c.drawString(x, y, f"{key}: {value}")
        y -= 0.2 * inch
    y -= 0.1 * inch

    footer = f"{report_title} | Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}"
    _draw_table(c, df, x, y, width - inch, 0.6 * inch, page_size, footer)
    _draw_footer(c, width, footer)
    c.save()
    logger.info("Exported %d rows to %s", len(df), path)
    return path
