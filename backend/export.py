"""
CSV export of an estimate breakdown.

A straight projection of the breakdown: one row per line item, then the
section's Base / Tax / Profit / Section Total rows, then a final Grand Total.
No numbers are computed here that the breakdown does not already expose.
"""

from __future__ import annotations

import csv
import io

from backend.breakdown import SECTION_KEYS, EstimateBreakdown

CSV_COLUMNS = ("Category", "Item", "Description", "Unit", "Quantity", "Unit Price", "Total", "Included")


def _money(value: float) -> str:
    return f"{value:.2f}"


def _summary_row(category: str, item: str, total: float, included: bool) -> dict:
    return {
        "Category": category,
        "Item": item,
        "Description": "",
        "Unit": "",
        "Quantity": "",
        "Unit Price": "",
        "Total": _money(total),
        "Included": "Yes" if included else "No",
    }


def breakdown_to_rows(breakdown: EstimateBreakdown) -> list[dict]:
    rows = []
    for key in SECTION_KEYS:
        section = breakdown.sections[key]
        tp = section.tax_profit
        for row in section.rows:
            rows.append({
                "Category": row.category or section.title,
                "Item": row.name,
                "Description": row.description,
                "Unit": row.unit,
                "Quantity": f"{row.quantity:g}",
                "Unit Price": _money(row.unit_price),
                "Total": _money(row.total),
                "Included": "Yes" if row.enabled else "No",
            })
        rows.append(_summary_row(section.title, "Base", section.base, True))
        rows.append(_summary_row(section.title, f"Tax ({tp.tax_percent:g}%)",
                                 section.tax_amount, tp.tax_enabled))
        rows.append(_summary_row(section.title, f"Profit ({tp.profit_percent:g}%)",
                                 section.profit_amount, tp.profit_enabled))
        rows.append(_summary_row(section.title, "Section Total", section.total, True))
    rows.append(_summary_row("", "Grand Total", breakdown.grand_total, True))
    return rows


def export_csv(breakdown: EstimateBreakdown) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS, lineterminator="\n")
    writer.writeheader()
    writer.writerows(breakdown_to_rows(breakdown))
    return buffer.getvalue()
