"""
ReportExporter - JSON and CSV serialization of generated reports.

CSV output is one block per section, separated by a blank line:
- a section title row
- a header row and data rows for tabular parts (lists of records)
- metric/value rows for scalar parts
"""

from __future__ import annotations

import io
import json
import logging
from pathlib import Path
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("json", "csv")


def _serialize_value(value: Any) -> Any:
    """Convert value to a CSV-friendly scalar."""
    if isinstance(value, (list, dict)):
        return json.dumps(value, default=str)
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    if hasattr(value, "isoformat"):  # datetime
        return value.isoformat()
    return value


def _title(key: str) -> str:
    return key.replace("_", " ").title()


def _label(key: str) -> str:
    label = str(key).replace("_", " ")
    return label[:1].upper() + label[1:]


class ReportExporter:
    """
    Serialize ReportGenerator output.

    Example:
        exporter = ReportExporter()
        csv_text = exporter.to_csv(generator.campaign_report("30days"))
        exporter.write(report, "reports/campaigns.json")
    """

    def tables(self, report: dict[str, Any]) -> dict[str, pd.DataFrame]:
        """
        Flatten a report into named DataFrames.

        Lists of records become one table each ("Section / Part" when
        nested); scalar values in a section are gathered into a
        Metric/Value table.
        """
        tables: dict[str, pd.DataFrame] = {}
        for section, data in report.items():
            self._collect(_title(section), data, tables)
        return tables

    def _collect(self, name: str, data: Any, tables: dict[str, pd.DataFrame]) -> None:
        if isinstance(data, list):
            if data and all(isinstance(row, dict) for row in data):
                frame = pd.DataFrame(data)
                tables[name] = frame.apply(lambda col: col.map(_serialize_value))
            elif data:
                tables[name] = pd.DataFrame({"Value": [_serialize_value(v) for v in data]})
            return

        if not isinstance(data, dict):
            tables[name] = pd.DataFrame({"Metric": [name], "Value": [_serialize_value(data)]})
            return

        scalars = {k: v for k, v in data.items() if not isinstance(v, (list, dict))}
        if scalars:
            tables[name] = pd.DataFrame({
                "Metric": [_label(k) for k in scalars],
                "Value": [_serialize_value(v) for v in scalars.values()],
            })
        for key, value in data.items():
            if isinstance(value, (list, dict)):
                self._collect(f"{name} / {_title(key)}", value, tables)

    def to_csv(self, report: dict[str, Any]) -> str:
        """Render a report as sectioned CSV text."""
        buffer = io.StringIO()
        for name, frame in self.tables(report).items():
            buffer.write(f"{name}\n")
            frame.to_csv(buffer, index=False)
            buffer.write("\n")
        return buffer.getvalue()

    def to_json(self, report: dict[str, Any], indent: int | None = 2) -> str:
        """Render a report as JSON text."""
        return json.dumps(report, indent=indent, default=str)

    def write(self, report: dict[str, Any], path: Path | str, fmt: str | None = None) -> Path:
        """
        Write a report to disk.

        Args:
            report: ReportGenerator output
            path: Destination file
            fmt: "json" or "csv" (default: from the file suffix)

        Returns:
            The path written

        Raises:
            ValueError: If the format is not supported
        """
        path = Path(path)
        fmt = (fmt or path.suffix.lstrip(".")).lower()
        if fmt not in EXPORT_FORMATS:
            raise ValueError(f"Unsupported export format: {fmt!r}")

        content = self.to_csv(report) if fmt == "csv" else self.to_json(report)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logger.info(f"Exported report to {path}")
        return path
