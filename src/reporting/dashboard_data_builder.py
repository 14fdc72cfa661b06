"""Utilities for exporting dashboard-ready datasets from an earnings projection.

The payload mirrors what the practice dashboard renders:

1. Practice details card (name, ODS code, ICB, PCN, list size)
2. Disease prevalence comparison (practice vs Sub-ICB vs national)
3. One section per disease area: grouped bar chart rows and a table with a
   Total row
4. Total financial summary cards with percent changes
5. Prevalence scenario control state

Nothing here computes earnings; all figures come from the projection.
"""

from pathlib import Path
from typing import Any, Dict, List
import json

from loguru import logger

from config.config import DATA_OUTPUTS_DIR
from src.acquisition.practice_loader import Record
from src.analysis.practice_lookup import summarise_practice
from src.analysis.prevalence_comparison import build_prevalence_comparison
from src.modeling.earnings_projection import (
    DiseaseAreaProjection,
    EarningsProjection,
    IndicatorProjection,
)
from src.utils.serialization import convert_to_json_serializable
from src.utils.value_parsing import format_currency, format_percent_change

SERIES_EARNINGS_2324 = "Earnings 2023/24"
SERIES_EARNINGS_2526 = "Earnings 2025/26"
SERIES_FULL_TARGET = "Full Target"
SERIES_PREVALENCE = "Prevalence"

CHART_SERIES = [
    SERIES_EARNINGS_2324,
    SERIES_EARNINGS_2526,
    SERIES_FULL_TARGET,
    SERIES_PREVALENCE,
]


class DashboardDataBuilder:
    """Builds a JSON payload for one practice's earnings dashboard."""

    SERIES_COLORS = {
        SERIES_EARNINGS_2324: "#3B82F6",
        SERIES_EARNINGS_2526: "#10B981",
        SERIES_FULL_TARGET: "#6366F1",
        SERIES_PREVALENCE: "#F59E0B",
    }

    PREVALENCE_COLORS = {
        "Practice": "#7e22ce",
        "SubICB": "#1d4ed8",
        "National": "#047857",
    }

    def __init__(self, output_dir: Path = DATA_OUTPUTS_DIR):
        self.output_dir = Path(output_dir) / "dashboard"

    def build_dataset(self, record: Record, projection: EarningsProjection) -> Dict[str, Any]:
        """Create a dashboard dataset for a selected practice.

        Args:
            record: The selected practice record
            projection: Projection computed for the record

        Returns:
            Dictionary with the practice card, chart/table rows and summary
        """
        dataset = {
            "schemaVersion": projection.schema_version,
            "practice": summarise_practice(record),
            "prevalenceControl": self._format_prevalence_control(projection),
            "prevalenceComparisonData": self._format_prevalence_comparison(record),
            "diseaseAreas": [
                self._format_disease_area(area, projection.prevalence_level)
                for area in projection.disease_areas
            ],
            "summaryCards": self._format_summary_cards(projection),
        }

        return convert_to_json_serializable(dataset)

    def export(self, dataset: Dict[str, Any], filename: str = "dashboard-data.json") -> Path:
        """Write the dataset as UTF-8 JSON and return its path."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / filename
        path.write_text(json.dumps(dataset, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.info(f"Wrote dashboard dataset to {path}")
        return path

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    @staticmethod
    def _format_prevalence_control(projection: EarningsProjection) -> Dict[str, Any]:
        return {
            "enabled": projection.prevalence_enabled,
            "level": projection.prevalence_level,
            "label": f"{projection.prevalence_level}% Prevalence",
        }

    def _format_prevalence_comparison(self, record: Record) -> List[Dict[str, Any]]:
        comparison = build_prevalence_comparison(record)
        return comparison.to_dict(orient="records")

    @staticmethod
    def visible_indicators(area: DiseaseAreaProjection) -> List[IndicatorProjection]:
        """First indicator always; later ones only when they carry earnings."""
        return [
            item for index, item in enumerate(area.indicators)
            if index == 0 or item.has_data
        ]

    def _format_disease_area(self, area: DiseaseAreaProjection, level: int) -> Dict[str, Any]:
        indicators = self.visible_indicators(area)

        chart_rows = [
            {
                "name": item.indicator_id,
                SERIES_EARNINGS_2324: item.values.earnings_2324,
                SERIES_EARNINGS_2526: item.values.earnings_2526,
                SERIES_FULL_TARGET: item.values.full_target,
                SERIES_PREVALENCE: item.values.prevalence_adjusted,
            }
            for item in indicators
        ]

        table_rows = [self._table_row(item.indicator_id, item.values) for item in indicators]
        table_rows.append(self._table_row("Total", area.totals))

        return {
            "key": area.key,
            "title": area.title,
            "prevalenceStrategy": area.strategy,
            "prevalenceLabel": f"{level}%",
            "chartData": chart_rows,
            "tableRows": table_rows,
            "changeFrom2324": format_percent_change(area.change_2324_to_2526),
            "changeWithPrevalence": format_percent_change(area.change_2526_to_prevalence),
        }

    @staticmethod
    def _table_row(label: str, values) -> Dict[str, str]:
        return {
            "indicator": label,
            "earnings2324": format_currency(values.earnings_2324),
            "earnings2526": format_currency(values.earnings_2526),
            "fullTarget": format_currency(values.full_target),
            "prevalence": format_currency(values.prevalence_adjusted),
        }

    @staticmethod
    def _format_summary_cards(projection: EarningsProjection) -> List[Dict[str, Any]]:
        totals = projection.totals
        changes = projection.percent_changes()

        return [
            {
                "title": "2023/24 Total Earnings",
                "value": totals.earnings_2324,
                "formatted": format_currency(totals.earnings_2324),
                "change": None,
            },
            {
                "title": "2025/26 Base Earnings",
                "value": totals.earnings_2526,
                "formatted": format_currency(totals.earnings_2526),
                "change": f"{format_percent_change(changes['earnings_2324_to_2526'])} change",
            },
            {
                "title": "Full Target Potential",
                "value": totals.full_target,
                "formatted": format_currency(totals.full_target),
                "change": f"{format_percent_change(changes['earnings_2526_to_full_target'])} increase",
            },
            {
                "title": f"With {projection.prevalence_level}% Prevalence",
                "value": totals.prevalence_adjusted,
                "formatted": format_currency(totals.prevalence_adjusted),
                "change": f"{format_percent_change(changes['full_target_to_prevalence'])} increase",
            },
        ]

