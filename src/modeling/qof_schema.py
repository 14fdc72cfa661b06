"""Spreadsheet schema for the QOF CVD practice dataset.

Column labels are matched exactly as published in the source spreadsheet,
including trailing spaces and the positional ``_N`` suffixes that the export
adds to repeated logical column names. Changing the source layout means
bumping ``SCHEMA_VERSION`` and editing the tables below.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

SCHEMA_VERSION = "qof-2025-26-cvd-v1"

PREVALENCE_SCENARIO_LEVELS = (1, 2, 3)

PRACTICE_CODE = "PRACTICE_CODE"
PRACTICE_NAME = "PRACTICE_NAME"
POST_CODE = "POST_CODE"
SEARCHABLE_FIELDS = (PRACTICE_CODE, PRACTICE_NAME, POST_CODE)

PRACTICE_DETAIL_FIELDS = {
    'code': PRACTICE_CODE,
    'name': PRACTICE_NAME,
    'postcode': POST_CODE,
    'icb_name': "ICB_NAME",
    'icb_code': "ICB_ODS_CODE",
    'pcn_name': "PCN_NAME",
    'pcn_code': "PCN_ODS_CODE",
    'list_size': "Practice List Size",
}

STRATEGY_LINEAR = "linear"
STRATEGY_LOOKUP = "lookup"


@dataclass(frozen=True)
class IndicatorFields:
    """Column labels that hold one indicator's figures."""

    indicator_id: str
    achievement: str
    earnings_2324: str
    earnings_2526: str
    full_target: str
    potential: str
    prevalence: Dict[int, str]
    increase_per_percent: Optional[str] = None

    def prevalence_field(self, level: int) -> Optional[str]:
        return self.prevalence.get(level)

    def all_fields(self) -> List[str]:
        labels = [
            self.achievement,
            self.earnings_2324,
            self.earnings_2526,
            self.full_target,
            self.potential,
            *self.prevalence.values(),
        ]
        if self.increase_per_percent:
            labels.append(self.increase_per_percent)
        return labels


@dataclass(frozen=True)
class DiseaseArea:
    """A clinical grouping of one or two indicators."""

    key: str
    title: str
    chart_name: str
    strategy: str
    indicators: Tuple[IndicatorFields, ...]
    prevalence_fields: Dict[str, str] = field(default_factory=dict)


def _indicator(
    indicator_id: str,
    achievement: str,
    earnings_2324: str,
    suffix: str,
    increase_per_percent: Optional[str] = None,
) -> IndicatorFields:
    return IndicatorFields(
        indicator_id=indicator_id,
        achievement=achievement,
        earnings_2324=earnings_2324,
        earnings_2526=f"Earnings in 2025/26 for same achievement{suffix}",
        full_target=f"Total Earnings with full target achievement{suffix}",
        potential=f"Potential Earnings achievable if same outcomes{suffix}",
        prevalence={
            level: (
                f"Total Earnings with {level}% increase in disease prevalence "
                f"& Max achievement{suffix}"
            )
            for level in PREVALENCE_SCENARIO_LEVELS
        },
        increase_per_percent=increase_per_percent,
    )


# Display order matches the dashboard sections.
DISEASE_AREAS: Tuple[DiseaseArea, ...] = (
    DiseaseArea(
        key="CHOL",
        title="Cholesterol Indicators",
        chart_name="Cholesterol",
        strategy=STRATEGY_LINEAR,
        indicators=(
            _indicator(
                "CHOL003", "CHOL003 2023/24 Achievement", "Earnings in 2023/24 CHOL003", "_2",
                increase_per_percent="Earnings increase per 1% prevalence CHOL003",
            ),
            _indicator(
                "CHOL004", "CHOL004 2023/24 Achievement", "Earnings in 2023/24 CHOL003_1", "_3",
                increase_per_percent="Earnings increase per 1% prevalence CHOL004",
            ),
        ),
        prevalence_fields={
            'practice': "CHOL Prevalence",
            'sub_icb': "SUB ICB CHOL Prevalence ",
            'national': "National CHOL Prevalence ",
        },
    ),
    DiseaseArea(
        key="HYP",
        title="Hypertension Indicators",
        chart_name="Hypertension",
        strategy=STRATEGY_LOOKUP,
        indicators=(
            _indicator("HYP008", "HYP008 2023/24 Achievement", "Earnings in 2023/24 HYP008", ""),
            _indicator("HYP009", "HYP009 2023/24 Achievement", "Earnings in 2023/24 HYP008_1", "_1"),
        ),
        prevalence_fields={
            'practice': "HYP Prevalence",
            'sub_icb': "SUB ICB HYP Prevalence",
            'national': "National HYP Prevalence",
        },
    ),
    DiseaseArea(
        key="STIA",
        title="Stroke/TIA Indicators",
        chart_name="Stroke/TIA",
        strategy=STRATEGY_LOOKUP,
        indicators=(
            _indicator("STIA014", "STIA14 2023/24 Achievement", "Earnings in 2023/24 CHOL003_3", "_5"),
            _indicator("STIA015", "STIA15 2023/24 Achievement", "Earnings in 2023/24 CHOL003_4", "_6"),
        ),
        prevalence_fields={
            'practice': "STIA Prevalence",
            'sub_icb': "SUB ICB STIA Prevalence ",
            'national': "National STIA Prevalence ",
        },
    ),
    DiseaseArea(
        key="CHD",
        title="Coronary Heart Disease Indicators",
        chart_name="Coronary Heart Disease",
        strategy=STRATEGY_LOOKUP,
        indicators=(
            _indicator("CHD015", "CHD015 2023/24 Achievement", "Earnings in 2023/24 CHD015", "_7"),
            _indicator("CHD016", "CHD016 2023/24 Achievement", "Earnings in 2023/24 CHD016", "_8"),
        ),
        prevalence_fields={
            'practice': "CHD Prevalence",
            'sub_icb': "SUB ICB CHD Prevalence ",
            'national': "National CHD Prevalence ",
        },
    ),
    DiseaseArea(
        key="DM",
        title="Diabetes Indicator",
        chart_name="Diabetes",
        strategy=STRATEGY_LOOKUP,
        indicators=(
            # The published achievement column is labelled DM033
            _indicator("DM036", "DM033 2023/24 Achievement", "Earnings in 2023/24 CHOL003_2", "_4"),
        ),
        prevalence_fields={
            'practice': "DM Prevalence",
            'sub_icb': "SUB ICB DM Prevalence ",
            'national': "National DM Prevalence ",
        },
    ),
)

# Order of the prevalence comparison chart.
PREVALENCE_COMPARISON_ORDER = ("CHOL", "HYP", "DM", "STIA", "CHD")


def get_disease_area(key: str) -> DiseaseArea:
    """Return the disease area with ``key`` (e.g. ``"CHOL"``)."""
    for area in DISEASE_AREAS:
        if area.key == key:
            return area
    available = ", ".join(area.key for area in DISEASE_AREAS)
    raise KeyError(f"Unknown disease area '{key}'. Available: {available}")


def expected_columns() -> List[str]:
    """Every column label the schema reads, in table order."""
    labels: List[str] = list(PRACTICE_DETAIL_FIELDS.values())
    for area in DISEASE_AREAS:
        for indicator in area.indicators:
            labels.extend(indicator.all_fields())
        labels.extend(area.prevalence_fields.values())
    return labels
