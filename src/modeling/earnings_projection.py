"""
Earnings Projection Engine

Maps one practice record and a prevalence scenario level to per-indicator,
per-disease-area and overall QOF earnings:

- 2023/24 actual earnings
- 2025/26 projected earnings at the same achievement
- 2025/26 earnings at full target achievement
- 2025/26 earnings with a 1-3% increase in disease prevalence

Two prevalence mechanisms coexist. Cholesterol extrapolates linearly from a
per-percent earnings delta; every other disease area reads the precomputed
scenario column for the selected level.

Missing or malformed fields read as 0 so a projection is always produced.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from loguru import logger

from src.modeling.qof_schema import (
    DISEASE_AREAS,
    PRACTICE_CODE,
    PRACTICE_NAME,
    PREVALENCE_SCENARIO_LEVELS,
    SCHEMA_VERSION,
    STRATEGY_LINEAR,
    STRATEGY_LOOKUP,
    DiseaseArea,
    IndicatorFields,
)
from src.utils.value_parsing import (
    format_currency,
    is_missing,
    parse_currency,
    parse_percentage,
    percent_change,
)

VALID_PREVALENCE_LEVELS = (0,) + PREVALENCE_SCENARIO_LEVELS

MONETARY_FIELDS = (
    'earnings_2324',
    'earnings_2526',
    'full_target',
    'potential',
    'prevalence_adjusted',
)


# =============================================================================
# PREVALENCE STRATEGIES
# =============================================================================

class PrevalenceStrategy:
    """Computes an indicator's earnings under a prevalence scenario."""

    name = "base"

    def adjusted_earnings(
        self,
        indicator: IndicatorFields,
        record: Mapping[str, Any],
        level: int,
        earnings_2526: float,
    ) -> float:
        raise NotImplementedError


class LinearPrevalenceStrategy(PrevalenceStrategy):
    """``earnings_2526 + level * increase_per_percent`` (cholesterol)."""

    name = STRATEGY_LINEAR

    def adjusted_earnings(self, indicator, record, level, earnings_2526):
        per_percent = 0.0
        if indicator.increase_per_percent:
            per_percent = parse_currency(record.get(indicator.increase_per_percent))
        return earnings_2526 + level * per_percent


class LookupPrevalenceStrategy(PrevalenceStrategy):
    """Reads the precomputed ``prevalence{level}`` column; level 0 has none."""

    name = STRATEGY_LOOKUP

    def adjusted_earnings(self, indicator, record, level, earnings_2526):
        label = indicator.prevalence_field(level)
        if label is None:
            return 0.0
        return parse_currency(record.get(label))


PREVALENCE_STRATEGIES: Dict[str, PrevalenceStrategy] = {
    STRATEGY_LINEAR: LinearPrevalenceStrategy(),
    STRATEGY_LOOKUP: LookupPrevalenceStrategy(),
}


# =============================================================================
# PROJECTION RESULTS
# =============================================================================

@dataclass
class EarningsTotals:
    earnings_2324: float = 0.0
    earnings_2526: float = 0.0
    full_target: float = 0.0
    potential: float = 0.0
    prevalence_adjusted: float = 0.0

    def add(self, other: "EarningsTotals") -> None:
        for name in MONETARY_FIELDS:
            setattr(self, name, getattr(self, name) + getattr(other, name))

    @classmethod
    def sum_of(cls, items: Iterable["EarningsTotals"]) -> "EarningsTotals":
        totals = cls()
        for item in items:
            totals.add(item)
        return totals

    def as_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in MONETARY_FIELDS}

    def formatted(self) -> Dict[str, str]:
        return {name: format_currency(getattr(self, name)) for name in MONETARY_FIELDS}


@dataclass
class IndicatorProjection:
    indicator_id: str
    disease_area: str
    achievement_pct: float
    values: EarningsTotals
    prevalence_scenarios: Dict[int, float]
    increase_per_percent: float
    has_data: bool

    @property
    def change_2324_to_2526(self) -> float:
        return percent_change(self.values.earnings_2526, self.values.earnings_2324)

    @property
    def change_2526_to_prevalence(self) -> float:
        return percent_change(self.values.prevalence_adjusted, self.values.earnings_2526)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'indicator_id': self.indicator_id,
            'disease_area': self.disease_area,
            'achievement_pct': self.achievement_pct,
            **self.values.as_dict(),
            'formatted': self.values.formatted(),
            'prevalence_scenarios': {
                str(level): value for level, value in self.prevalence_scenarios.items()
            },
            'increase_per_percent': self.increase_per_percent,
            'change_2324_to_2526_pct': self.change_2324_to_2526,
            'change_2526_to_prevalence_pct': self.change_2526_to_prevalence,
            'has_data': self.has_data,
        }


@dataclass
class DiseaseAreaProjection:
    key: str
    title: str
    strategy: str
    indicators: List[IndicatorProjection]
    totals: EarningsTotals

    @property
    def change_2324_to_2526(self) -> float:
        return percent_change(self.totals.earnings_2526, self.totals.earnings_2324)

    @property
    def change_2526_to_prevalence(self) -> float:
        return percent_change(self.totals.prevalence_adjusted, self.totals.earnings_2526)

    def indicator(self, indicator_id: str) -> IndicatorProjection:
        for item in self.indicators:
            if item.indicator_id == indicator_id:
                return item
        raise KeyError(f"Indicator {indicator_id} not in disease area {self.key}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'title': self.title,
            'prevalence_strategy': self.strategy,
            'indicators': [item.to_dict() for item in self.indicators],
            'totals': self.totals.as_dict(),
            'formatted_totals': self.totals.formatted(),
            'change_2324_to_2526_pct': self.change_2324_to_2526,
            'change_2526_to_prevalence_pct': self.change_2526_to_prevalence,
        }


@dataclass
class EarningsProjection:
    practice_code: Optional[str]
    practice_name: Optional[str]
    prevalence_level: int
    disease_areas: List[DiseaseAreaProjection]
    totals: EarningsTotals
    schema_version: str = SCHEMA_VERSION
    missing_fields: List[str] = field(default_factory=list)

    @property
    def prevalence_enabled(self) -> bool:
        return self.prevalence_level > 0

    def area(self, key: str) -> DiseaseAreaProjection:
        for item in self.disease_areas:
            if item.key == key:
                return item
        raise KeyError(f"Disease area {key} not in projection")

    def percent_changes(self) -> Dict[str, float]:
        """Headline changes used by the summary cards."""
        totals = self.totals
        return {
            'earnings_2324_to_2526': percent_change(totals.earnings_2526, totals.earnings_2324),
            'earnings_2526_to_full_target': percent_change(totals.full_target, totals.earnings_2526),
            'full_target_to_prevalence': percent_change(totals.prevalence_adjusted, totals.full_target),
            'earnings_2526_to_prevalence': percent_change(totals.prevalence_adjusted, totals.earnings_2526),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'practice_code': self.practice_code,
            'practice_name': self.practice_name,
            'prevalence_level': self.prevalence_level,
            'prevalence_enabled': self.prevalence_enabled,
            'schema_version': self.schema_version,
            'disease_areas': [area.to_dict() for area in self.disease_areas],
            'totals': self.totals.as_dict(),
            'formatted_totals': self.totals.formatted(),
            'percent_changes': self.percent_changes(),
        }


# =============================================================================
# ENGINE
# =============================================================================

def validate_prevalence_level(level: Any, allowed: Iterable[int] = VALID_PREVALENCE_LEVELS) -> int:
    """Return ``level`` as an int, raising ValueError unless it is one of ``allowed``."""
    if isinstance(level, str) and level.strip().isdigit():
        value = int(level)
    elif isinstance(level, int) and not isinstance(level, bool):
        value = level
    else:
        raise ValueError(f"Invalid prevalence level: {level!r}")

    allowed = [option for option in allowed if option in VALID_PREVALENCE_LEVELS]
    if value not in allowed:
        raise ValueError(
            f"Prevalence level must be one of {allowed}, got {value}"
        )
    return value


class EarningsProjectionEngine:
    """Computes :class:`EarningsProjection` objects from practice records."""

    def __init__(
        self,
        disease_areas: Iterable[DiseaseArea] = DISEASE_AREAS,
        strategies: Optional[Mapping[str, PrevalenceStrategy]] = None,
    ):
        self.disease_areas = tuple(disease_areas)
        self.strategies = dict(strategies or PREVALENCE_STRATEGIES)

    def project(self, record: Mapping[str, Any], prevalence_level: Any = 1) -> EarningsProjection:
        """
        Project earnings for one practice.

        Args:
            record: Practice record keyed by spreadsheet column label
            prevalence_level: 0 (scenario off), 1, 2 or 3

        Returns:
            EarningsProjection with indicator, disease area and grand totals
        """
        level = validate_prevalence_level(prevalence_level)
        missing: List[str] = []

        areas = [
            self._project_area(record, area, level, missing)
            for area in self.disease_areas
        ]
        grand_totals = self._grand_totals(record, areas)

        if missing:
            logger.debug(
                f"{len(missing)} fields missing for practice {record.get(PRACTICE_CODE)}; read as 0"
            )

        return EarningsProjection(
            practice_code=record.get(PRACTICE_CODE),
            practice_name=record.get(PRACTICE_NAME),
            prevalence_level=level,
            disease_areas=areas,
            totals=grand_totals,
            missing_fields=missing,
        )

    def _grand_totals(
        self,
        record: Mapping[str, Any],
        areas: List[DiseaseAreaProjection],
    ) -> EarningsTotals:
        """
        Sum every area's first indicator, plus later indicators that report
        2023/24 earnings.

        Area totals still include every indicator; only the practice-wide
        figures skip a later indicator whose 2023/24 cell is blank.
        """
        counted = []
        for schema_area, area in zip(self.disease_areas, areas):
            for index, (fields, item) in enumerate(zip(schema_area.indicators, area.indicators)):
                if index == 0 or not is_missing(record.get(fields.earnings_2324)):
                    counted.append(item.values)
        return EarningsTotals.sum_of(counted)

    def _project_area(
        self,
        record: Mapping[str, Any],
        area: DiseaseArea,
        level: int,
        missing: List[str],
    ) -> DiseaseAreaProjection:
        try:
            strategy = self.strategies[area.strategy]
        except KeyError as exc:
            raise ValueError(
                f"No prevalence strategy '{area.strategy}' for disease area {area.key}"
            ) from exc

        indicators = [
            self._project_indicator(record, area, indicator, level, strategy, missing)
            for indicator in area.indicators
        ]

        return DiseaseAreaProjection(
            key=area.key,
            title=area.title,
            strategy=strategy.name,
            indicators=indicators,
            totals=EarningsTotals.sum_of(item.values for item in indicators),
        )

    def _project_indicator(
        self,
        record: Mapping[str, Any],
        area: DiseaseArea,
        indicator: IndicatorFields,
        level: int,
        strategy: PrevalenceStrategy,
        missing: List[str],
    ) -> IndicatorProjection:
        missing.extend(label for label in indicator.all_fields() if is_missing(record.get(label)))

        earnings_2526 = parse_currency(record.get(indicator.earnings_2526))
        values = EarningsTotals(
            earnings_2324=parse_currency(record.get(indicator.earnings_2324)),
            earnings_2526=earnings_2526,
            full_target=parse_currency(record.get(indicator.full_target)),
            potential=parse_currency(record.get(indicator.potential)),
            prevalence_adjusted=strategy.adjusted_earnings(indicator, record, level, earnings_2526),
        )

        increase = 0.0
        if indicator.increase_per_percent:
            increase = parse_currency(record.get(indicator.increase_per_percent))

        return IndicatorProjection(
            indicator_id=indicator.indicator_id,
            disease_area=area.key,
            achievement_pct=parse_percentage(record.get(indicator.achievement)),
            values=values,
            prevalence_scenarios={
                scenario: parse_currency(record.get(label))
                for scenario, label in indicator.prevalence.items()
            },
            increase_per_percent=increase,
            has_data=not (
                is_missing(record.get(indicator.earnings_2324))
                and is_missing(record.get(indicator.earnings_2526))
            ),
        )


def project_earnings(record: Mapping[str, Any], prevalence_level: Any = 1) -> EarningsProjection:
    """Convenience wrapper around :meth:`EarningsProjectionEngine.project`."""
    return EarningsProjectionEngine().project(record, prevalence_level)
