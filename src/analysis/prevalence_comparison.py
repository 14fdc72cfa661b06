"""Practice vs Sub-ICB vs national disease prevalence comparison."""

import pandas as pd

from src.acquisition.practice_loader import Record
from src.modeling.qof_schema import PREVALENCE_COMPARISON_ORDER, get_disease_area
from src.utils.value_parsing import parse_percentage

PREVALENCE_COLUMNS = ['name', 'Practice', 'SubICB', 'National']


def build_prevalence_comparison(record: Record) -> pd.DataFrame:
    """
    Build one row per disease area with practice, Sub-ICB and national prevalence.

    Args:
        record: Practice record

    Returns:
        DataFrame with columns ``name``, ``Practice``, ``SubICB``, ``National``
    """
    rows = []
    for key in PREVALENCE_COMPARISON_ORDER:
        area = get_disease_area(key)
        fields = area.prevalence_fields
        rows.append({
            'name': area.chart_name,
            'Practice': parse_percentage(record.get(fields['practice'])),
            'SubICB': parse_percentage(record.get(fields['sub_icb'])),
            'National': parse_percentage(record.get(fields['national'])),
        })

    return pd.DataFrame(rows, columns=PREVALENCE_COLUMNS)
