"""Shared fixtures: a fully populated practice record and CSV datasets."""

from pathlib import Path
import sys

import pandas as pd
import pytest

sys.path.append(str(Path(__file__).parent.parent))

from src.modeling.qof_schema import DISEASE_AREAS

# indicator -> (achievement, 2023/24, 2025/26, full target, potential, +1%, +2%, +3%)
INDICATOR_VALUES = {
    'CHOL003': ("65.5%", "£1,234.50", "£1,300.00", "£2,000.00", "£1,800.00", "£2,100.00", "£2,200.00", "£2,300.00"),
    'CHOL004': ("70%", "£800.00", "£850.00", "£1,000.00", "£950.00", "£1,050.00", "£1,100.00", "£1,150.00"),
    'HYP008': ("58.2%", "£3,000.00", "£3,300.00", "£4,000.00", "£3,600.00", "£4,100.00", "£4,200.00", "£4,300.00"),
    'HYP009': ("61%", "£1,000.00", "£1,100.00", "£1,500.00", "£1,200.00", "£1,550.00", "£1,600.00", "£1,650.00"),
    'STIA014': ("80%", "£400.00", "£420.00", "£500.00", "£450.00", "£510.00", "£520.00", "£530.00"),
    'STIA015': ("75%", "£300.00", "£310.00", "£400.00", "£350.00", "£405.00", "£410.00", "£415.00"),
    'CHD015': ("82%", "£600.00", "£660.00", "£700.00", "£680.00", "£710.00", "£720.00", "£730.00"),
    'CHD016': ("77%", "£200.00", "£220.00", "£300.00", "£250.00", "£305.00", "£310.00", "£315.00"),
    'DM036': ("68%", "£900.00", "£950.00", "£1,200.00", "£1,000.00", "£1,220.00", "£1,240.00", "£1,260.00"),
}

INCREASE_PER_PERCENT = {
    'CHOL003': "£50.00",
    'CHOL004': "25",
}

PREVALENCE_VALUES = {
    'CHOL': ("12.5%", "11.0%", "10.4%"),
    'HYP': ("15.1%", "14.2%", "14.0%"),
    'DM': ("7.9%", "7.5%", "7.6%"),
    'STIA': ("2.1%", "1.9%", "1.8%"),
    'CHD': ("3.2%", "3.0%", "3.1%"),
}


def make_record(code="X12345", name="Ab Medical Centre", postcode="ZZ9 9ZZ", **overrides):
    record = {
        'PRACTICE_CODE': code,
        'PRACTICE_NAME': name,
        'POST_CODE': postcode,
        'ICB_NAME': "NHS Test ICB",
        'ICB_ODS_CODE': "QAB",
        'PCN_NAME': "Test PCN",
        'PCN_ODS_CODE': "U12345",
        'Practice List Size': "10,250",
    }

    for area in DISEASE_AREAS:
        for indicator in area.indicators:
            achievement, e2324, e2526, full, potential, p1, p2, p3 = INDICATOR_VALUES[indicator.indicator_id]
            record[indicator.achievement] = achievement
            record[indicator.earnings_2324] = e2324
            record[indicator.earnings_2526] = e2526
            record[indicator.full_target] = full
            record[indicator.potential] = potential
            record[indicator.prevalence[1]] = p1
            record[indicator.prevalence[2]] = p2
            record[indicator.prevalence[3]] = p3
            if indicator.increase_per_percent:
                record[indicator.increase_per_percent] = INCREASE_PER_PERCENT[indicator.indicator_id]

        practice, sub_icb, national = PREVALENCE_VALUES[area.key]
        record[area.prevalence_fields['practice']] = practice
        record[area.prevalence_fields['sub_icb']] = sub_icb
        record[area.prevalence_fields['national']] = national

    record.update(overrides)
    return record


def write_practice_csv(path: Path, records) -> Path:
    pd.DataFrame(records).to_csv(path, index=False)
    return path


@pytest.fixture
def sample_record():
    return make_record()


@pytest.fixture
def practice_records():
    return [
        make_record(code="X12345", name="Ab Medical Centre", postcode="ZZ9 9ZZ"),
        make_record(code="Y22222", name="Riverside Surgery", postcode="AB1 2CD"),
        make_record(code="Z33333", name="High Street Practice", postcode="M1 1AA"),
    ]


@pytest.fixture
def practice_csv(tmp_path, practice_records):
    return write_practice_csv(tmp_path / "qof_data.csv", practice_records)
