"""
Reporting and Visualization Module

Creates the practice dashboard charts from a dashboard dataset:
grouped earnings bars per disease area and the prevalence comparison.
"""

import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns
from loguru import logger

from config.config import DATA_OUTPUTS_DIR
from src.reporting.dashboard_data_builder import CHART_SERIES, DashboardDataBuilder
from src.utils.value_parsing import format_currency


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", text.lower()).strip("_")


class ReportGenerator:
    """
    Generates PNG charts for one practice's earnings dashboard.
    """

    def __init__(self, output_dir: Optional[Path] = None):
        """Initialize the report generator."""
        self.output_dir = Path(output_dir or DATA_OUTPUTS_DIR) / "figures"
        self.output_dir.mkdir(parents=True, exist_ok=True)

        sns.set_style("whitegrid")
        plt.rcParams['figure.figsize'] = (10, 6)
        plt.rcParams['font.size'] = 11

        logger.info("Initialized Report Generator")

    def plot_disease_area(
        self,
        area: Dict[str, Any],
        prevalence_label: str = "Prevalence",
        save_path: Optional[Path] = None,
    ) -> Path:
        """
        Create a grouped bar chart for one disease area.

        Args:
            area: One entry of the dataset's ``diseaseAreas`` list
            prevalence_label: Legend label for the prevalence series
            save_path: Path to save figure

        Returns:
            Path of the saved figure
        """
        if save_path is None:
            save_path = self.output_dir / f"earnings_{_slug(area['key'])}.png"

        chart_df = pd.DataFrame(area['chartData'])
        long_df = chart_df.melt(
            id_vars='name', value_vars=CHART_SERIES, var_name='series', value_name='earnings'
        )

        palette = dict(DashboardDataBuilder.SERIES_COLORS)

        fig, ax = plt.subplots(figsize=(10, 6))
        sns.barplot(
            data=long_df, x='name', y='earnings', hue='series',
            hue_order=CHART_SERIES, palette=palette, edgecolor='black', ax=ax,
        )

        handles, labels = ax.get_legend_handles_labels()
        labels = [prevalence_label if label == 'Prevalence' else label for label in labels]
        ax.legend(handles, labels, loc='upper right')

        ax.set_xlabel('')
        ax.set_ylabel('Earnings', fontsize=12, fontweight='bold')
        ax.set_title(area['title'], fontsize=14, fontweight='bold', pad=20)
        ax.set_ylim(bottom=0)
        ax.yaxis.set_major_formatter(plt.FuncFormatter(lambda x, p: format_currency(x)))

        plt.tight_layout()
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        plt.close(fig)

        logger.info(f"Saved {area['key']} earnings chart to: {save_path}")
        return save_path

    def plot_all_disease_areas(self, dataset: Dict[str, Any]) -> List[Path]:
        """Create one chart per disease area in the dataset."""
        label = dataset.get('prevalenceControl', {}).get('label', 'Prevalence')
        return [
            self.plot_disease_area(area, prevalence_label=label)
            for area in dataset.get('diseaseAreas', [])
        ]

    def plot_prevalence_comparison(
        self,
        rows: List[Dict[str, Any]],
        save_path: Optional[Path] = None,
    ) -> Path:
        """
        Create the practice vs Sub-ICB vs national prevalence chart.

        Args:
            rows: The dataset's ``prevalenceComparisonData``
            save_path: Path to save figure
        """
        if save_path is None:
            save_path = self.output_dir / "prevalence_comparison.png"

        long_df = pd.DataFrame(rows).melt(
            id_vars='name', value_vars=['Practice', 'SubICB', 'National'],
            var_name='level', value_name='prevalence',
        )
        long_df['level'] = long_df['level'].map({
            'Practice': 'Your Practice',
            'SubICB': 'Sub ICB Average',
            'National': 'National Average',
        })

        palette = {
            'Your Practice': DashboardDataBuilder.PREVALENCE_COLORS['Practice'],
            'Sub ICB Average': DashboardDataBuilder.PREVALENCE_COLORS['SubICB'],
            'National Average': DashboardDataBuilder.PREVALENCE_COLORS['National'],
        }

        fig, ax = plt.subplots(figsize=(12, 6))
        sns.barplot(data=long_df, x='name', y='prevalence', hue='level', palette=palette, ax=ax)

        ax.set_xlabel('')
        ax.set_ylabel('Prevalence %', fontsize=12, fontweight='bold')
        ax.set_title('Disease Prevalence Comparison', fontsize=14, fontweight='bold', pad=20)
        ax.yaxis.set_major_formatter(plt.FuncFormatter(lambda x, p: f'{x:.0f}%'))
        ax.legend(title=None, loc='upper right')

        plt.tight_layout()
        fig.savefig(save_path, dpi=150, bbox_inches='tight')
        plt.close(fig)

        logger.info(f"Saved prevalence comparison to: {save_path}")
        return save_path
