"""Unified configuration for Sales Analytics Core.

This module provides the configuration classes used across the package:
API connection settings, export paths and analytics thresholds.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from sales_core.exceptions import ConfigError

DEFAULT_BASE_URL = "https://api-brigadeiros.onrender.com"
DEFAULT_TIMEOUT = 60.0
DEFAULT_RETRIES = 3

# Seller performance goal, in completed sales.
GOAL_SALES = 25


@dataclass(frozen=True)
class ApiSettings:
    """Connection settings for the sales API.

    Attributes:
        base_url: API root, without trailing slash.
        timeout: Default timeout in seconds for every request.
        retries: Number of retry attempts for idempotent failures.
    """

    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    retries: int = DEFAULT_RETRIES

    @classmethod
    def from_env(cls) -> ApiSettings:
        """Build settings from SALES_API_BASE, SALES_API_TIMEOUT and SALES_API_RETRIES.

        Returns:
            ApiSettings instance.

        Raises:
            ConfigError: If a numeric variable cannot be parsed or is negative.

        Examples:
            >>> settings = ApiSettings.from_env()
            >>> settings.base_url
            'https://api-brigadeiros.onrender.com'
        """
        base_url = os.environ.get("SALES_API_BASE", DEFAULT_BASE_URL).strip().strip('"')
        if not base_url:
            raise ConfigError("SALES_API_BASE must not be empty")

        try:
            timeout = float(os.environ.get("SALES_API_TIMEOUT", DEFAULT_TIMEOUT))
            retries = int(os.environ.get("SALES_API_RETRIES", DEFAULT_RETRIES))
        except ValueError as e:
            raise ConfigError(f"Invalid numeric API setting: {e}") from e

        if timeout <= 0 or retries < 0:
            raise ConfigError(
                f"SALES_API_TIMEOUT must be > 0 and SALES_API_RETRIES >= 0 "
                f"(got timeout={timeout}, retries={retries})"
            )

        return cls(base_url=base_url.rstrip("/"), timeout=timeout, retries=retries)


@dataclass(frozen=True)
class AnalyticsConfig:
    """Thresholds and sizes used by the insight generator and reports.

    Attributes:
        goal_sales: Sales needed for a seller to meet the goal.
        near_goal_min_sales: Lower bound for the "near goal" notice.
        low_ticket_threshold: Average ticket below which upselling is suggested.
        report_top_n: Entries in each report ranking.
        chart_top_sellers: Sellers shown in the seller chart.
        chart_top_items: Items shown in the item chart.
        trend_days: Length of the trailing daily trend window.
    """

    goal_sales: int = GOAL_SALES
    near_goal_min_sales: int = 20
    low_ticket_threshold: float = 10.0
    report_top_n: int = 5
    chart_top_sellers: int = 8
    chart_top_items: int = 5
    trend_days: int = 30

    def __post_init__(self) -> None:
        if self.goal_sales < 1:
            raise ConfigError(f"goal_sales must be >= 1 (got {self.goal_sales})")
        if not 0 <= self.near_goal_min_sales <= self.goal_sales:
            raise ConfigError(
                f"near_goal_min_sales must be between 0 and goal_sales "
                f"(got {self.near_goal_min_sales}, goal {self.goal_sales})"
            )


@dataclass
class ExportPaths:
    """Filesystem locations for exported reports.

    Attributes:
        output_dir: Directory that receives report and CSV files.

    Directory Structure:
        output_dir/
        ├── relatorio_vendas_<YYYY-MM-DD>.txt
        └── vendas_<YYYY-MM-DD>.csv
    """

    output_dir: Path

    @classmethod
    def from_root(cls, output_dir: str | Path) -> ExportPaths:
        """Create ExportPaths from an output directory.

        Examples:
            >>> paths = ExportPaths.from_root("exports")
            >>> paths.output_dir
            PosixPath('exports')
        """
        if isinstance(output_dir, str):
            output_dir = Path(output_dir)
        return cls(output_dir=output_dir)

    def report_file(self, day: date) -> Path:
        """Plain-text report path for the given generation day."""
        return self.output_dir / f"relatorio_vendas_{day.isoformat()}.txt"

    def csv_file(self, day: date) -> Path:
        """CSV export path for the given generation day."""
        return self.output_dir / f"vendas_{day.isoformat()}.csv"

    def ensure_dirs(self) -> None:
        """Create the output directory."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
