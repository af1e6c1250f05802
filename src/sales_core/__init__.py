"""Sales Analytics Core - aggregation engine for a small sales business.

This package turns sale, seller and item records into the figures a sales
dashboard shows:

- **Filtering**: narrow sales by seller, item and date, ordered by time
- **Aggregation**: summaries, daily trends and hour-of-day distribution
- **Rankings**: Top-N sellers and items
- **Insights**: weekly growth, peak hour, goal progress and recommendations
- **Exports**: plain-text report and CSV transactions

Module Structure:
    sales_core.models: Item, Seller, Sale, SaleFilter, Summary records
    sales_core.filters: apply_filter
    sales_core.summary: summarize
    sales_core.trends: daily_trend, hourly_distribution
    sales_core.rankings: rank_sellers, rank_items
    sales_core.insights: generate_insights
    sales_core.report: build_report_text, build_sales_csv, exports
    sales_core.client: SalesApiClient for the sales API
    sales_core.refresh: SalesRefresher (batched, generation-guarded refresh)

Quick Start:
    >>> from datetime import datetime
    >>> from sales_core import SalesApiClient, SaleFilter, generate_insights
    >>>
    >>> client = SalesApiClient()
    >>> sales = client.list_sales(SaleFilter(start_date="2025-01-01", end_date="2025-01-31"))
    >>> insights = generate_insights(sales, client.list_sellers(), client.list_items(), datetime.now())
    >>> print(insights.weekly_growth.growth_pct)
"""

__version__ = "0.1.0"

from sales_core.client import SalesApiClient
from sales_core.config import AnalyticsConfig, ApiSettings, ExportPaths
from sales_core.exceptions import (
    ApiError,
    AuthenticationError,
    ConfigError,
    DataQualityError,
    EmptyExportError,
    ExportError,
    FetchError,
    SalesCoreError,
)
from sales_core.filters import apply_filter
from sales_core.insights import generate_insights
from sales_core.models import Bucket, Item, Sale, SaleFilter, Seller, Summary
from sales_core.rankings import best_item, best_seller, rank_items, rank_sellers
from sales_core.refresh import SalesRefresher
from sales_core.report import build_report_text, build_sales_csv
from sales_core.summary import summarize
from sales_core.trends import daily_trend, hourly_distribution

__all__ = [
    "AnalyticsConfig",
    "ApiError",
    "ApiSettings",
    "AuthenticationError",
    "Bucket",
    "ConfigError",
    "DataQualityError",
    "EmptyExportError",
    "ExportError",
    "ExportPaths",
    "FetchError",
    "Item",
    "Sale",
    "SaleFilter",
    "SalesApiClient",
    "SalesCoreError",
    "SalesRefresher",
    "Seller",
    "Summary",
    "__version__",
    "apply_filter",
    "best_item",
    "best_seller",
    "build_report_text",
    "build_sales_csv",
    "daily_trend",
    "generate_insights",
    "hourly_distribution",
    "rank_items",
    "rank_sellers",
    "summarize",
]
