"""CLI wrapper for sales reports, CSV exports and insights.

This module provides a command-line interface over the sales API.
All analytics logic lives in the engine modules; this file only wires the
client, the refresher and the exporters together.

Environment:
  SALES_API_BASE, SALES_API_TIMEOUT, SALES_API_RETRIES: see ApiSettings.
  SALES_API_EMAIL, SALES_API_PASSWORD: credentials (optional for open APIs).
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from datetime import datetime
from typing import Optional, Sequence

from sales_core.client import SalesApiClient
from sales_core.config import AnalyticsConfig, ApiSettings, ExportPaths
from sales_core.exceptions import EmptyExportError, FetchError, SalesCoreError
from sales_core.formatters import format_brl, format_day_month, format_hour, format_percent
from sales_core.insights import Insights, generate_insights
from sales_core.models import Bucket, SaleFilter, parse_day
from sales_core.rankings import (
    ItemPerformance,
    SellerPerformance,
    rank_items,
    rank_sellers_by_revenue,
)
from sales_core.refresh import AnalyticsSnapshot, SalesRefresher
from sales_core.report import export_report, export_sales_csv, period_label
from sales_core.trends import daily_trend, hourly_distribution

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Sales analytics: reports, CSV exports and insights.")
    p.add_argument("--seller-id", type=int, help="Only sales of this seller")
    p.add_argument("--item-id", type=int, help="Only sales of this item")
    p.add_argument("--start", help="Start date YYYY-MM-DD (inclusive)")
    p.add_argument("--end", help="End date YYYY-MM-DD (inclusive)")
    p.add_argument("--day", help="Single day YYYY-MM-DD")
    p.add_argument("--sort", choices=["asc", "desc"], default=None, help="Order by time (default: desc)")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    sub = p.add_subparsers(dest="command", required=True)
    for name, help_text in (
        ("report", "Write relatorio_vendas_<date>.txt"),
        ("csv", "Write vendas_<date>.csv"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("--output-dir", default="exports", help="Output directory (default: exports)")

    insights = sub.add_parser("insights", help="Print insights to the console")
    insights.add_argument("--days", type=int, default=None, help="Daily trend window (default: 30)")
    return p


def _filter_from_args(args: argparse.Namespace) -> SaleFilter:
    return SaleFilter(
        seller_id=args.seller_id,
        item_id=args.item_id,
        start_date=parse_day(args.start),
        end_date=parse_day(args.end),
        day=parse_day(args.day),
        sort=args.sort,
    )


def _connect() -> SalesApiClient:
    client = SalesApiClient(ApiSettings.from_env())
    email = os.environ.get("SALES_API_EMAIL")
    password = os.environ.get("SALES_API_PASSWORD")
    if email and password:
        client = client.with_auth(client.login(email, password))
    else:
        logger.info("SALES_API_EMAIL/SALES_API_PASSWORD not set; using anonymous session")
    return client


def format_insights(
    insights: Insights,
    trend: Sequence[Bucket],
    hours: Sequence[Bucket],
    seller_rows: Sequence[SellerPerformance],
    item_rows: Sequence[ItemPerformance],
    goal_sales: int,
) -> str:
    """Build a human-readable console view of the insights bundle.

    Args:
        insights: Output of generate_insights.
        trend: Daily buckets of the trailing window.
        hours: Hour-of-day buckets.
        seller_rows: Seller chart rows (lifetime count and period revenue).
        item_rows: Item chart rows by revenue.
        goal_sales: Sales goal shown next to each seller's count.

    Returns:
        Multi-line string.
    """
    growth = insights.weekly_growth
    sign = "+" if growth.growth_pct >= 0 else ""
    lines = [
        "Insights de Vendas",
        "=" * 60,
        f"Crescimento semanal: {sign}{format_percent(growth.growth_pct)} "
        f"({format_brl(growth.this_week_revenue)} esta semana)",
        f"Ticket médio: {format_brl(insights.average_ticket)}",
        f"Horário de pico: {insights.peak_hour.label} "
        f"({insights.peak_hour.sales_count} vendas)",
        f"Margem de lucro: {format_percent(insights.margin_ratio)} "
        f"({format_brl(insights.summary.total_profit)} de lucro)",
        "",
    ]

    if insights.best_seller is not None:
        lines.append(
            f"Melhor vendedor: {insights.best_seller.name} ({insights.best_seller.sales_count} vendas)"
        )
    if insights.best_item is not None:
        lines.append(
            f"Item mais vendido: {insights.best_item.item.name} "
            f"({format_brl(insights.best_item.revenue)}, {insights.best_item.quantity_sold} unidades)"
        )

    lines += ["", "Progresso da meta:"]
    for progress in insights.goal_progress[:5]:
        lines.append(
            f"  {progress.seller.name}: {progress.seller.sales_count}/{goal_sales} "
            f"({format_percent(progress.progress_pct)})"
        )

    lines += ["", "Vendedores:"]
    for row in seller_rows:
        lines.append(
            f"  {row.seller.name}: {row.sales_count} vendas "
            f"({row.filtered_sales} no período, {format_brl(row.revenue)})"
        )

    lines += ["", "Itens por receita:"]
    for row in item_rows:
        lines.append(f"  {row.item.name}: {format_brl(row.revenue)} ({row.quantity_sold} unidades)")

    lines += ["", "Tendência diária:"]
    for bucket in trend:
        day = parse_day(bucket.key)
        lines.append(f"  {format_day_month(day)}: {bucket.sales_count} vendas, {format_brl(bucket.revenue)}")

    lines += ["", "Distribuição por hora:"]
    for bucket in hours:
        lines.append(f"  {format_hour(int(bucket.key))}: {bucket.sales_count} vendas")

    if insights.recommendations:
        lines += ["", "Recomendações:"]
        for notice in insights.recommendations:
            lines.append(f"  - {notice.title}: {notice.message}")

    return "\n".join(lines)


def run(args: argparse.Namespace, now: Optional[datetime] = None) -> int:
    """Execute a parsed command. Returns the process exit code."""
    now = now or datetime.now()
    config = AnalyticsConfig()
    sale_filter = _filter_from_args(args)

    refresher = SalesRefresher(_connect())
    snapshot: Optional[AnalyticsSnapshot] = refresher.refresh(sale_filter)
    if snapshot is None:
        # only possible if another refresh overtook this one
        snapshot = refresher.snapshot
    if snapshot is None:
        raise FetchError("Refresh was superseded before any data was loaded")
    print(f"[OK] Loaded {len(snapshot.sales)} sales for {period_label(sale_filter)}")

    if args.command == "insights":
        insights = generate_insights(snapshot.sales, snapshot.sellers, snapshot.items, now, config)
        days = args.days if args.days is not None else config.trend_days
        trend = daily_trend(snapshot.sales, now, days=days)
        hours = hourly_distribution(snapshot.sales)
        seller_rows = rank_sellers_by_revenue(
            snapshot.sellers, snapshot.sales, top_n=config.chart_top_sellers
        )
        item_rows = rank_items(snapshot.items, snapshot.sales, top_n=config.chart_top_items)
        print(format_insights(insights, trend, hours, seller_rows, item_rows, config.goal_sales))
        return 0

    paths = ExportPaths.from_root(args.output_dir)
    try:
        if args.command == "report":
            path = export_report(
                paths,
                snapshot.summary,
                snapshot.sellers,
                snapshot.items,
                snapshot.sales,
                now,
                period_label(sale_filter),
                top_n=config.report_top_n,
            )
        else:
            path = export_sales_csv(paths, snapshot.sales, now)
    except EmptyExportError as e:
        print(f"[WARNING] {e}")
        return 1

    print(f"[OK] Wrote {path}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main CLI entry point."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        code = run(args)
    except SalesCoreError as e:
        print(f"\n[ERROR] {e}")
        code = 2
    except ValueError as e:
        print(f"\n[ERROR] Invalid argument: {e}")
        code = 2
    sys.exit(code)


if __name__ == "__main__":
    main()
