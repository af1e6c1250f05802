"""Report serializer: plain-text sales report and CSV transaction export.

The text report has a fixed section layout in Brazilian Portuguese and is
deterministic for fixed inputs and a fixed ``now``. The CSV export writes one
row per sale in the order received.

Exports refuse an empty sale collection with EmptyExportError instead of
producing an empty file.
"""

from __future__ import annotations

import csv
import io
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from sales_core.config import ExportPaths
from sales_core.exceptions import EmptyExportError
from sales_core.formatters import format_brl, format_datetime_br, format_percent
from sales_core.models import Item, Sale, SaleFilter, Seller, Summary, wall_clock
from sales_core.rankings import rank_items, rank_sellers

logger = logging.getLogger(__name__)

REPORT_TITLE = "RELATÓRIO DE VENDAS - BRIGADEIRO DASHBOARD"
REPORT_RULE = "=" * 41
REPORT_FOOTER = "Relatório gerado automaticamente pelo Brigadeiro Dashboard"

CSV_HEADERS = [
    "ID",
    "Seller",
    "Item",
    "Buyer",
    "Quantity",
    "Amount Paid",
    "Profit",
    "Timestamp",
]


def period_label(sale_filter: Optional[SaleFilter]) -> str:
    """Describe the reporting period, e.g. '2025-01-01 a 2025-01-31'.

    Only a closed date range is named; anything else (open ranges, a single
    day, no dates) reads 'Todos os períodos', as the dashboard prints it.
    """
    if sale_filter is not None and sale_filter.start_date and sale_filter.end_date:
        return f"{sale_filter.start_date.isoformat()} a {sale_filter.end_date.isoformat()}"
    return "Todos os períodos"


def _section(title: str, lines: list[str]) -> list[str]:
    return [title, "-" * len(title), *lines, ""]


def build_report_text(
    summary: Summary,
    sellers: Sequence[Seller],
    items: Sequence[Item],
    sales: Sequence[Sale],
    now: datetime,
    period: str,
    top_n: int = 5,
) -> str:
    """Render the sales report.

    Args:
        summary: Totals for the reporting period.
        sellers: All sellers (lifetime counts).
        items: Catalog items.
        sales: Sales of the reporting period, used for item revenue.
        now: Generation instant shown in the header.
        period: Period label (see ``period_label``).
        top_n: Entries in each ranking section.

    Returns:
        Report text without a trailing newline.
    """
    met_goal = sum(1 for s in sellers if s.met_goal)
    # "0%" without a decimal when there are no sellers
    success_rate = format_percent(met_goal / len(sellers) * 100) if sellers else "0%"

    seller_lines = []
    for position, seller in enumerate(rank_sellers(sellers, top_n=top_n), start=1):
        # the space before the goal marker stays even when the marker is empty
        marker = "(Meta atingida)" if seller.met_goal else ""
        seller_lines.append(f"{position}. {seller.name} - {seller.sales_count} vendas {marker}")

    item_lines = [
        f"{position}. {perf.item.name} - {format_brl(perf.revenue)}"
        for position, perf in enumerate(rank_items(items, sales, top_n=top_n), start=1)
    ]

    lines = [
        REPORT_TITLE,
        REPORT_RULE,
        "",
        f"Período: {period}",
        f"Data de geração: {format_datetime_br(wall_clock(now))}",
        "",
    ]
    lines += _section(
        "RESUMO EXECUTIVO",
        [
            f"• Total de vendas: {summary.total_sales}",
            f"• Receita total: {format_brl(summary.total_revenue)}",
            f"• Lucro total: {format_brl(summary.total_profit)}",
            f"• Ticket médio: {format_brl(summary.average_ticket)}",
            f"• Margem de lucro: {format_percent(summary.margin_ratio)}",
        ],
    )
    lines += _section(
        "VENDEDORES",
        [
            f"• Total de vendedores: {len(sellers)}",
            f"• Vendedores que atingiram a meta: {met_goal}",
            f"• Taxa de sucesso na meta: {success_rate}",
        ],
    )
    lines += _section("PRODUTOS", [f"• Total de itens cadastrados: {len(items)}"])
    lines += _section(f"TOP {top_n} VENDEDORES", seller_lines)
    lines += _section(f"TOP {top_n} ITENS POR RECEITA", item_lines)
    lines.append(REPORT_FOOTER)

    return "\n".join(lines)


def build_sales_csv(sales: Sequence[Sale]) -> str:
    """Render sales as CSV, one row per sale in input order.

    Every cell is double-quoted. Quotes inside a value are doubled, so buyer
    or item names containing '"' survive a round trip. Rows are separated by
    "\n" and the text has no trailing newline.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for sale in sales:
        writer.writerow(
            [
                sale.id,
                sale.seller.name,
                sale.item.name,
                sale.buyer_name,
                sale.quantity,
                f"{sale.amount_paid:.2f}",
                f"{sale.profit:.2f}",
                format_datetime_br(wall_clock(sale.timestamp)),
            ]
        )
    return buffer.getvalue().removesuffix("\n")


def _write(path: Path, content: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)


def export_report(
    paths: ExportPaths,
    summary: Summary,
    sellers: Sequence[Seller],
    items: Sequence[Item],
    sales: Sequence[Sale],
    now: datetime,
    period: str,
    top_n: int = 5,
) -> Path:
    """Write ``relatorio_vendas_<YYYY-MM-DD>.txt`` and return its path.

    Raises:
        EmptyExportError: If there are no sales. No file is written.
    """
    if not sales:
        raise EmptyExportError("Não há dados para gerar relatório")

    paths.ensure_dirs()
    path = paths.report_file(wall_clock(now).date())
    _write(path, build_report_text(summary, sellers, items, sales, now, period, top_n=top_n))
    logger.info("Wrote report: %s", path)
    return path


def export_sales_csv(paths: ExportPaths, sales: Sequence[Sale], now: datetime) -> Path:
    """Write ``vendas_<YYYY-MM-DD>.csv`` and return its path.

    Raises:
        EmptyExportError: If there are no sales. No file is written.
    """
    if not sales:
        raise EmptyExportError("Não há dados para exportar")

    paths.ensure_dirs()
    path = paths.csv_file(wall_clock(now).date())
    _write(path, build_sales_csv(sales))
    logger.info("Wrote CSV export: %s (%d rows)", path, len(sales))
    return path
