"""Tests for the plain-text report, the CSV export and the export files."""

import io
from datetime import datetime
from pathlib import Path

import pandas as pd
import pytest

from sales_core.config import ExportPaths
from sales_core.exceptions import EmptyExportError, ExportError
from sales_core.models import SaleFilter
from sales_core.report import (
    CSV_HEADERS,
    build_report_text,
    build_sales_csv,
    export_report,
    export_sales_csv,
    period_label,
)
from sales_core.summary import summarize
from tests.test_utils import BEIJINHO, BRIGADEIRO, make_sale, make_seller

NOW = datetime(2025, 1, 15, 16, 5, 9)
BRL = "R$\u00a0"

ANA = make_seller(1, "Ana", 30)
BIA = make_seller(2, "Bia", 12)
SELLERS = [BIA, ANA]
ITEMS = [BRIGADEIRO, BEIJINHO]


@pytest.fixture
def sales() -> list:
    return [
        make_sale(1, "2025-01-15T10:00:00", item=BRIGADEIRO, seller=ANA, quantity=2,
                  buyer_name='Maria "Mari" Silva'),
        make_sale(2, "2025-01-14T09:30:00", item=BEIJINHO, seller=BIA, buyer_name="João"),
    ]


def test_report_text_layout(sales: list) -> None:
    """The report is fully determined by its inputs and ``now``."""
    text = build_report_text(
        summarize(sales), SELLERS, ITEMS, sales, NOW, "2025-01-01 a 2025-01-31"
    )

    expected = [
        "RELATÓRIO DE VENDAS - BRIGADEIRO DASHBOARD",
        "=" * 41,
        "",
        "Período: 2025-01-01 a 2025-01-31",
        "Data de geração: 15/01/2025, 16:05:09",
        "",
        "RESUMO EXECUTIVO",
        "-" * 16,
        "• Total de vendas: 2",
        f"• Receita total: {BRL}16,00",
        f"• Lucro total: {BRL}9,50",
        f"• Ticket médio: {BRL}8,00",
        "• Margem de lucro: 59.4%",
        "",
        "VENDEDORES",
        "-" * 10,
        "• Total de vendedores: 2",
        "• Vendedores que atingiram a meta: 1",
        "• Taxa de sucesso na meta: 50.0%",
        "",
        "PRODUTOS",
        "-" * 8,
        "• Total de itens cadastrados: 2",
        "",
        "TOP 5 VENDEDORES",
        "-" * 16,
        "1. Ana - 30 vendas (Meta atingida)",
        "2. Bia - 12 vendas ",
        "",
        "TOP 5 ITENS POR RECEITA",
        "-" * 23,
        f"1. Brigadeiro - {BRL}10,00",
        f"2. Beijinho - {BRL}6,00",
        "",
        "Relatório gerado automaticamente pelo Brigadeiro Dashboard",
    ]
    assert text.split("\n") == expected


def test_report_without_sellers_has_zero_success_rate(sales: list) -> None:
    text = build_report_text(summarize(sales), [], ITEMS, sales, NOW, "Todos os períodos")
    assert "• Taxa de sucesso na meta: 0%\n" in text
    assert "• Total de vendedores: 0" in text


def test_report_top_n_limits_rankings(sales: list) -> None:
    text = build_report_text(summarize(sales), SELLERS, ITEMS, sales, NOW, "x", top_n=1)
    assert "TOP 1 VENDEDORES" in text
    assert "2. Bia" not in text


def test_csv_round_trip(sales: list) -> None:
    """Quotes inside names are escaped and read back unchanged."""
    text = build_sales_csv(sales)

    lines = text.split("\n")
    assert lines[0] == ",".join(f'"{h}"' for h in CSV_HEADERS)
    assert lines[1] == (
        '"1","Ana","Brigadeiro","Maria ""Mari"" Silva","2","10.00","6.00","15/01/2025, 10:00:00"'
    )

    df = pd.read_csv(io.StringIO(text))
    assert list(df.columns) == CSV_HEADERS
    assert list(df["ID"]) == [1, 2]
    assert df.loc[0, "Buyer"] == 'Maria "Mari" Silva'
    assert df.loc[1, "Buyer"] == "João"
    assert list(df["Profit"]) == [6.0, 3.5]


def test_csv_keeps_input_order(sales: list) -> None:
    text = build_sales_csv(list(reversed(sales)))
    assert text.split("\n")[1].startswith('"2",')


def test_csv_has_no_trailing_newline(sales: list) -> None:
    text = build_sales_csv(sales)
    assert not text.endswith("\n")
    assert len(text.split("\n")) == 3


class TestPeriodLabel:
    def test_range(self) -> None:
        label = period_label(SaleFilter(start_date="2025-01-01", end_date="2025-01-31"))
        assert label == "2025-01-01 a 2025-01-31"

    def test_day_and_open_ranges_are_not_named(self) -> None:
        assert period_label(SaleFilter(day="2025-01-15")) == "Todos os períodos"
        assert period_label(SaleFilter(start_date="2025-01-01")) == "Todos os períodos"
        assert period_label(SaleFilter(end_date="2025-01-31")) == "Todos os períodos"

    def test_no_constraint(self) -> None:
        assert period_label(None) == "Todos os períodos"
        assert period_label(SaleFilter(seller_id=1)) == "Todos os períodos"


def test_export_report_writes_dated_file(tmp_path: Path, sales: list) -> None:
    paths = ExportPaths.from_root(tmp_path / "exports")

    path = export_report(paths, summarize(sales), SELLERS, ITEMS, sales, NOW, "Todos os períodos")

    assert path == tmp_path / "exports" / "relatorio_vendas_2025-01-15.txt"
    content = path.read_text(encoding="utf-8")
    assert content.startswith("RELATÓRIO DE VENDAS")
    assert content == build_report_text(
        summarize(sales), SELLERS, ITEMS, sales, NOW, "Todos os períodos"
    )


def test_export_csv_writes_dated_file(tmp_path: Path, sales: list) -> None:
    path = export_sales_csv(ExportPaths.from_root(tmp_path), sales, NOW)
    assert path.name == "vendas_2025-01-15.csv"
    assert path.read_text(encoding="utf-8") == build_sales_csv(sales)


def test_empty_exports_are_refused(tmp_path: Path) -> None:
    """No file (and no directory) is created for an empty collection."""
    out = tmp_path / "exports"
    paths = ExportPaths.from_root(out)

    with pytest.raises(EmptyExportError, match="Não há dados para gerar relatório"):
        export_report(paths, summarize([]), SELLERS, ITEMS, [], NOW, "Todos os períodos")
    with pytest.raises(ExportError, match="Não há dados para exportar"):
        export_sales_csv(paths, [], NOW)

    assert not out.exists()
