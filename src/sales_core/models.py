"""Record model for catalog items, sellers and sales.

Records are frozen dataclasses built either directly or from the sales
API's JSON payloads via ``from_api``. A Sale carries snapshots of its Item
and Seller as they were when the sale was recorded.

Calendar helpers (``sale_date``, ``hour``) read the wall-clock fields of the
timestamp as recorded. No timezone conversion is applied, so a sale stamped
``2025-01-15T23:30:00-03:00`` belongs to 2025-01-15, hour 23.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional

import pandas as pd

from sales_core.config import GOAL_SALES
from sales_core.exceptions import DataQualityError

SORT_ORDERS = ("asc", "desc")


def _require(payload: Mapping[str, Any], key: str, record: str) -> Any:
    """Return payload[key] or raise DataQualityError naming the record type."""
    if key not in payload or payload[key] is None:
        raise DataQualityError(f"{record} payload is missing required field '{key}'")
    return payload[key]


def _int(value: Any, name: str) -> int:
    """Convert an integer field, raising DataQualityError on junk like 'dois'."""
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise DataQualityError(f"Invalid integer value for {name}: {value!r}") from e


def _money(value: Any, name: str) -> float:
    """Convert a monetary value to a float rounded to cents."""
    try:
        return round(float(value), 2)
    except (TypeError, ValueError) as e:
        raise DataQualityError(f"Invalid monetary value for {name}: {value!r}") from e


def parse_timestamp(value: str | datetime) -> datetime:
    """Parse an ISO-8601 instant, keeping its wall-clock fields as recorded.

    Args:
        value: ISO string (``Z`` suffix and offsets accepted) or datetime.

    Returns:
        datetime, timezone-aware when the input carried an offset.

    Raises:
        DataQualityError: If the value is not a valid timestamp.
    """
    if isinstance(value, datetime):
        return value
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError) as e:
        raise DataQualityError(f"Invalid timestamp: {value!r}") from e
    # empty strings parse to NaT without raising
    if pd.isna(ts):
        raise DataQualityError(f"Invalid timestamp: {value!r}")
    return ts.to_pydatetime()


def parse_day(value: str | date | None) -> Optional[date]:
    """Parse a YYYY-MM-DD string (or pass a date through)."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise ValueError(f"Invalid date '{value}'. Expected YYYY-MM-DD.") from e


def wall_clock(ts: datetime) -> datetime:
    """Drop tzinfo without converting, leaving the recorded wall-clock time."""
    return ts.replace(tzinfo=None)


@dataclass(frozen=True)
class Item:
    """Catalog item. Price and cost are in the same currency unit."""

    id: int
    name: str
    price: float
    cost: float

    def __post_init__(self) -> None:
        if self.price <= 0 or self.cost <= 0:
            raise DataQualityError(
                f"Item {self.id} must have price > 0 and cost > 0 "
                f"(got price={self.price}, cost={self.cost})"
            )

    @property
    def unit_profit(self) -> float:
        return self.price - self.cost

    @property
    def margin_pct(self) -> float:
        """Margin as a percentage of price."""
        if self.price == 0:
            return 0.0
        return (self.price - self.cost) / self.price * 100

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> Item:
        """Build an Item from an ``/api/itens`` record."""
        return cls(
            id=_int(_require(payload, "id", "Item"), "id"),
            name=str(_require(payload, "nome", "Item")),
            price=_money(_require(payload, "preco", "Item"), "preco"),
            cost=_money(_require(payload, "custo", "Item"), "custo"),
        )


@dataclass(frozen=True)
class Seller:
    """Seller with a lifetime sales count kept by the transaction store.

    ``sales_count`` is never recomputed from a list of Sales: under an active
    filter the visible Sales are a subset, while this count is lifetime.

    ``met_goal`` is derived from ``sales_count`` when omitted.
    """

    id: int
    name: str
    sales_count: int = 0
    met_goal: Optional[bool] = None

    def __post_init__(self) -> None:
        if self.sales_count < 0:
            raise DataQualityError(
                f"Seller {self.id} has negative sales count {self.sales_count}"
            )
        expected = self.sales_count >= GOAL_SALES
        if self.met_goal is None:
            object.__setattr__(self, "met_goal", expected)
        elif bool(self.met_goal) != expected:
            raise DataQualityError(
                f"Seller {self.id} goal flag {self.met_goal} contradicts "
                f"sales count {self.sales_count} (goal is {GOAL_SALES})"
            )

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> Seller:
        """Build a Seller from an ``/api/vendedores`` record."""
        met_goal = payload.get("metMeta")
        return cls(
            id=_int(_require(payload, "id", "Seller"), "id"),
            name=str(_require(payload, "nome", "Seller")),
            sales_count=_int(payload.get("vendasCount") or 0, "vendasCount"),
            met_goal=None if met_goal is None else bool(met_goal),
        )


@dataclass(frozen=True)
class Sale:
    """One transaction snapshot."""

    id: int
    seller_id: int
    item_id: int
    buyer_name: str
    quantity: int
    amount_paid: float
    timestamp: datetime
    item: Item
    seller: Seller

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise DataQualityError(f"Sale {self.id} has quantity {self.quantity} < 1")
        if self.amount_paid < 0:
            raise DataQualityError(f"Sale {self.id} has negative amount {self.amount_paid}")

    @property
    def unit_profit(self) -> float:
        return self.item.price - self.item.cost

    @property
    def profit(self) -> float:
        return self.unit_profit * self.quantity

    @property
    def sale_date(self) -> date:
        return wall_clock(self.timestamp).date()

    @property
    def hour(self) -> int:
        return self.timestamp.hour

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> Sale:
        """Build a Sale from an ``/api/vendas`` record with embedded snapshots."""
        return cls(
            id=_int(_require(payload, "id", "Sale"), "id"),
            seller_id=_int(_require(payload, "vendedorId", "Sale"), "vendedorId"),
            item_id=_int(_require(payload, "itemId", "Sale"), "itemId"),
            buyer_name=str(payload.get("compradorNome") or ""),
            quantity=_int(_require(payload, "quantidade", "Sale"), "quantidade"),
            amount_paid=_money(_require(payload, "valorPago", "Sale"), "valorPago"),
            timestamp=parse_timestamp(_require(payload, "horario", "Sale")),
            item=Item.from_api(_require(payload, "item", "Sale")),
            seller=Seller.from_api(_require(payload, "vendedor", "Sale")),
        )


@dataclass(frozen=True)
class SaleFilter:
    """Constraints on a sale query. A None field places no constraint.

    Attributes:
        seller_id: Keep sales of this seller.
        item_id: Keep sales of this item.
        start_date: Inclusive lower bound on the sale date.
        end_date: Inclusive upper bound on the sale date.
        day: Keep sales of exactly this date (ANDed with the range).
        sort: "asc" or "desc" by timestamp. None means "desc".
    """

    seller_id: Optional[int] = None
    item_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    day: Optional[date] = None
    sort: Optional[str] = None

    def __post_init__(self) -> None:
        if self.sort is not None and self.sort not in SORT_ORDERS:
            raise ValueError(f"Invalid sort '{self.sort}'. Must be 'asc' or 'desc'.")
        for name in ("start_date", "end_date", "day"):
            object.__setattr__(self, name, parse_day(getattr(self, name)))

    @property
    def descending(self) -> bool:
        return self.sort != "asc"

    def to_query_params(self, include_sort: bool = True) -> dict[str, str]:
        """Render the filter as API query parameters (unset fields omitted)."""
        params: dict[str, str] = {}
        if self.seller_id:
            params["vendedorId"] = str(self.seller_id)
        if self.item_id:
            params["itemId"] = str(self.item_id)
        if self.start_date:
            params["startDate"] = self.start_date.isoformat()
        if self.end_date:
            params["endDate"] = self.end_date.isoformat()
        if self.day:
            params["dia"] = self.day.isoformat()
        if include_sort and self.sort:
            params["sort"] = self.sort
        return params


@dataclass(frozen=True)
class Summary:
    """Aggregate totals over a sale collection."""

    total_sales: int = 0
    total_revenue: float = 0.0
    total_profit: float = 0.0

    @property
    def average_ticket(self) -> float:
        if self.total_sales == 0:
            return 0.0
        return self.total_revenue / self.total_sales

    @property
    def margin_ratio(self) -> float:
        """Profit as a percentage of revenue."""
        if self.total_revenue == 0:
            return 0.0
        return self.total_profit / self.total_revenue * 100

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> Summary:
        """Build a Summary from an ``/api/vendas/summary`` response."""
        return cls(
            total_sales=_int(payload.get("totalVendas") or 0, "totalVendas"),
            total_revenue=_money(payload.get("totalReceita") or 0, "totalReceita"),
            total_profit=_money(payload.get("totalLucro") or 0, "totalLucro"),
        )


@dataclass(frozen=True)
class Bucket:
    """Aggregation of sales over one calendar day or one hour of day."""

    key: str
    sales_count: int = 0
    revenue: float = 0.0
    profit: float = 0.0


@dataclass(frozen=True)
class AuthUser:
    """Authenticated user returned by the login endpoint."""

    id: int
    name: str
    email: str
    role: str = "USER"

    @property
    def is_admin(self) -> bool:
        return self.role == "ADMIN"

    @classmethod
    def from_api(cls, payload: Mapping[str, Any], email: str = "") -> AuthUser:
        """Build an AuthUser from the ``user`` object of a login response."""
        return cls(
            id=_int(payload.get("id", 0), "id"),
            name=str(payload.get("nome", "")),
            email=str(payload.get("email", email)),
            role=str(payload.get("role", "USER")),
        )


@dataclass(frozen=True)
class AuthSession:
    """Explicit authentication context passed to the API client.

    Attributes:
        token: Bearer token, or None for an anonymous session.
        user: Logged-in user, when known.
    """

    token: Optional[str] = None
    user: Optional[AuthUser] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def headers(self) -> dict[str, str]:
        """Authorization headers for this session."""
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}
