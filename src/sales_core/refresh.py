"""Refresh coordinator: batched fetches guarded by request generations.

A refresh fetches items, sellers, the filtered sales and the server summary
as one batch. It either succeeds completely or raises FetchError and leaves
the previous snapshot in place (stale but valid).

Every refresh takes a generation number from a monotonic counter. When
refreshes overlap, a completion whose generation is older than the latest
one started is discarded, so a slow response never overwrites a newer one.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from sales_core.client import SalesApiClient
from sales_core.exceptions import FetchError, SalesCoreError
from sales_core.models import Item, Sale, SaleFilter, Seller, Summary
from sales_core.summary import summaries_agree, summarize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalyticsSnapshot:
    """Data of one successful refresh.

    Attributes:
        generation: Generation number of the refresh that produced it.
        sale_filter: Filter the sales were fetched with.
        items: Catalog items.
        sellers: All sellers.
        sales: Sales matching the filter.
        summary: Totals over ``sales``.
        fetched_at: When the batch completed.
    """

    generation: int
    sale_filter: SaleFilter
    items: list[Item]
    sellers: list[Seller]
    sales: list[Sale]
    summary: Summary
    fetched_at: datetime


class SalesRefresher:
    """Keeps the latest valid snapshot for a client.

    Args:
        client: Data source.
        clock: Returns the current instant; defaults to datetime.now.
    """

    def __init__(
        self,
        client: SalesApiClient,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.client = client
        self._clock = clock or datetime.now
        self._lock = threading.Lock()
        self._latest_generation = 0
        self.snapshot: Optional[AnalyticsSnapshot] = None
        self.last_filter = SaleFilter()

    def begin(self) -> int:
        """Start a new request generation and return its number."""
        with self._lock:
            self._latest_generation += 1
            return self._latest_generation

    def fetch(self, sale_filter: SaleFilter, generation: int) -> AnalyticsSnapshot:
        """Fetch one batch for the filter without applying it.

        Raises:
            FetchError: If any of the batched calls fails.
        """
        try:
            items = self.client.list_items()
            sellers = self.client.list_sellers()
            sales = self.client.list_sales(sale_filter)
            server_summary = self.client.get_summary(sale_filter)
        except SalesCoreError as e:
            logger.error("Refresh %d failed: %s", generation, e)
            raise FetchError(f"Erro ao carregar dados: {e}") from e

        summary = summarize(sales)
        if not summaries_agree(server_summary, summary):
            logger.warning(
                "Server summary %s disagrees with %d fetched sales (%s); using local totals",
                server_summary,
                len(sales),
                summary,
            )

        return AnalyticsSnapshot(
            generation=generation,
            sale_filter=sale_filter,
            items=items,
            sellers=sellers,
            sales=sales,
            summary=summary,
            fetched_at=self._clock(),
        )

    def apply(self, snapshot: AnalyticsSnapshot) -> bool:
        """Install the snapshot unless a newer refresh has started since.

        Returns:
            True if the snapshot became current, False if it was stale.
        """
        with self._lock:
            if snapshot.generation < self._latest_generation:
                logger.debug(
                    "Discarding stale refresh %d (latest is %d)",
                    snapshot.generation,
                    self._latest_generation,
                )
                return False
            self.snapshot = snapshot
            self.last_filter = snapshot.sale_filter
            return True

    def refresh(self, sale_filter: Optional[SaleFilter] = None) -> Optional[AnalyticsSnapshot]:
        """Fetch and apply a batch for the filter.

        Args:
            sale_filter: Filter to use. Defaults to the last applied filter.

        Returns:
            The new snapshot, or None if a newer refresh superseded it.

        Raises:
            FetchError: If the batch failed. The current snapshot is kept.
        """
        sale_filter = sale_filter if sale_filter is not None else self.last_filter
        generation = self.begin()
        snapshot = self.fetch(sale_filter, generation)
        if not self.apply(snapshot):
            return None
        logger.info(
            "Refresh %d: %d sales, %d sellers, %d items",
            generation,
            len(snapshot.sales),
            len(snapshot.sellers),
            len(snapshot.items),
        )
        return snapshot

    # --- Mutations: forwarded to the client, then refreshed ---

    def _mutate(self, operation: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run a mutation, then refresh.

        A failed refresh after a successful mutation is logged and the stale
        snapshot is kept; the mutation's result is still returned.
        """
        result = operation(*args, **kwargs)
        try:
            self.refresh()
        except FetchError as e:
            logger.warning("%s succeeded but the refresh failed: %s", operation.__name__, e)
        return result

    def create_item(self, name: str, price: float, cost: float) -> Item:
        return self._mutate(self.client.create_item, name, price, cost)

    def delete_item(self, item_id: int) -> None:
        self._mutate(self.client.delete_item, item_id)

    def create_seller(self, name: str) -> Seller:
        return self._mutate(self.client.create_seller, name)

    def delete_seller(self, seller_id: int) -> None:
        self._mutate(self.client.delete_seller, seller_id)

    def create_sale(self, **fields: Any) -> Sale:
        return self._mutate(self.client.create_sale, **fields)

    def delete_sale(self, sale_id: int) -> None:
        self._mutate(self.client.delete_sale, sale_id)
