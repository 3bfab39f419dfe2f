"""Energy transactions and settlements."""

from __future__ import annotations

from typing import Any, Callable, Literal

from ..models import EnergyTransaction, Settlement, TransactionStatus
from ..transport.events import SETTLEMENT, TRANSACTION
from .base import Resource

SummaryPeriod = Literal["day", "week", "month", "year"]


class TransactionManager(Resource):
    """Transactions the participant bought or sold, and their settlements."""

    async def get_transaction(self, transaction_id: str) -> EnergyTransaction:
        data = await self._get(f"/transactions/{transaction_id}")
        return self._parse(EnergyTransaction, data)

    async def get_transactions(
        self,
        *,
        start: str | None = None,
        end: str | None = None,
        status: TransactionStatus | None = None,
        min_amount: float | None = None,
        max_amount: float | None = None,
    ) -> list[EnergyTransaction]:
        data = await self._get(
            "/transactions",
            {
                "from": start,
                "to": end,
                "status": status,
                "minAmount": min_amount,
                "maxAmount": max_amount,
            },
        )
        return self._parse_list(EnergyTransaction, data)

    async def get_sales_transactions(self, start: str | None = None, end: str | None = None) -> list[EnergyTransaction]:
        data = await self._get("/transactions/sales", {"from": start, "to": end})
        return self._parse_list(EnergyTransaction, data)

    async def get_purchase_transactions(self, start: str | None = None, end: str | None = None) -> list[EnergyTransaction]:
        data = await self._get("/transactions/purchases", {"from": start, "to": end})
        return self._parse_list(EnergyTransaction, data)

    async def get_pending_transactions(self) -> list[EnergyTransaction]:
        return await self.get_transactions(status=TransactionStatus.PENDING)

    async def create_transaction(
        self,
        buyer_id: str,
        energy: float,
        price_per_kwh: float,
        source: str,
        metadata: dict[str, Any] | None = None,
    ) -> EnergyTransaction:
        """Create a direct transaction with a known buyer."""
        body: dict[str, Any] = {
            "buyerId": buyer_id,
            "energy": energy,
            "pricePerKwh": price_per_kwh,
            "source": source,
        }
        if metadata is not None:
            body["metadata"] = metadata
        data = await self._post("/transactions", body)
        return self._parse(EnergyTransaction, data)

    async def cancel_transaction(self, transaction_id: str) -> EnergyTransaction:
        data = await self._post(f"/transactions/{transaction_id}/cancel")
        return self._parse(EnergyTransaction, data)

    async def get_settlement(self, settlement_id: str) -> Settlement:
        data = await self._get(f"/settlements/{settlement_id}")
        return self._parse(Settlement, data)

    async def get_settlements(self, start: str | None = None, end: str | None = None) -> list[Settlement]:
        data = await self._get("/settlements", {"from": start, "to": end})
        return self._parse_list(Settlement, data)

    async def get_pending_settlements(self) -> list[Settlement]:
        data = await self._get("/settlements/pending")
        return self._parse_list(Settlement, data)

    async def trigger_settlement(self, transaction_ids: list[str] | None = None) -> Settlement:
        """Ask the backend to settle pending transactions (all, or only ``transaction_ids``)."""
        body: dict[str, Any] = {}
        if transaction_ids is not None:
            body["transactionIds"] = list(transaction_ids)
        data = await self._post("/settlements/trigger", body)
        return self._parse(Settlement, data)

    async def get_receipt(self, transaction_id: str) -> dict[str, Any]:
        return await self._get(f"/transactions/{transaction_id}/receipt")

    async def calculate_fees(self, energy: float, price_per_kwh: float) -> dict[str, Any]:
        return await self._post(
            "/transactions/calculate-fees",
            {"energy": energy, "pricePerKwh": price_per_kwh},
        )

    async def get_transaction_summary(self, period: SummaryPeriod) -> dict[str, Any]:
        return await self._get("/transactions/summary", {"period": period})

    async def export_transactions(self, start: str, end: str) -> str:
        """Transactions between ``start`` and ``end`` as CSV text."""
        return await self._get(
            "/transactions/export",
            {"from": start, "to": end, "format": "csv"},
            as_text=True,
        )

    async def verify_transaction(self, transaction_id: str) -> dict[str, Any]:
        return await self._get(f"/transactions/{transaction_id}/verify")

    async def request_refund(self, transaction_id: str, reason: str) -> dict[str, Any]:
        return await self._post(f"/transactions/{transaction_id}/refund", {"reason": reason})

    def subscribe_to_transactions(self, callback: Callable[[Any], Any]) -> None:
        self.client.subscribe(TRANSACTION, callback)

    def unsubscribe_from_transactions(self, callback: Callable[[Any], Any]) -> None:
        self.client.unsubscribe(TRANSACTION, callback)

    def subscribe_to_settlements(self, callback: Callable[[Any], Any]) -> None:
        self.client.subscribe(SETTLEMENT, callback)

    def unsubscribe_from_settlements(self, callback: Callable[[Any], Any]) -> None:
        self.client.unsubscribe(SETTLEMENT, callback)
