"""Order value objects used as export input."""

from dataclasses import dataclass, field
from typing import List


@dataclass
class OrderItem:
    """A single order line."""
    code: str
    description: str
    quantity: float
    unit_price: float

    @property
    def total(self) -> float:
        return self.quantity * self.unit_price

    @classmethod
    def from_dict(cls, data: dict) -> "OrderItem":
        """Create an item from the front end's camelCase JSON."""
        return cls(
            code=str(data.get("code", "")),
            description=str(data.get("description", "")),
            quantity=float(data.get("quantity", 0)),
            unit_price=float(data.get("unitPrice", 0)),
        )


@dataclass
class Order:
    """An order ready to be exported."""
    number: int
    date: str
    vendor_id: str
    vendor_name: str
    items: List[OrderItem] = field(default_factory=list)

    @property
    def total(self) -> float:
        return sum(item.total for item in self.items)

    @property
    def items_count(self) -> int:
        return len(self.items)

    @classmethod
    def from_dict(cls, data: dict) -> "Order":
        """
        Create an order from the front end's camelCase JSON.

        Raises:
            ValueError: If the order number or items are malformed
        """
        try:
            number = int(data["number"])
        except (KeyError, TypeError, ValueError):
            raise ValueError("Número do pedido inválido")

        items = data.get("items") or []
        if not isinstance(items, list):
            raise ValueError("Itens do pedido inválidos")

        try:
            parsed_items = [OrderItem.from_dict(item) for item in items]
        except (AttributeError, TypeError, ValueError):
            raise ValueError("Itens do pedido inválidos")

        return cls(
            number=number,
            date=str(data.get("date", "")),
            vendor_id=str(data.get("vendorId", "")),
            vendor_name=str(data.get("vendorName", "")),
            items=parsed_items,
        )
