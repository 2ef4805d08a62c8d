from typing import Dict, Iterator, List, Optional, Tuple

from brewhaven.errors import ValidationError


class CartItem:
    __slots__ = ("product_id", "unit_price", "quantity")

    def __init__(self, product_id: int, unit_price: int, quantity: int):
        self.product_id = product_id
        self.unit_price = unit_price
        self.quantity = quantity

    @property
    def subtotal(self) -> int:
        return self.unit_price * self.quantity

    def __eq__(self, other):
        if not isinstance(other, CartItem):
            return NotImplemented
        return (self.product_id, self.unit_price, self.quantity) == (
            other.product_id,
            other.unit_price,
            other.quantity,
        )

    def __repr__(self):
        return f"<CartItem product_id={self.product_id} qty={self.quantity} unit_price={self.unit_price}>"


class Cart:
    """
    In-memory cart for one shopper session.

    Lines are keyed by product id and keep insertion order. The unit price is
    the price seen when the product was added; it is for display only, the
    order is priced when it is placed.
    """

    def __init__(self, items: Optional[List[CartItem]] = None):
        self._lines: Dict[int, CartItem] = {}
        for it in items or []:
            self.add(it.product_id, it.unit_price, it.quantity)

    def add(self, product_id: int, unit_price: int, qty: int = 1) -> CartItem:
        if qty < 1:
            raise ValidationError("Quantity must be positive")
        line = self._lines.get(product_id)
        if line:
            line.quantity += qty
            line.unit_price = unit_price
        else:
            line = CartItem(product_id, unit_price, qty)
            self._lines[product_id] = line
        return line

    def set_quantity(self, product_id: int, qty: int) -> Optional[CartItem]:
        if qty <= 0:
            self.remove(product_id)
            return None
        line = self._lines.get(product_id)
        if not line:
            raise ValidationError(f"Product {product_id} is not in the cart")
        line.quantity = qty
        return line

    def remove(self, product_id: int) -> None:
        self._lines.pop(product_id, None)

    def clear(self) -> None:
        self._lines.clear()

    def totals(self) -> Tuple[int, int]:
        """Return (item_count, subtotal) where item_count sums quantities."""
        count = sum(it.quantity for it in self._lines.values())
        subtotal = sum(it.subtotal for it in self._lines.values())
        return count, subtotal

    def snapshot(self) -> List[CartItem]:
        return [CartItem(it.product_id, it.unit_price, it.quantity) for it in self._lines.values()]

    def get(self, product_id: int) -> Optional[CartItem]:
        return self._lines.get(product_id)

    def is_empty(self) -> bool:
        return not self._lines

    def __iter__(self) -> Iterator[CartItem]:
        return iter(list(self._lines.values()))

    def __len__(self) -> int:
        return len(self._lines)
