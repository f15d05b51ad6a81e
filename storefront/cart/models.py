"""Cart snapshot and operation result models."""
import json
from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple

from storefront.errors import CartError, CorruptCartDataError
from storefront.models import Product


@dataclass(frozen=True)
class Cart:
    """
    Immutable, insertion-ordered cart snapshot.

    At most one line per product id. Every change returns a new Cart, so a
    snapshot handed to a caller never changes under it.
    """
    items: Tuple[Product, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Accept any iterable (lists from callers, generators from helpers)
        object.__setattr__(self, "items", tuple(self.items))
        ids = [item.id for item in self.items]
        if len(ids) != len(set(ids)):
            raise ValueError("Cart cannot contain the same product twice")

    def __iter__(self) -> Iterator[Product]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def get(self, product_id: int) -> Optional[Product]:
        """Line for a product id, or None."""
        return next((item for item in self.items if item.id == product_id), None)

    def __contains__(self, product_id: object) -> bool:
        return any(item.id == product_id for item in self.items)

    @property
    def total_items(self) -> int:
        """Sum of amounts over all lines."""
        return sum(item.amount for item in self.items)

    def with_amount(self, product_id: int, amount: int) -> "Cart":
        """Replace the amount of the matching line; other lines unchanged."""
        return Cart(
            item.with_amount(amount) if item.id == product_id else item
            for item in self.items
        )

    def appended(self, product: Product) -> "Cart":
        return Cart(self.items + (product,))

    def without(self, product_id: int) -> "Cart":
        return Cart(item for item in self.items if item.id != product_id)

    def to_list(self) -> list:
        """Plain dicts in cart order (metadata fields plus amount)."""
        return [item.model_dump(mode="json") for item in self.items]

    def to_json(self) -> bytes:
        """Serialized form written to the store."""
        return json.dumps(self.to_list(), ensure_ascii=False).encode("utf-8")

    @classmethod
    def from_json(cls, data: bytes | str) -> "Cart":
        """
        Decode a stored snapshot.

        Raises:
            CorruptCartDataError: invalid JSON, not a list, invalid line or
                duplicate product id
        """
        try:
            raw = json.loads(data)
            if not isinstance(raw, list):
                raise CorruptCartDataError(f"Expected a list of products, got {type(raw).__name__}")
            return cls(Product.model_validate(entry) for entry in raw)
        except CorruptCartDataError:
            raise
        except (ValueError, TypeError) as e:
            # JSONDecodeError, UnicodeDecodeError and pydantic ValidationError are ValueErrors
            raise CorruptCartDataError(f"Corrupted cart data: {e}") from e


@dataclass(frozen=True)
class CartResult:
    """Outcome of one cart operation."""
    ok: bool
    cart: Cart
    error: Optional[CartError] = None
    changed: bool = False

    @classmethod
    def success(cls, cart: Cart, changed: bool = True) -> "CartResult":
        return cls(ok=True, cart=cart, changed=changed)

    @classmethod
    def failure(cls, cart: Cart, error: CartError) -> "CartResult":
        return cls(ok=False, cart=cart, error=error)

    def __bool__(self) -> bool:
        return self.ok
