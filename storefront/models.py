"""Pydantic models for inventory payloads and cart lines."""
from pydantic import BaseModel, ConfigDict, Field


class ProductInfo(BaseModel):
    """Catalog product as returned by GET products/{id}.

    Only ``id`` is typed. Display fields (title, price, image, ...) are opaque
    and kept exactly as the API sent them.
    """
    model_config = ConfigDict(extra="allow", frozen=True)

    id: int


class Product(ProductInfo):
    """Cart line: a catalog product annotated with the quantity in the cart."""
    amount: int = Field(ge=1)

    @classmethod
    def from_info(cls, info: ProductInfo, amount: int = 1) -> "Product":
        return cls.model_validate({**info.model_dump(), "amount": amount})

    def with_amount(self, amount: int) -> "Product":
        """Copy of this line with a new (validated) amount."""
        return Product.model_validate({**self.model_dump(), "amount": amount})


class Stock(BaseModel):
    """Available quantity for a product, as returned by GET stock/{id}."""
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int
    amount: int = Field(ge=0)
