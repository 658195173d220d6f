from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class CartItem(BaseModel):
    """One cart line as sent by the storefront."""

    id: str
    name: str
    description: str | None = None
    quantity: int = Field(..., ge=1)
    price: Decimal = Field(..., ge=0)


class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "cart": [
                    {
                        "id": "YOUR_PRODUCT_ID",
                        "name": "Cart total",
                        "description": "Storefront order",
                        "quantity": 1,
                        "price": "91.98",
                    }
                ]
            }
        }
    )

    cart: list[CartItem] = Field(..., min_length=1)
