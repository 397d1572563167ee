"""Pydantic request/response schemas for the Catalogue API."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


# --- Shop ---


class OpenShopRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Himalayan Handicrafts",
                    "description": "Hand-made felt and pashmina goods from Kathmandu.",
                }
            ]
        }
    }

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None


class ShopSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    name: str
    description: str | None = None
    is_active: bool
    created_at: datetime


# --- Product ---


class CreateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Pashmina Shawl",
                    "description": "100% cashmere, natural colour.",
                    "price": "4500.00",
                    "stock_quantity": 12,
                    "image_url": "https://cdn.example.com/p/shawl.jpg",
                }
            ]
        }
    }

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    stock_quantity: int = Field(0, ge=0)
    image_url: str | None = Field(None, max_length=500)


class ProductSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    shop_id: str
    name: str
    description: str | None = None
    price: float
    stock_quantity: int
    image_url: str | None = None
    is_active: bool
    created_at: datetime


class UpdateProductRequest(BaseModel):
    """Partial edit. ``stock_adjustment`` is a signed delta, not a new total."""

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "price": "4200.00",
                    "stock_adjustment": -2,
                }
            ]
        }
    }

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    price: Decimal | None = Field(None, gt=0, max_digits=12, decimal_places=2)
    image_url: str | None = Field(None, max_length=500)
    is_active: bool | None = None
    stock_adjustment: int = 0
