"""Pydantic schemas for shipping service."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ShippingLaneCreate(BaseModel):
    from_city_id: uuid.UUID = Field(
        ..., validation_alias=AliasChoices("from_city_id", "fromCityId")
    )
    to_city_id: uuid.UUID = Field(
        ..., validation_alias=AliasChoices("to_city_id", "toCityId")
    )
    price: Decimal = Field(..., ge=0, decimal_places=2)


class ShippingLaneUpdate(BaseModel):
    from_city_id: Optional[uuid.UUID] = Field(
        None, validation_alias=AliasChoices("from_city_id", "fromCityId")
    )
    to_city_id: Optional[uuid.UUID] = Field(
        None, validation_alias=AliasChoices("to_city_id", "toCityId")
    )
    price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)


class ShippingLaneResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    from_city_id: uuid.UUID
    to_city_id: uuid.UUID
    price: Decimal
    created_at: datetime
    updated_at: datetime


class ShippingPriceResponse(BaseModel):
    from_city_id: uuid.UUID
    to_city_id: uuid.UUID
    price: Decimal
