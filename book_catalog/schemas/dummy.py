from typing import Any, Optional

from pydantic import BaseModel, field_validator


class DummyProduct(BaseModel):
    id: int
    title: str
    brand: Optional[str] = None
    description: Optional[str] = None
    rating: Optional[float] = None

    @field_validator("brand", "description", mode="before")
    @classmethod
    def _text_or_none(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator("rating", mode="before")
    @classmethod
    def _numeric_rating(cls, value: Any) -> Optional[float]:
        # bool является подклассом int, но рейтингом не считается
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return float(value)


class DummyProductUpdate(BaseModel):
    title: Optional[str] = None
    brand: Optional[str] = None
    description: Optional[str] = None
    rating: Optional[float] = None
