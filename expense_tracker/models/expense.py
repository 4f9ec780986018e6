from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Any, Dict, Optional
from datetime import datetime


def _required_text(v: str, name: str) -> str:
    if not v or not v.strip():
        raise ValueError(f"{name} is required")
    return v.strip()


class ExpenseDraft(BaseModel):
    """Expense as entered by the user, before the store assigns id/createdAt."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    amount: float = Field(..., gt=0)
    category: str
    description: Optional[str] = ""

    @field_validator("title")
    @classmethod
    def title_required(cls, v: str) -> str:
        return _required_text(v, "title")

    @field_validator("category")
    @classmethod
    def category_required(cls, v: str) -> str:
        return _required_text(v, "category")

    @field_validator("description")
    @classmethod
    def description_default(cls, v: Optional[str]) -> str:
        return v or ""


class Expense(ExpenseDraft):
    id: Optional[str] = None
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    owner_id: str = Field("", alias="ownerId")

    @field_validator("id", "owner_id", mode="before")
    @classmethod
    def ids_as_text(cls, v: Any) -> Any:
        # the mock API hands out numeric ids in some collections
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ExpenseUpdate(BaseModel):
    """Partial update. All fields optional; at least one must be provided.

    Ownership and identity fields are not editable through an update.
    """

    title: Optional[str] = None
    amount: Optional[float] = Field(None, gt=0)
    category: Optional[str] = None
    description: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return _required_text(v, "title") if v is not None else None

    @field_validator("category")
    @classmethod
    def category_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return _required_text(v, "category") if v is not None else None

    @model_validator(mode="after")
    def at_least_one(self) -> "ExpenseUpdate":
        if not any(
            getattr(self, f) is not None
            for f in ["title", "amount", "category", "description"]
        ):
            raise ValueError("at least one field must be provided for update")
        return self

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
