"""
Product Info Template Domain Models

Templates define the rows of the product information table (the legally
required disclosure shown on a product page). A product picks a template and
stores one value per field label.
"""
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class FieldType(str, Enum):
    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    DATE = "date"


class ProductInfoField(BaseModel):
    """One row of the template"""
    label: str = Field(..., min_length=1, description="Row label")
    type: FieldType = Field(FieldType.TEXT, description="Input type")
    order: int = Field(0, description="Display order")


class ProductInfoTemplate(BaseModel):
    """
    Product info template

    Fields:
        id: Template ID
        name: Template name (e.g. "Food", "Electronics")
        fields: Rows of the information table
        created_at / created_by: Metadata
    """

    id: int = Field(..., description="Template ID")
    name: str = Field(..., description="Template name")
    fields: List[ProductInfoField] = Field(default_factory=list, description="Template fields")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    created_by: Optional[str] = Field(None, description="Admin user ID")

    model_config = ConfigDict(from_attributes=True)

    def ordered_fields(self) -> List[ProductInfoField]:
        return sorted(self.fields, key=lambda field: field.order)

    def render_rows(self, values: Dict[str, str]) -> List[dict]:
        """Label/value rows in display order, '-' for missing values"""
        return [
            {"label": field.label, "type": field.type.value, "value": values.get(field.label) or "-"}
            for field in self.ordered_fields()
        ]

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        data['fields'] = [field.model_dump(mode="json") for field in self.ordered_fields()]
        return data


class TemplateWrite(BaseModel):
    """Schema for creating or replacing a template"""
    name: str = Field(..., min_length=1)
    fields: List[ProductInfoField] = Field(default_factory=list)
