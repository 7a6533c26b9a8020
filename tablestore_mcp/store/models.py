"""Response models for the record store API.

Every backend response is validated against one of these models before it is
handed to the MCP layer. Unknown keys are kept (``extra="allow"``) so that
newer API fields survive a round trip through ``model_dump``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field as PydanticField, ValidationError, field_validator, model_validator

logger = logging.getLogger(__name__)

# Tagged union of everything a record cell can hold.
FieldValue = Union[None, bool, int, float, str, List["FieldValue"], Dict[str, "FieldValue"]]

TEXT_FIELD_TYPES = (
    "singleLineText",
    "multilineText",
    "richText",
    "email",
    "url",
    "phoneNumber",
    "lookup",
    "rollup",
)


class _ApiModel(BaseModel):
    model_config = {"extra": "allow"}


class Base(_ApiModel):
    id: str
    name: str
    permissionLevel: str


class ListBasesResponse(_ApiModel):
    bases: List[Base]
    offset: Optional[str] = None


class Field(_ApiModel):
    id: str
    name: str
    type: str
    description: Optional[str] = None
    options: Optional[Dict[str, Any]] = None


class View(_ApiModel):
    id: str
    name: str
    type: Optional[str] = None


class Table(_ApiModel):
    id: str
    name: str
    description: Optional[str] = None
    primaryFieldId: str
    fields: List[Field]
    views: List[View] = PydanticField(default_factory=list)

    @model_validator(mode="after")
    def _primary_field_resolves(self) -> "Table":
        if not any(field.id == self.primaryFieldId for field in self.fields):
            raise ValueError(
                f"primaryFieldId {self.primaryFieldId} is not a field of table {self.id}"
            )
        return self

    @property
    def primary_field(self) -> Optional[Field]:
        for field in self.fields:
            if field.id == self.primaryFieldId:
                return field
        return None

    def find_field(self, id_or_name: str) -> Optional[Field]:
        for field in self.fields:
            if field.id == id_or_name or field.name == id_or_name:
                return field
        return None


class BaseSchema(_ApiModel):
    tables: List[Table]

    @field_validator("tables", mode="before")
    @classmethod
    def _drop_invalid_tables(cls, value: Any) -> Any:
        """Validate tables one by one so a single malformed table is skipped."""

        if not isinstance(value, list):
            return value
        tables: List[Table] = []
        for raw in value:
            try:
                tables.append(Table.model_validate(raw))
            except ValidationError as exc:
                table_id = raw.get("id") if isinstance(raw, dict) else None
                logger.warning("Ignoring malformed table %s: %s", table_id, exc)
        return tables

    def find_table(self, table_id: str) -> Optional[Table]:
        for table in self.tables:
            if table.id == table_id:
                return table
        return None


class Record(_ApiModel):
    id: str
    fields: Dict[str, Any] = PydanticField(default_factory=dict)
    createdTime: Optional[str] = None


class RecordPage(_ApiModel):
    records: List[Record]
    offset: Optional[str] = None


class RecordList(_ApiModel):
    records: List[Record]


class DeletedRecord(_ApiModel):
    id: str
    deleted: bool


class DeletedRecordList(_ApiModel):
    records: List[DeletedRecord]


__all__ = [
    "Base",
    "BaseSchema",
    "DeletedRecord",
    "DeletedRecordList",
    "Field",
    "FieldValue",
    "ListBasesResponse",
    "Record",
    "RecordList",
    "RecordPage",
    "TEXT_FIELD_TYPES",
    "Table",
    "View",
]
