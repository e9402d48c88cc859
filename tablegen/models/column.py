"""Pydantic schemas for catalog columns and their resolved field types."""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict


class KeyRole(str, Enum):
    """Index role of a column, valued as information_schema.COLUMNS.COLUMN_KEY reports it."""
    NONE = ""
    PRIMARY = "PRI"
    UNIQUE = "UNI"
    INDEX = "MUL"


class TargetType(str, Enum):
    INT = "int"
    BOOL = "bool"
    FLOAT = "float"
    TIMESTAMP = "timestamp"
    TEXT = "text"


class ColumnDescriptor(BaseModel):
    """One catalog row. Never mutated once the catalog reader returns it."""
    model_config = ConfigDict(frozen=True)

    name: str
    nullable: bool = True
    key_role: KeyRole = KeyRole.NONE
    declared_type: str
    full_type: str = ""
    default_value: Optional[str] = None
    extra: str = ""

    @classmethod
    def from_catalog_row(
        cls,
        name: str,
        is_nullable: str,
        column_key: Optional[str],
        data_type: str,
        column_type: Optional[str],
        column_default: Optional[str],
        extra: Optional[str],
    ) -> "ColumnDescriptor":
        return cls(
            name=name,
            nullable=str(is_nullable).upper() == "YES",
            key_role=KeyRole(column_key or ""),
            declared_type=str(data_type).lower(),
            full_type=column_type or "",
            default_value=column_default,
            extra=extra or "",
        )

    @property
    def is_nullable_flag(self) -> str:
        return "YES" if self.nullable else "NO"

    @property
    def default_literal(self) -> str:
        """Declared default, with a missing default and the literal NULL both mapped to ''."""
        if self.default_value is None or self.default_value.lower() == "null":
            return ""
        return self.default_value


class ForeignKey(BaseModel):
    model_config = ConfigDict(frozen=True)

    column: str
    referred_table: str
    referred_column: str


class ResolvedField(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    attr: str                       # python identifier used in generated code
    target_type: TargetType
    nullable: bool
    is_primary_key: bool = False
    default_literal: str = ""
    column: ColumnDescriptor


class KeySet(BaseModel):
    """Primary-key fields in catalog order."""
    fields: list[ResolvedField] = []

    @property
    def arity(self) -> int:
        return len(self.fields)

    @property
    def names(self) -> list[str]:
        return [f.name for f in self.fields]

    @property
    def is_single(self) -> bool:
        return self.arity == 1

    @property
    def is_composite(self) -> bool:
        return self.arity > 1

    @property
    def first(self) -> Optional[ResolvedField]:
        return self.fields[0] if self.fields else None
