from dataclasses import dataclass, field
from typing import Any, Optional, Union

from flatbind.data_types import Attribute, ScalarKind
from flatbind.errors import SchemaConsistencyError


@dataclass(frozen=True)
class ScalarRef:
    kind: ScalarKind


@dataclass(frozen=True)
class EnumRef:
    name: str
    kind: ScalarKind


@dataclass(frozen=True)
class StringRef:
    pass


@dataclass(frozen=True)
class VectorRef:
    element: "TypeRef"


@dataclass(frozen=True)
class RecordRef:
    name: str
    fixed: bool


@dataclass(frozen=True)
class UnionRef:
    name: str


TypeRef = Union[ScalarRef, EnumRef, StringRef, VectorRef, RecordRef, UnionRef]


@dataclass
class Attributes:
    raw: dict[str, Any] = field(default_factory=dict)

    def has(self, attr: Attribute) -> bool:
        return attr.value in self.raw

    def get_str(self, attr: Attribute) -> Optional[str]:
        """Return a non-empty string value, or None when absent or malformed."""
        value = self.raw.get(attr.value)
        if not isinstance(value, str):
            return None
        value = value.strip()
        return value or None


@dataclass
class FieldDef:
    name: str
    type: TypeRef
    deprecated: bool = False
    attributes: Attributes = field(default_factory=Attributes)
    doc_comment: list[str] = field(default_factory=list)


def _qualify(namespace: list[str], name: str) -> str:
    return ".".join([*namespace, name])


@dataclass
class RecordDef:
    name: str
    namespace: list[str] = field(default_factory=list)
    fixed: bool = False
    fields: list[FieldDef] = field(default_factory=list)
    attributes: Attributes = field(default_factory=Attributes)
    doc_comment: list[str] = field(default_factory=list)
    generated: bool = False

    @property
    def qualified_name(self) -> str:
        return _qualify(self.namespace, self.name)

    @property
    def active_fields(self) -> list[FieldDef]:
        return [f for f in self.fields if not f.deprecated]


@dataclass
class EnumVal:
    name: str
    value: int
    doc_comment: list[str] = field(default_factory=list)


@dataclass
class EnumDef:
    name: str
    namespace: list[str] = field(default_factory=list)
    underlying_type: ScalarKind = ScalarKind.INT
    values: list[EnumVal] = field(default_factory=list)
    attributes: Attributes = field(default_factory=Attributes)
    doc_comment: list[str] = field(default_factory=list)
    generated: bool = False

    @property
    def qualified_name(self) -> str:
        return _qualify(self.namespace, self.name)


@dataclass
class Schema:
    file_name: str
    included_files: list[str] = field(default_factory=list)
    enums: list[EnumDef] = field(default_factory=list)
    records: list[RecordDef] = field(default_factory=list)

    def record(self, name: str) -> RecordDef:
        for record in self.records:
            if record.qualified_name == name:
                return record
        raise SchemaConsistencyError(f"unknown record '{name}'")

    def enum(self, name: str) -> EnumDef:
        for enum_def in self.enums:
            if enum_def.qualified_name == name:
                return enum_def
        raise SchemaConsistencyError(f"unknown enum '{name}'")
