from enum import Enum, auto
from typing import Optional, Union, assert_never

from flatbind import logging as flatbind_logging
from flatbind.codegen.options import GeneratorOptions
from flatbind.data_types import Attribute, ScalarKind
from flatbind.errors import SchemaConsistencyError
from flatbind.schema.schema_types import (EnumDef, EnumRef, FieldDef,
                                          RecordDef, RecordRef, ScalarRef,
                                          Schema, StringRef, TypeRef, UnionRef,
                                          VectorRef)

logger = flatbind_logging.get_logger(__name__)


class TypeContext(Enum):
    WIRE_BUILDING = auto()
    NATIVE_STORAGE = auto()


# Unreal primitive names, used for both native storage and builder arguments.
NATIVE_SCALAR_TYPES: dict[ScalarKind, str] = {
    ScalarKind.BOOL: "bool",
    ScalarKind.BYTE: "int8",
    ScalarKind.UBYTE: "uint8",
    ScalarKind.SHORT: "int16",
    ScalarKind.USHORT: "uint16",
    ScalarKind.INT: "int32",
    ScalarKind.UINT: "uint32",
    ScalarKind.LONG: "int64",
    ScalarKind.ULONG: "uint64",
    ScalarKind.FLOAT: "float",
    ScalarKind.DOUBLE: "double",
    ScalarKind.UTYPE: "uint8",
}

# Storage types of the FlatBuffers C++ runtime.
WIRE_SCALAR_TYPES: dict[ScalarKind, str] = {
    ScalarKind.BOOL: "uint8_t",
    ScalarKind.BYTE: "int8_t",
    ScalarKind.UBYTE: "uint8_t",
    ScalarKind.SHORT: "int16_t",
    ScalarKind.USHORT: "uint16_t",
    ScalarKind.INT: "int32_t",
    ScalarKind.UINT: "uint32_t",
    ScalarKind.LONG: "int64_t",
    ScalarKind.ULONG: "uint64_t",
    ScalarKind.FLOAT: "float",
    ScalarKind.DOUBLE: "double",
    ScalarKind.UTYPE: "uint8_t",
}

WIRE_STRING_OFFSET = "flatbuffers::Offset<flatbuffers::String>"

Definition = Union[RecordDef, EnumDef]


class TypeResolver:
    def __init__(self, schema: Schema, options: Optional[GeneratorOptions] = None):
        self.schema = schema
        self.options = options or GeneratorOptions()

    ######## names ########
    def _native_base_name(self, definition: Definition) -> str:
        if self.options.qualify_native_names and definition.namespace:
            return self.options.name_separator.join([*definition.namespace, definition.name])
        return definition.name

    def is_value_type(self, record: RecordDef) -> bool:
        return record.attributes.has(Attribute.VALUE_TYPE)

    def native_record_name(self, record: RecordDef) -> str:
        prefix = self.options.value_prefix if self.is_value_type(record) else self.options.reference_prefix
        return prefix + self._native_base_name(record)

    def native_enum_name(self, enum_def: EnumDef) -> str:
        return self.options.enum_prefix + self._native_base_name(enum_def)

    def wire_name(self, definition: Definition) -> str:
        return "::".join([*definition.namespace, definition.name])

    def wire_builder_name(self, record: RecordDef) -> str:
        return "::".join([*record.namespace, f"Create{record.name}"])

    def category_label(self, record: RecordDef, field: FieldDef) -> str:
        override = field.attributes.get_str(Attribute.CATEGORY)
        if override is not None:
            return override
        if field.attributes.has(Attribute.CATEGORY):
            logger.warning(
                "Ignoring malformed %s attribute on %s.%s",
                Attribute.CATEGORY.value, record.qualified_name, field.name)
        return "|".join([*record.namespace, record.name])

    def export_macro(self, record: RecordDef) -> Optional[str]:
        macro = record.attributes.get_str(Attribute.EXPORT)
        if macro is None and record.attributes.has(Attribute.EXPORT):
            logger.warning(
                "Ignoring empty %s attribute on %s",
                Attribute.EXPORT.value, record.qualified_name)
        return macro

    ######## enums ########
    def is_byte_enum(self, type_ref: EnumRef, field: Optional[FieldDef] = None) -> bool:
        enum_def = self.schema.enum(type_ref.name)
        if enum_def.attributes.has(Attribute.BYTE_ENUM):
            return True
        return field is not None and field.attributes.has(Attribute.BYTE_ENUM)

    def native_enum_type(self, type_ref: EnumRef, field: Optional[FieldDef] = None) -> str:
        name = self.native_enum_name(self.schema.enum(type_ref.name))
        if self.is_byte_enum(type_ref, field):
            return f"TEnumAsByte<{name}>"
        return name

    ######## records ########
    def native_record_type(self, type_ref: RecordRef) -> str:
        record = self.schema.record(type_ref.name)
        name = self.native_record_name(record)
        return name if self.is_value_type(record) else f"{name}*"

    ######## types ########
    def wire_element_type(self, type_ref: TypeRef) -> str:
        """Element type of a FlatBuffers vector holding ``type_ref``."""
        match type_ref:
            case ScalarRef(kind=kind) | EnumRef(kind=kind):
                return WIRE_SCALAR_TYPES[kind]
            case StringRef():
                return WIRE_STRING_OFFSET
            case RecordRef(fixed=True):
                return f"const {self.wire_name(self.schema.record(type_ref.name))} *"
            case RecordRef(fixed=False):
                return f"flatbuffers::Offset<{self.wire_name(self.schema.record(type_ref.name))}>"
            case VectorRef() | UnionRef():
                raise SchemaConsistencyError(f"no vector element type for {type_ref!r}")
            case _:
                assert_never(type_ref)

    def resolve(
        self,
        type_ref: TypeRef,
        context: TypeContext,
        *,
        field: Optional[FieldDef] = None,
        container_fixed: bool = False,
    ) -> str:
        match context:
            case TypeContext.NATIVE_STORAGE:
                return self._resolve_native(type_ref, field)
            case TypeContext.WIRE_BUILDING:
                return self._resolve_wire(type_ref, container_fixed)
            case _:
                assert_never(context)

    def _resolve_native(self, type_ref: TypeRef, field: Optional[FieldDef]) -> str:
        match type_ref:
            case ScalarRef(kind=kind):
                return NATIVE_SCALAR_TYPES[kind]
            case EnumRef():
                return self.native_enum_type(type_ref, field)
            case StringRef():
                return "FString"
            case VectorRef(element=element):
                return f"TArray<{self._resolve_native(element, field)}>"
            case RecordRef():
                return self.native_record_type(type_ref)
            case UnionRef():
                raise SchemaConsistencyError(f"no native type for union '{type_ref.name}'")
            case _:
                assert_never(type_ref)

    def _resolve_wire(self, type_ref: TypeRef, container_fixed: bool) -> str:
        match type_ref:
            case ScalarRef(kind=kind):
                return NATIVE_SCALAR_TYPES[kind]
            case EnumRef():
                return self.wire_name(self.schema.enum(type_ref.name))
            case StringRef():
                return WIRE_STRING_OFFSET
            case VectorRef(element=element):
                return f"flatbuffers::Offset<flatbuffers::Vector<{self.wire_element_type(element)}>>"
            case RecordRef(fixed=True):
                wire = self.wire_name(self.schema.record(type_ref.name))
                # struct constructors take embedded structs by reference,
                # table builders take them by pointer
                return f"const {wire} &" if container_fixed else f"const {wire} *"
            case RecordRef(fixed=False):
                return f"flatbuffers::Offset<{self.wire_name(self.schema.record(type_ref.name))}>"
            case UnionRef():
                raise SchemaConsistencyError(f"no wire type for union '{type_ref.name}'")
            case _:
                assert_never(type_ref)
