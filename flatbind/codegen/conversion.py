from dataclasses import dataclass
from typing import assert_never

from flatbind import logging as flatbind_logging
from flatbind.codegen.classifier import classify, is_bool
from flatbind.codegen.type_resolver import TypeContext, TypeResolver
from flatbind.codegen.vector_helpers import select_vector_helper
from flatbind.data_types import TypeCategory
from flatbind.errors import UnrepresentableTypeError
from flatbind.schema.schema_types import (EnumRef, FieldDef, RecordDef,
                                          RecordRef, ScalarRef, StringRef,
                                          TypeRef, UnionRef, VectorRef)

logger = flatbind_logging.get_logger(__name__)

_WIRE_BIND = "flatbuffer"
_NATIVE_BIND = "o"
_BUILDER_BIND = "_fbb"
_ELEM_BIND = "elem"

_INLINE_ONLY = (TypeCategory.SCALAR, TypeCategory.ENUM, TypeCategory.FIXED_RECORD)


@dataclass(frozen=True)
class FieldRead:
    field: str
    lines: tuple[str, ...]


@dataclass(frozen=True)
class Deserializer:
    native_name: str
    wire_name: str
    return_type: str
    null_value: str
    construct: str
    reads: tuple[FieldRead, ...] = ()

    @property
    def field_order(self) -> tuple[str, ...]:
        return tuple(read.field for read in self.reads)

    @property
    def result_bind(self) -> str:
        return _NATIVE_BIND

    @property
    def lines(self) -> tuple[str, ...]:
        return tuple(line for read in self.reads for line in read.lines)


@dataclass(frozen=True)
class SerializerArgument:
    field: str
    expression: str
    pre_lines: tuple[str, ...] = ()


@dataclass(frozen=True)
class Serializer:
    wire_name: str
    fixed: bool
    builder: str
    arguments: tuple[SerializerArgument, ...] = ()

    @property
    def field_order(self) -> tuple[str, ...]:
        return tuple(arg.field for arg in self.arguments)

    @property
    def pre_lines(self) -> tuple[str, ...]:
        return tuple(line for arg in self.arguments for line in arg.pre_lines)

    @property
    def call(self) -> str:
        args = [arg.expression for arg in self.arguments]
        if not self.fixed:
            args.insert(0, _BUILDER_BIND)
        return f"{self.builder}({', '.join(args)})"


class ConversionEmitter:
    """Builds both conversion directions for a record.

    Callers run ``check_representable`` once before emitting; the emitters
    themselves only raise when they meet a type with no conversion at all.
    """

    def __init__(self, resolver: TypeResolver):
        self.resolver = resolver

    ######## validation ########
    def check_representable(self, record: RecordDef) -> None:
        """Raise UnrepresentableTypeError for the first field with no conversion path."""
        for field_def in record.active_fields:
            category = classify(field_def.type)
            if category is TypeCategory.UNION:
                raise UnrepresentableTypeError(
                    record.qualified_name, field_def.name, "unions have no native representation")
            if record.fixed and category not in _INLINE_ONLY:
                raise UnrepresentableTypeError(
                    record.qualified_name, field_def.name,
                    "fixed-layout records may only hold scalars, enums and structs")
            if isinstance(field_def.type, VectorRef):
                # raises for vectors of vectors and of unions
                select_vector_helper(
                    field_def.type, self.resolver,
                    record=record.qualified_name, field=field_def.name)

    ######## wire -> native ########
    def _native_target(self, record: RecordDef, field_def: FieldDef) -> str:
        if self.resolver.is_value_type(record):
            return f"{_NATIVE_BIND}.{field_def.name}"
        return f"{_NATIVE_BIND}->{field_def.name}"

    def _read_value(
        self, type_ref: TypeRef, source: str, record: RecordDef, field_def: FieldDef
    ) -> str:
        """Expression converting an already fetched wire value into its native form."""
        match type_ref:
            case ScalarRef():
                # wire booleans are bytes, any nonzero value is true
                return f"{source} != 0" if is_bool(type_ref) else source
            case EnumRef(name=name):
                enum_name = self.resolver.native_enum_name(self.resolver.schema.enum(name))
                return f"static_cast<{enum_name}>({source})"
            case StringRef():
                return f"FString(UTF8_TO_TCHAR({source}->c_str()))"
            case RecordRef(name=name):
                nested = self.resolver.schema.record(name)
                return f"{self.resolver.native_record_name(nested)}::FromFlatBuffer({source})"
            case VectorRef() | UnionRef():
                raise UnrepresentableTypeError(
                    record.qualified_name, field_def.name,
                    f"no element conversion for {classify(type_ref).name.lower()}")
            case _:
                assert_never(type_ref)

    def _read_field(self, record: RecordDef, field_def: FieldDef) -> FieldRead:
        target = self._native_target(record, field_def)
        accessor = f"{_WIRE_BIND}->{field_def.name}()"
        match field_def.type:
            case ScalarRef() | EnumRef() | RecordRef(fixed=False):
                lines = [f"{target} = {self._read_value(field_def.type, accessor, record, field_def)};"]
            case StringRef():
                value = self._read_value(field_def.type, accessor, record, field_def)
                lines = [f"{target} = {accessor} ? {value} : FString();"]
            case RecordRef(fixed=True):
                # struct accessors of a struct return a reference, of a table a pointer
                source = f"&{accessor}" if record.fixed else accessor
                lines = [f"{target} = {self._read_value(field_def.type, source, record, field_def)};"]
            case VectorRef(element=element):
                value = self._read_value(element, _ELEM_BIND, record, field_def)
                lines = [
                    f"if ({accessor}) {{",
                    f"  {target}.Reserve({accessor}->size());",
                    f"  for (auto {_ELEM_BIND} : *{accessor}) {{",
                    f"    {target}.Add({value});",
                    "  }",
                    "}",
                ]
            case UnionRef():
                raise UnrepresentableTypeError(
                    record.qualified_name, field_def.name, "unions have no native representation")
            case _:
                assert_never(field_def.type)
        return FieldRead(field=field_def.name, lines=tuple(lines))

    def emit_deserializer(self, record: RecordDef) -> Deserializer:
        resolver = self.resolver
        native_name = resolver.native_record_name(record)
        if resolver.is_value_type(record):
            return_type = native_name
            null_value = f"{native_name}()"
            construct = f"{native_name} {_NATIVE_BIND};"
        else:
            return_type = f"{native_name}*"
            null_value = "nullptr"
            construct = f"{native_name} *{_NATIVE_BIND} = NewObject<{native_name}>();"
        return Deserializer(
            native_name=native_name,
            wire_name=resolver.wire_name(record),
            return_type=return_type,
            null_value=null_value,
            construct=construct,
            reads=tuple(self._read_field(record, f) for f in record.active_fields),
        )

    ######## native -> wire ########
    def _nested_struct(self, nested: RecordDef, member: str) -> str:
        if self.resolver.is_value_type(nested):
            return f"{member}.ToFlatBufferStruct()"
        return f"{member} ? {member}->ToFlatBufferStruct() : {self.resolver.wire_name(nested)}()"

    def _nested_table(self, nested: RecordDef, member: str) -> str:
        if self.resolver.is_value_type(nested):
            return f"{member}.ToFlatBuffer({_BUILDER_BIND})"
        wire = self.resolver.wire_name(nested)
        return f"{member} ? {member}->ToFlatBuffer({_BUILDER_BIND}) : flatbuffers::Offset<{wire}>()"

    def _write_field(self, record: RecordDef, field_def: FieldDef) -> SerializerArgument:
        name = field_def.name
        local = f"_{name}"
        type_ref = field_def.type
        schema = self.resolver.schema
        match type_ref:
            case ScalarRef():
                return SerializerArgument(name, name)
            case EnumRef():
                wire_enum = self.resolver.resolve(type_ref, TypeContext.WIRE_BUILDING)
                value = f"{name}.GetValue()" if self.resolver.is_byte_enum(type_ref, field_def) else name
                return SerializerArgument(name, f"static_cast<{wire_enum}>({value})")
            case StringRef():
                local_type = self.resolver.resolve(type_ref, TypeContext.WIRE_BUILDING)
                return SerializerArgument(
                    name, local,
                    (f"const {local_type} {local} = {_BUILDER_BIND}.CreateString(TCHAR_TO_UTF8(*{name}));",))
            case RecordRef(name=nested_name, fixed=True):
                nested = schema.record(nested_name)
                value = self._nested_struct(nested, name)
                if record.fixed:
                    return SerializerArgument(name, value)
                wire = self.resolver.wire_name(nested)
                return SerializerArgument(name, f"&{local}", (f"const {wire} {local} = {value};",))
            case RecordRef(name=nested_name, fixed=False):
                local_type = self.resolver.resolve(type_ref, TypeContext.WIRE_BUILDING)
                value = self._nested_table(schema.record(nested_name), name)
                return SerializerArgument(name, local, (f"const {local_type} {local} = {value};",))
            case VectorRef():
                helper = select_vector_helper(
                    type_ref, self.resolver, record=record.qualified_name, field=name)
                local_type = self.resolver.resolve(type_ref, TypeContext.WIRE_BUILDING)
                return SerializerArgument(
                    name, local,
                    (f"const {local_type} {local} = {helper.render(name, _BUILDER_BIND)};",))
            case UnionRef():
                raise UnrepresentableTypeError(
                    record.qualified_name, name, "unions have no native representation")
            case _:
                assert_never(type_ref)

    def emit_serializer(self, record: RecordDef) -> Serializer:
        wire_name = self.resolver.wire_name(record)
        builder = wire_name if record.fixed else self.resolver.wire_builder_name(record)
        return Serializer(
            wire_name=wire_name,
            fixed=record.fixed,
            builder=builder,
            arguments=tuple(self._write_field(record, f) for f in record.active_fields),
        )
