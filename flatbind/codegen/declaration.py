from dataclasses import dataclass
from typing import Optional

from flatbind import logging as flatbind_logging
from flatbind.codegen.type_resolver import (NATIVE_SCALAR_TYPES, TypeContext,
                                            TypeResolver)
from flatbind.data_types import Attribute, ScalarKind
from flatbind.schema.schema_types import EnumDef, FieldDef, RecordDef

logger = flatbind_logging.get_logger(__name__)


@dataclass(frozen=True)
class PropertyDeclaration:
    name: str
    native_type: str
    specifiers: tuple[str, ...]
    doc_comment: tuple[str, ...] = ()

    @property
    def annotation(self) -> str:
        return f"UPROPERTY({', '.join(self.specifiers)})"


@dataclass(frozen=True)
class RecordDeclaration:
    qualified_name: str
    native_name: str
    wire_name: str
    fixed: bool
    value_type: bool
    annotation: str
    header: str
    doc_comment: tuple[str, ...] = ()
    properties: tuple[PropertyDeclaration, ...] = ()

    @property
    def field_order(self) -> tuple[str, ...]:
        return tuple(prop.name for prop in self.properties)


@dataclass(frozen=True)
class EnumeratorDeclaration:
    name: str
    value: int
    doc_comment: tuple[str, ...] = ()


@dataclass(frozen=True)
class EnumDeclaration:
    native_name: str
    underlying_type: str
    annotation: str
    doc_comment: tuple[str, ...] = ()
    enumerators: tuple[EnumeratorDeclaration, ...] = ()


class DeclarationEmitter:
    """Builds the native declaration shells for enums and records.

    ``visited`` is owned by the generation pass and keyed by qualified record
    name; a record already in it, or flagged ``generated`` by the parser,
    yields no declaration.
    """

    def __init__(self, resolver: TypeResolver, visited: Optional[set[str]] = None):
        self.resolver = resolver
        self.visited: set[str] = visited if visited is not None else set()

    def is_emitted(self, record: RecordDef) -> bool:
        return record.generated or record.qualified_name in self.visited

    def emit_enum(self, enum_def: EnumDef) -> Optional[EnumDeclaration]:
        if enum_def.generated:
            return None
        underlying = NATIVE_SCALAR_TYPES[enum_def.underlying_type]
        # Blueprint only accepts uint8 based enums
        if enum_def.underlying_type is ScalarKind.UBYTE:
            annotation = "UENUM(BlueprintType)"
        else:
            annotation = "UENUM()"
        return EnumDeclaration(
            native_name=self.resolver.native_enum_name(enum_def),
            underlying_type=underlying,
            annotation=annotation,
            doc_comment=tuple(enum_def.doc_comment),
            enumerators=tuple(
                EnumeratorDeclaration(val.name, val.value, tuple(val.doc_comment))
                for val in enum_def.values
            ),
        )

    def _property(self, record: RecordDef, field_def: FieldDef) -> PropertyDeclaration:
        attrs = field_def.attributes
        specifiers = [
            "BlueprintReadOnly" if attrs.has(Attribute.READ_ONLY) else "BlueprintReadWrite",
            "SaveGame" if attrs.has(Attribute.SAVE_GAME) else "Transient",
            f'Category = "{self.resolver.category_label(record, field_def)}"',
        ]
        return PropertyDeclaration(
            name=field_def.name,
            native_type=self.resolver.resolve(
                field_def.type, TypeContext.NATIVE_STORAGE, field=field_def),
            specifiers=tuple(specifiers),
            doc_comment=tuple(field_def.doc_comment),
        )

    def emit_declaration(self, record: RecordDef) -> Optional[RecordDeclaration]:
        if self.is_emitted(record):
            logger.debug("Skipping already emitted record %s", record.qualified_name)
            return None

        resolver = self.resolver
        native_name = resolver.native_record_name(record)
        value_type = resolver.is_value_type(record)
        export = resolver.export_macro(record)
        linkage = f"{export} " if export else ""
        if value_type:
            annotation = f"USTRUCT({', '.join(resolver.options.struct_specifiers)})"
            header = f"struct {linkage}{native_name}"
        else:
            annotation = f"UCLASS({', '.join(resolver.options.class_specifiers)})"
            header = f"class {linkage}{native_name} : public UObject"

        declaration = RecordDeclaration(
            qualified_name=record.qualified_name,
            native_name=native_name,
            wire_name=resolver.wire_name(record),
            fixed=record.fixed,
            value_type=value_type,
            annotation=annotation,
            header=header,
            doc_comment=tuple(record.doc_comment),
            properties=tuple(self._property(record, f) for f in record.active_fields),
        )
        self.visited.add(record.qualified_name)
        return declaration

    def forward_declaration(self, record: RecordDef) -> str:
        keyword = "struct" if self.resolver.is_value_type(record) else "class"
        return f"{keyword} {self.resolver.native_record_name(record)};"
