import os
from typing import Optional

from flatbind import logging as flatbind_logging
from flatbind.codegen.conversion import ConversionEmitter
from flatbind.codegen.declaration import DeclarationEmitter
from flatbind.codegen.options import GeneratorOptions
from flatbind.codegen.templates import (EnumContext, FileContext,
                                        RecordContext, render_enum,
                                        render_file, render_record,
                                        render_record_definitions)
from flatbind.codegen.type_resolver import TypeResolver
from flatbind.errors import UnrepresentableTypeError
from flatbind.schema.schema_types import (EnumDef, RecordDef, RecordRef,
                                          Schema, VectorRef)
from flatbind.utils import save_code

logger = flatbind_logging.get_logger(__name__)

_ENGINE_INCLUDES = ("CoreMinimal.h", "UObject/Object.h")


def _strip_path_and_extension(file_path: str) -> str:
    return os.path.splitext(os.path.basename(file_path))[0]


class GenerationPass:
    """One top-to-bottom pass over a schema file.

    Every pass owns its own visited set, so reusing a Schema across passes
    (or generating several files from one process) never leaks state.
    """

    def __init__(self, schema: Schema, options: Optional[GeneratorOptions] = None):
        self.schema = schema
        self.options = options or GeneratorOptions()
        self.resolver = TypeResolver(schema, self.options)
        self.visited: set[str] = set()
        self.declarations = DeclarationEmitter(self.resolver, self.visited)
        self.conversions = ConversionEmitter(self.resolver)

    def generate_enum(self, enum_def: EnumDef) -> Optional[str]:
        declaration = self.declarations.emit_enum(enum_def)
        if declaration is None:
            return None
        return render_enum(EnumContext.create(declaration))

    def generate_record(self, record: RecordDef) -> Optional[tuple[str, str]]:
        """Return the class declaration and its out-of-class member definitions."""
        if self.declarations.is_emitted(record):
            return None
        # nothing of the record is emitted unless every field converts
        self.conversions.check_representable(record)
        declaration = self.declarations.emit_declaration(record)
        if declaration is None:
            return None
        context = RecordContext.create(
            declaration=declaration,
            deserializer=self.conversions.emit_deserializer(record),
            serializer=self.conversions.emit_serializer(record),
        )
        logger.debug(
            "Generated %s for %s (%d fields)",
            declaration.native_name, record.qualified_name, len(declaration.properties))
        return render_record(context), render_record_definitions(context)

    def _value_members(self, record: RecordDef) -> list[tuple[str, RecordDef]]:
        """(field, record) pairs for value-type records held by value in ``record``."""
        members = []
        for field_def in record.active_fields:
            type_ref = field_def.type
            if isinstance(type_ref, VectorRef):
                type_ref = type_ref.element
            if isinstance(type_ref, RecordRef):
                nested = self.schema.record(type_ref.name)
                if self.resolver.is_value_type(nested):
                    members.append((field_def.name, nested))
        return members

    def declaration_order(self, records: list[RecordDef]) -> list[RecordDef]:
        """Schema order, except that a value-type record precedes every record holding it."""
        pending = {record.qualified_name for record in records}
        ordered: list[RecordDef] = []
        placed: set[str] = set()
        in_progress: set[str] = set()

        def place(record: RecordDef) -> None:
            name = record.qualified_name
            if name in placed:
                return
            in_progress.add(name)
            for field_name, nested in self._value_members(record):
                if nested.qualified_name not in pending:
                    continue
                if nested.qualified_name in in_progress:
                    raise UnrepresentableTypeError(
                        name, field_name, "value-type records cannot contain each other by value")
                place(nested)
            in_progress.discard(name)
            placed.add(name)
            ordered.append(record)

        for record in records:
            place(record)
        return ordered

    def includes(self) -> list[str]:
        file_name = self.schema.file_name
        includes = [*_ENGINE_INCLUDES, self.options.runtime_header, f"{file_name}_generated.h"]
        if self.options.include_dependence_headers:
            for included in self.schema.included_files:
                basename = _strip_path_and_extension(included)
                header = f"{basename}_generated.h"
                if basename != file_name and header not in includes:
                    includes.append(header)
        return includes

    def run(self) -> str:
        enum_blocks = [
            block for block in map(self.generate_enum, self.schema.enums) if block]

        # forward declarations for everything, records may reference each other
        forward_declarations = [
            self.declarations.forward_declaration(record) for record in self.schema.records]

        record_blocks: list[str] = []
        definitions: list[str] = []
        for fixed in (True, False):
            group = [record for record in self.schema.records if record.fixed is fixed]
            for record in self.declaration_order(group):
                generated = self.generate_record(record)
                if generated:
                    record_blocks.append(generated[0])
                    definitions.append(generated[1])

        # only output file-level code if there were any declarations
        if not enum_blocks and not record_blocks:
            logger.info("No declarations to generate for %s", self.schema.file_name)
            return ""

        # member bodies follow all classes so they only ever see complete types
        return render_file(FileContext.create(
            includes=self.includes(),
            generated_include=f"{self.schema.file_name}{self.options.file_suffix}.generated.h",
            forward_declarations=forward_declarations,
            blocks=[*enum_blocks, *record_blocks],
            definitions=definitions,
        ))


def generate_ue4(schema: Schema, options: Optional[GeneratorOptions] = None) -> str:
    """Return the header text for ``schema``, or an empty string if it declares nothing."""
    return GenerationPass(schema, options).run()


def generated_file_name(path: str, file_name: str, options: Optional[GeneratorOptions] = None) -> str:
    options = options or GeneratorOptions()
    return os.path.join(path, f"{file_name}{options.file_suffix}.h")


def save_generated_file(file_path: str, code: str) -> bool:
    try:
        save_code(file_path, code)
    except OSError as exc:
        logger.error("Failed to write %s: %s", file_path, exc)
        return False
    logger.info("Generated: %s", file_path)
    return True


def generate_file(schema: Schema, path: str, options: Optional[GeneratorOptions] = None) -> bool:
    code = generate_ue4(schema, options)
    if not code:
        return True
    return save_generated_file(generated_file_name(path, schema.file_name, options), code)


def make_rule(
    schema: Schema,
    path: str,
    schema_path: str,
    options: Optional[GeneratorOptions] = None,
) -> str:
    target = generated_file_name(path, _strip_path_and_extension(schema.file_name), options)
    dependencies = [schema_path]
    for included in schema.included_files:
        if included not in dependencies:
            dependencies.append(included)
    return f"{target}: {' '.join(dependencies)}"
