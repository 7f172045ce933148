from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from flatbind.codegen.conversion import Deserializer, Serializer
from flatbind.codegen.declaration import EnumDeclaration, RecordDeclaration

_TEMPLATE_DIR = Path(__file__).with_name("templates")


@lru_cache(maxsize=None)
def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(_TEMPLATE_DIR),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=StrictUndefined,
    )


def _normalize_lines(lines: Iterable[str]) -> tuple[str, ...]:
    normalized: list[str] = []
    for entry in lines:
        if entry is None:
            continue
        parts = str(entry).splitlines()
        if not parts:
            normalized.append("")
            continue
        normalized.extend(parts)
    return tuple(normalized)


@dataclass(frozen=True)
class EnumContext:
    """Template inputs for one native enum."""

    native_name: str
    underlying_type: str
    annotation: str
    doc_comment: tuple[str, ...]
    enumerators: tuple[dict[str, Any], ...]

    @classmethod
    def create(cls, declaration: EnumDeclaration) -> "EnumContext":
        return cls(
            native_name=declaration.native_name,
            underlying_type=declaration.underlying_type,
            annotation=declaration.annotation,
            doc_comment=_normalize_lines(declaration.doc_comment),
            enumerators=tuple(
                {
                    "name": enumerator.name,
                    "value": enumerator.value,
                    "doc_comment": _normalize_lines(enumerator.doc_comment),
                }
                for enumerator in declaration.enumerators
            ),
        )

    def as_template_args(self) -> dict[str, Any]:
        return {
            "native_name": self.native_name,
            "underlying_type": self.underlying_type,
            "annotation": self.annotation,
            "doc_comment": self.doc_comment,
            "enumerators": self.enumerators,
        }


@dataclass(frozen=True)
class RecordContext:
    """Template inputs for one record: declaration plus both conversions."""

    native_name: str
    annotation: str
    header: str
    wire_name: str
    fixed: bool
    doc_comment: tuple[str, ...]
    properties: tuple[dict[str, Any], ...]
    return_type: str
    null_value: str
    construct: str
    result_bind: str
    read_lines: tuple[str, ...]
    write_lines: tuple[str, ...]
    serializer_call: str

    @classmethod
    def create(
        cls,
        *,
        declaration: RecordDeclaration,
        deserializer: Deserializer,
        serializer: Serializer,
    ) -> "RecordContext":
        return cls(
            native_name=declaration.native_name,
            annotation=declaration.annotation,
            header=declaration.header,
            wire_name=declaration.wire_name,
            fixed=declaration.fixed,
            doc_comment=_normalize_lines(declaration.doc_comment),
            properties=tuple(
                {
                    "name": prop.name,
                    "native_type": prop.native_type,
                    "annotation": prop.annotation,
                    "doc_comment": _normalize_lines(prop.doc_comment),
                }
                for prop in declaration.properties
            ),
            return_type=deserializer.return_type,
            null_value=deserializer.null_value,
            construct=deserializer.construct,
            result_bind=deserializer.result_bind,
            read_lines=_normalize_lines(deserializer.lines),
            write_lines=_normalize_lines(serializer.pre_lines),
            serializer_call=serializer.call,
        )

    def as_template_args(self) -> dict[str, Any]:
        return {
            "native_name": self.native_name,
            "annotation": self.annotation,
            "header": self.header,
            "wire_name": self.wire_name,
            "fixed": self.fixed,
            "doc_comment": self.doc_comment,
            "properties": self.properties,
            "return_type": self.return_type,
            "null_value": self.null_value,
            "construct": self.construct,
            "result_bind": self.result_bind,
            "read_lines": self.read_lines,
            "write_lines": self.write_lines,
            "serializer_call": self.serializer_call,
        }


@dataclass(frozen=True)
class FileContext:
    """Template inputs for a whole generated header."""

    includes: tuple[str, ...]
    generated_include: str
    forward_declarations: tuple[str, ...]
    blocks: tuple[str, ...]
    definitions: tuple[str, ...] = ()

    @classmethod
    def create(
        cls,
        *,
        includes: Iterable[str],
        generated_include: str,
        forward_declarations: Iterable[str],
        blocks: Iterable[str],
        definitions: Iterable[str] = (),
    ) -> "FileContext":
        return cls(
            includes=tuple(includes),
            generated_include=generated_include,
            forward_declarations=_normalize_lines(forward_declarations),
            blocks=tuple(blocks),
            definitions=tuple(definitions),
        )

    def as_template_args(self) -> dict[str, Any]:
        return {
            "includes": self.includes,
            "generated_include": self.generated_include,
            "forward_declarations": self.forward_declarations,
            "blocks": self.blocks,
            "definitions": self.definitions,
        }


def render_enum(context: EnumContext) -> str:
    template = _get_env().get_template("enum.j2")
    return template.render(context.as_template_args())


def render_record(context: RecordContext) -> str:
    template = _get_env().get_template("record.j2")
    return template.render(context.as_template_args())


def render_record_definitions(context: RecordContext) -> str:
    template = _get_env().get_template("record_definitions.j2")
    return template.render(context.as_template_args()).rstrip("\n")


def render_file(context: FileContext) -> str:
    template = _get_env().get_template("file.j2")
    return template.render(context.as_template_args()).rstrip("\n") + "\n"


def render_runtime_header() -> str:
    template = _get_env().get_template("runtime_header.j2")
    return template.render().rstrip("\n") + "\n"
