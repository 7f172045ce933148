import json
from importlib import resources
from pathlib import Path
from typing import Any, Optional

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

from flatbind import logging as flatbind_logging
from flatbind.data_types import ScalarKind
from flatbind.errors import SchemaConsistencyError, SchemaLoadError
from flatbind.schema.schema_types import (Attributes, EnumDef, EnumRef,
                                          EnumVal, FieldDef, RecordDef,
                                          RecordRef, ScalarRef, Schema,
                                          StringRef, TypeRef, UnionRef,
                                          VectorRef)

logger = flatbind_logging.get_logger(__name__)

_SCHEMA_CACHE: Optional[dict] = None
_SCALAR_KINDS = {kind.value: kind for kind in ScalarKind}


def load_schema_definition() -> dict:
    """Return the bundled JSON Schema describing parsed schema documents."""
    global _SCHEMA_CACHE
    if _SCHEMA_CACHE is not None:
        return _SCHEMA_CACHE
    schema_resource = resources.files("flatbind.schema").joinpath("schema.json")
    with schema_resource.open("r", encoding="utf-8") as f:
        _SCHEMA_CACHE = json.load(f)
    return _SCHEMA_CACHE


def validate_document(data: Any) -> None:
    validator = Draft202012Validator(load_schema_definition())
    error = best_match(validator.iter_errors(data))
    if error is not None:
        location = "/".join(str(part) for part in error.absolute_path) or "<root>"
        raise SchemaLoadError(f"schema document invalid at {location}: {error.message}")


def _resolve(name: str, namespace: list[str], known: dict[str, Any]) -> Optional[str]:
    # FlatBuffers resolves unqualified names against the enclosing namespace
    if name in known:
        return name
    for depth in range(len(namespace), 0, -1):
        candidate = ".".join([*namespace[:depth], name])
        if candidate in known:
            return candidate
    return None


class _SchemaBuilder:
    def __init__(self, data: dict):
        self.data = data
        self.record_fixed: dict[str, bool] = {}
        self.enum_kinds: dict[str, ScalarKind] = {}

    def build(self) -> Schema:
        for raw in self.data.get("records", []):
            name = ".".join([*raw.get("namespace", []), raw["name"]])
            self.record_fixed[name] = bool(raw.get("fixed", False))
        enums = [self._build_enum(raw) for raw in self.data.get("enums", [])]
        records = [self._build_record(raw) for raw in self.data.get("records", [])]
        return Schema(
            file_name=self.data["file_name"],
            included_files=list(self.data.get("included_files", [])),
            enums=enums,
            records=records,
        )

    def _scalar_kind(self, value: str, context: str) -> ScalarKind:
        kind = _SCALAR_KINDS.get(value)
        if kind is None:
            raise SchemaConsistencyError(f"{context}: unknown base type '{value}'")
        return kind

    def _build_enum(self, raw: dict) -> EnumDef:
        enum_def = EnumDef(
            name=raw["name"],
            namespace=list(raw.get("namespace", [])),
            underlying_type=self._scalar_kind(
                raw.get("underlying_type", ScalarKind.INT.value), raw["name"]),
            values=[
                EnumVal(
                    name=val["name"],
                    value=int(val["value"]),
                    doc_comment=list(val.get("doc_comment", [])),
                )
                for val in raw.get("values", [])
            ],
            attributes=Attributes(dict(raw.get("attributes", {}))),
            doc_comment=list(raw.get("doc_comment", [])),
            generated=bool(raw.get("generated", False)),
        )
        self.enum_kinds[enum_def.qualified_name] = enum_def.underlying_type
        return enum_def

    def _build_record(self, raw: dict) -> RecordDef:
        namespace = list(raw.get("namespace", []))
        record = RecordDef(
            name=raw["name"],
            namespace=namespace,
            fixed=bool(raw.get("fixed", False)),
            attributes=Attributes(dict(raw.get("attributes", {}))),
            doc_comment=list(raw.get("doc_comment", [])),
            generated=bool(raw.get("generated", False)),
        )
        for raw_field in raw.get("fields", []):
            context = f"{record.qualified_name}.{raw_field['name']}"
            record.fields.append(FieldDef(
                name=raw_field["name"],
                type=self._build_type(raw_field["type"], namespace, context),
                deprecated=bool(raw_field.get("deprecated", False)),
                attributes=Attributes(dict(raw_field.get("attributes", {}))),
                doc_comment=list(raw_field.get("doc_comment", [])),
            ))
        return record

    def _build_type(self, raw: dict, namespace: list[str], context: str) -> TypeRef:
        base = raw["base_type"]
        match base:
            case "string":
                return StringRef()
            case "vector":
                element = raw.get("element")
                if not isinstance(element, dict):
                    raise SchemaConsistencyError(f"{context}: vector without element type")
                return VectorRef(self._build_type(element, namespace, context))
            case "struct":
                name = _resolve(raw.get("record", ""), namespace, self.record_fixed)
                if name is None:
                    raise SchemaConsistencyError(
                        f"{context}: unknown record '{raw.get('record')}'")
                return RecordRef(name=name, fixed=self.record_fixed[name])
            case "union":
                return UnionRef(name=raw.get("union", ""))
        kind = self._scalar_kind(base, context)
        enum_name = raw.get("enum")
        if enum_name:
            resolved = _resolve(enum_name, namespace, self.enum_kinds)
            if resolved is None:
                raise SchemaConsistencyError(f"{context}: unknown enum '{enum_name}'")
            return EnumRef(name=resolved, kind=kind)
        return ScalarRef(kind)


def build_schema(data: Any) -> Schema:
    validate_document(data)
    return _SchemaBuilder(data).build()


def load_schema(path: str) -> Schema:
    schema_path = Path(path)
    try:
        data = json.loads(schema_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SchemaLoadError(f"{schema_path}: not valid JSON: {exc}") from exc
    schema = build_schema(data)
    logger.debug(
        "Loaded schema %s: %d enums, %d records",
        schema.file_name, len(schema.enums), len(schema.records))
    return schema
