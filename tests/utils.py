import pytest

from flatbind.codegen.options import GeneratorOptions
from flatbind.codegen.type_resolver import TypeResolver
from flatbind.schema import build_schema
from flatbind.utils import load_default_config


def scalar(kind):
    return {"base_type": kind}


def enum_type(name, kind="byte"):
    return {"base_type": kind, "enum": name}


def string_type():
    return {"base_type": "string"}


def vector_type(element):
    return {"base_type": "vector", "element": element}


def struct_type(name):
    return {"base_type": "struct", "record": name}


def union_type(name):
    return {"base_type": "union", "union": name}


def field(name, type_, **extra):
    return {"name": name, "type": type_, **extra}


def record(name, fields, *, namespace=("MyGame",), fixed=False, **extra):
    return {
        "name": name,
        "namespace": list(namespace),
        "fixed": fixed,
        "fields": list(fields),
        **extra,
    }


def enum(name, values, *, underlying_type="byte", namespace=("MyGame",), **extra):
    return {
        "name": name,
        "namespace": list(namespace),
        "underlying_type": underlying_type,
        "values": [{"name": n, "value": v} for n, v in values],
        **extra,
    }


def schema_document(*, file_name="monster", enums=(), records=(), included_files=()):
    return {
        "file_name": file_name,
        "included_files": list(included_files),
        "enums": list(enums),
        "records": list(records),
    }


def make_schema(**kwargs):
    return build_schema(schema_document(**kwargs))


def make_resolver(schema, **options):
    return TypeResolver(schema, GeneratorOptions(**options))


def pixel_document():
    return schema_document(
        file_name="pixel",
        enums=[enum("Color", [("Red", 0), ("Green", 1), ("Blue", 2)])],
        records=[record("Pixel", [
            field("color", enum_type("Color")),
            field("label", string_type()),
        ])],
    )


@pytest.fixture
def config():
    return load_default_config()


@pytest.fixture
def pixel_schema():
    return build_schema(pixel_document())
