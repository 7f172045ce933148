from .schema_loader import build_schema, load_schema
from .schema_types import (Attributes, EnumDef, EnumRef, EnumVal, FieldDef,
                           RecordDef, RecordRef, ScalarRef, Schema, StringRef,
                           TypeRef, UnionRef, VectorRef)

__all__ = [
    'Attributes',
    'EnumDef',
    'EnumRef',
    'EnumVal',
    'FieldDef',
    'RecordDef',
    'RecordRef',
    'ScalarRef',
    'Schema',
    'StringRef',
    'TypeRef',
    'UnionRef',
    'VectorRef',
    'build_schema',
    'load_schema',
]
