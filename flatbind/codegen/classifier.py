from flatbind.data_types import ScalarKind, TypeCategory
from flatbind.errors import SchemaConsistencyError
from flatbind.schema.schema_types import (EnumRef, RecordRef, ScalarRef,
                                          StringRef, TypeRef, UnionRef,
                                          VectorRef)


def classify(type_ref: TypeRef) -> TypeCategory:
    match type_ref:
        case ScalarRef():
            return TypeCategory.SCALAR
        case EnumRef():
            return TypeCategory.ENUM
        case StringRef():
            return TypeCategory.STRING
        case VectorRef():
            return TypeCategory.VECTOR
        case RecordRef(fixed=True):
            return TypeCategory.FIXED_RECORD
        case RecordRef(fixed=False):
            return TypeCategory.VARIABLE_RECORD
        case UnionRef():
            return TypeCategory.UNION
        case _:
            raise SchemaConsistencyError(f"unrecognized type reference: {type_ref!r}")


def classify_element(type_ref: VectorRef) -> TypeCategory:
    return classify(type_ref.element)


def is_bool(type_ref: TypeRef) -> bool:
    return isinstance(type_ref, ScalarRef) and type_ref.kind is ScalarKind.BOOL
