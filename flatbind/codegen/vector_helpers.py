"""Selection of the runtime helper that turns a ``TArray`` into a wire vector.

Each element category has its own wire layout: scalars are copied inline,
strings and tables become arrays of offsets, and structs are stored inline by
value. The helper bodies live in the runtime header (see
``templates/runtime_header.j2``); this module only decides which one a given
vector field calls.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, assert_never

from flatbind.codegen.classifier import classify_element, is_bool
from flatbind.codegen.type_resolver import TypeResolver
from flatbind.data_types import TypeCategory
from flatbind.errors import UnrepresentableTypeError
from flatbind.schema.schema_types import VectorRef

RUNTIME_NAMESPACE = "flatbuffers::ue4"


class VectorHelper(Enum):
    SCALAR = "CreateScalarVector"
    STRING = "CreateStringVector"
    TABLE = "CreateTableVector"
    STRUCT = "CreateStructVector"


@dataclass(frozen=True)
class VectorHelperCall:
    helper: VectorHelper
    template_arg: Optional[str] = None
    # per-element static_cast instead of a bulk copy
    cast: bool = False

    @property
    def function_name(self) -> str:
        if self.helper is VectorHelper.SCALAR and self.cast:
            return f"{RUNTIME_NAMESPACE}::CreateCastVector"
        return f"{RUNTIME_NAMESPACE}::{self.helper.value}"

    def render(self, source: str, builder: str = "_fbb") -> str:
        template_args = f"<{self.template_arg}>" if self.template_arg else ""
        return f"{self.function_name}{template_args}({builder}, {source})"


def select_vector_helper(
    vector: VectorRef,
    resolver: TypeResolver,
    *,
    record: str = "",
    field: str = "",
) -> VectorHelperCall:
    element = vector.element
    category = classify_element(vector)
    match category:
        case TypeCategory.SCALAR:
            # native bool and the wire byte differ in type, other scalars only
            # differ in spelling (int64 vs int64_t) and are copied in bulk
            return VectorHelperCall(
                VectorHelper.SCALAR, resolver.wire_element_type(element), cast=is_bool(element))
        case TypeCategory.ENUM:
            return VectorHelperCall(
                VectorHelper.SCALAR, resolver.wire_element_type(element), cast=True)
        case TypeCategory.STRING:
            return VectorHelperCall(VectorHelper.STRING)
        case TypeCategory.VARIABLE_RECORD:
            return VectorHelperCall(VectorHelper.TABLE)
        case TypeCategory.FIXED_RECORD:
            return VectorHelperCall(VectorHelper.STRUCT)
        case TypeCategory.VECTOR:
            raise UnrepresentableTypeError(record, field, "vectors of vectors are not supported")
        case TypeCategory.UNION:
            raise UnrepresentableTypeError(record, field, "vectors of unions are not supported")
        case _:
            assert_never(category)
