import pytest

from flatbind.codegen.classifier import classify, classify_element, is_bool
from flatbind.data_types import ScalarKind, TypeCategory
from flatbind.errors import SchemaConsistencyError
from flatbind.schema import (EnumRef, RecordRef, ScalarRef, StringRef,
                             UnionRef, VectorRef)


@pytest.mark.parametrize("type_ref, category", [
    (ScalarRef(ScalarKind.INT), TypeCategory.SCALAR),
    (EnumRef("MyGame.Color", ScalarKind.BYTE), TypeCategory.ENUM),
    (StringRef(), TypeCategory.STRING),
    (VectorRef(StringRef()), TypeCategory.VECTOR),
    (RecordRef("MyGame.Vec3", fixed=True), TypeCategory.FIXED_RECORD),
    (RecordRef("MyGame.Monster", fixed=False), TypeCategory.VARIABLE_RECORD),
    (UnionRef("MyGame.Equipment"), TypeCategory.UNION),
])
def test_classify(type_ref, category):
    assert classify(type_ref) is category


def test_classify_rejects_unknown_type_reference():
    with pytest.raises(SchemaConsistencyError):
        classify("short")


def test_classify_element():
    assert classify_element(VectorRef(RecordRef("MyGame.Vec3", fixed=True))) is TypeCategory.FIXED_RECORD
    assert classify_element(VectorRef(VectorRef(StringRef()))) is TypeCategory.VECTOR


def test_is_bool():
    assert is_bool(ScalarRef(ScalarKind.BOOL))
    assert not is_bool(ScalarRef(ScalarKind.UBYTE))
    assert not is_bool(StringRef())
