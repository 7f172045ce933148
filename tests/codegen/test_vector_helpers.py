import pytest

from flatbind.codegen.vector_helpers import (VectorHelper, VectorHelperCall,
                                             select_vector_helper)
from flatbind.errors import UnrepresentableTypeError
from flatbind.schema import (EnumRef, RecordRef, ScalarRef, StringRef,
                             UnionRef, VectorRef)
from flatbind.data_types import ScalarKind
from tests.utils import enum, field, make_resolver, make_schema, record, scalar


@pytest.fixture
def resolver():
    schema = make_schema(
        enums=[enum("Color", [("Red", 0)], underlying_type="ubyte")],
        records=[
            record("Vec3", [field("x", scalar("float"))], fixed=True),
            record("Weapon", [field("damage", scalar("short"))]),
        ],
    )
    return make_resolver(schema)


def test_plain_scalars_are_bulk_copied(resolver):
    call = select_vector_helper(VectorRef(ScalarRef(ScalarKind.SHORT)), resolver)

    assert call == VectorHelperCall(VectorHelper.SCALAR, "int16_t")
    assert call.render("hp") == "flatbuffers::ue4::CreateScalarVector<int16_t>(_fbb, hp)"


@pytest.mark.parametrize("kind, wire", [
    (ScalarKind.LONG, "int64_t"),
    (ScalarKind.ULONG, "uint64_t"),
    (ScalarKind.UBYTE, "uint8_t"),
    (ScalarKind.DOUBLE, "double"),
])
def test_scalar_vectors_use_the_wire_element_type(resolver, kind, wire):
    call = select_vector_helper(VectorRef(ScalarRef(kind)), resolver)

    assert call.render("values") == f"flatbuffers::ue4::CreateScalarVector<{wire}>(_fbb, values)"


def test_booleans_are_cast_to_bytes(resolver):
    call = select_vector_helper(VectorRef(ScalarRef(ScalarKind.BOOL)), resolver)

    assert call.cast
    assert call.render("flags") == "flatbuffers::ue4::CreateCastVector<uint8_t>(_fbb, flags)"


def test_enums_are_cast_to_their_underlying_type(resolver):
    call = select_vector_helper(VectorRef(EnumRef("MyGame.Color", ScalarKind.UBYTE)), resolver)

    assert call.render("colors") == "flatbuffers::ue4::CreateCastVector<uint8_t>(_fbb, colors)"


@pytest.mark.parametrize("element, rendered", [
    (StringRef(), "flatbuffers::ue4::CreateStringVector(_fbb, names)"),
    (RecordRef("MyGame.Weapon", fixed=False), "flatbuffers::ue4::CreateTableVector(_fbb, names)"),
    (RecordRef("MyGame.Vec3", fixed=True), "flatbuffers::ue4::CreateStructVector(_fbb, names)"),
])
def test_offset_and_struct_helpers(resolver, element, rendered):
    assert select_vector_helper(VectorRef(element), resolver).render("names") == rendered


def test_custom_builder_name(resolver):
    call = select_vector_helper(VectorRef(StringRef()), resolver)

    assert call.render("names", builder="fbb") == "flatbuffers::ue4::CreateStringVector(fbb, names)"


def test_vector_of_vectors_is_unrepresentable(resolver):
    with pytest.raises(UnrepresentableTypeError) as excinfo:
        select_vector_helper(
            VectorRef(VectorRef(StringRef())), resolver, record="MyGame.Monster", field="grid")

    assert excinfo.value.record == "MyGame.Monster"
    assert excinfo.value.field == "grid"


def test_vector_of_unions_is_unrepresentable(resolver):
    with pytest.raises(UnrepresentableTypeError, match="MyGame.Monster.gear"):
        select_vector_helper(
            VectorRef(UnionRef("MyGame.Equipment")), resolver, record="MyGame.Monster", field="gear")
