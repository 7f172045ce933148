from flatbind.codegen.conversion import ConversionEmitter
from flatbind.codegen.declaration import DeclarationEmitter
from flatbind.codegen.templates import (EnumContext, FileContext,
                                        RecordContext, _normalize_lines,
                                        render_enum, render_file,
                                        render_record,
                                        render_record_definitions,
                                        render_runtime_header)
from tests.utils import (enum, field, make_resolver, make_schema,
                         pixel_schema, record, scalar, struct_type)

PIXEL_RECORD = """\
UCLASS(BlueprintType)
class UFBMyGame_Pixel : public UObject {
  GENERATED_BODY()

public:
  typedef MyGame::Pixel flatbuffer_t;

  UPROPERTY(BlueprintReadWrite, Transient, Category = "MyGame|Pixel")
  EMyGame_Color color;

  UPROPERTY(BlueprintReadWrite, Transient, Category = "MyGame|Pixel")
  FString label;

  static UFBMyGame_Pixel* FromFlatBuffer(const MyGame::Pixel *flatbuffer);
  flatbuffers::Offset<MyGame::Pixel> ToFlatBuffer(flatbuffers::FlatBufferBuilder &_fbb) const;
};"""

PIXEL_DEFINITIONS = """\
inline UFBMyGame_Pixel* UFBMyGame_Pixel::FromFlatBuffer(const MyGame::Pixel *flatbuffer) {
  if (!flatbuffer) return nullptr;
  UFBMyGame_Pixel *o = NewObject<UFBMyGame_Pixel>();
  o->color = static_cast<EMyGame_Color>(flatbuffer->color());
  o->label = flatbuffer->label() ? FString(UTF8_TO_TCHAR(flatbuffer->label()->c_str())) : FString();
  return o;
}

inline flatbuffers::Offset<MyGame::Pixel> UFBMyGame_Pixel::ToFlatBuffer(flatbuffers::FlatBufferBuilder &_fbb) const {
  const flatbuffers::Offset<flatbuffers::String> _label = _fbb.CreateString(TCHAR_TO_UTF8(*label));
  return MyGame::CreatePixel(_fbb, static_cast<MyGame::Color>(color), _label);
}"""


def _record_context(schema, name):
    resolver = make_resolver(schema)
    conversions = ConversionEmitter(resolver)
    record_def = schema.record(name)
    return RecordContext.create(
        declaration=DeclarationEmitter(resolver).emit_declaration(record_def),
        deserializer=conversions.emit_deserializer(record_def),
        serializer=conversions.emit_serializer(record_def),
    )


def test_normalize_lines():
    assert _normalize_lines(["a", "b\nc", "", None]) == ("a", "b", "c", "")


def test_render_enum(pixel_schema):
    declaration = DeclarationEmitter(make_resolver(pixel_schema)).emit_enum(pixel_schema.enum("MyGame.Color"))

    rendered = render_enum(EnumContext.create(declaration))

    assert rendered.rstrip("\n") == "\n".join([
        "UENUM()",
        "enum class EMyGame_Color : int8 {",
        "  Red = 0,",
        "  Green = 1,",
        "  Blue = 2",
        "};",
    ])


def test_render_enum_doc_comments():
    schema = make_schema(enums=[enum("Mood", [("Calm", 0)], doc_comment=[" How it feels."])])
    schema.enum("MyGame.Mood").values[0].doc_comment.append(" Default.")
    declaration = DeclarationEmitter(make_resolver(schema)).emit_enum(schema.enum("MyGame.Mood"))

    rendered = render_enum(EnumContext.create(declaration))

    assert rendered.startswith("/// How it feels.\nUENUM()\n")
    assert "  /// Default.\n  Calm = 0\n" in rendered


def test_render_table_record(pixel_schema):
    context = _record_context(pixel_schema, "MyGame.Pixel")

    assert render_record(context).rstrip("\n") == PIXEL_RECORD
    assert render_record_definitions(context) == PIXEL_DEFINITIONS


def test_record_declaration_has_no_member_bodies(pixel_schema):
    rendered = render_record(_record_context(pixel_schema, "MyGame.Pixel"))

    assert "NewObject" not in rendered
    assert "CreatePixel" not in rendered
    assert rendered.count("{") == 1


def test_render_struct_record():
    schema = make_schema(records=[
        record("Vec3", [field("x", scalar("float"), doc_comment=[" Left to right."])],
               fixed=True, attributes={"ue4_value_type": True}, doc_comment=[" A point."]),
        record("Line", [field("start", struct_type("Vec3"))], fixed=True,
               attributes={"ue4_value_type": True}),
    ])

    vec3_context = _record_context(schema, "MyGame.Vec3")
    vec3 = render_record(vec3_context)
    assert vec3.startswith("/// A point.\nUSTRUCT(BlueprintType)\nstruct FFBMyGame_Vec3 {\n")
    assert "  /// Left to right.\n  UPROPERTY(" in vec3
    assert "  static FFBMyGame_Vec3 FromFlatBuffer(const MyGame::Vec3 *flatbuffer);\n" in vec3
    assert "  MyGame::Vec3 ToFlatBufferStruct() const;\n" in vec3
    assert "ToFlatBuffer(flatbuffers::FlatBufferBuilder" not in vec3

    vec3_definitions = render_record_definitions(vec3_context)
    assert vec3_definitions.startswith(
        "inline FFBMyGame_Vec3 FFBMyGame_Vec3::FromFlatBuffer(const MyGame::Vec3 *flatbuffer) {\n"
        "  if (!flatbuffer) return FFBMyGame_Vec3();\n"
        "  FFBMyGame_Vec3 o;\n")
    assert vec3_definitions.endswith(
        "inline MyGame::Vec3 FFBMyGame_Vec3::ToFlatBufferStruct() const {\n"
        "  return MyGame::Vec3(x);\n"
        "}")

    line = render_record_definitions(_record_context(schema, "MyGame.Line"))
    assert "  o.start = FFBMyGame_Vec3::FromFlatBuffer(&flatbuffer->start());\n" in line
    assert "  return MyGame::Line(start.ToFlatBufferStruct());\n" in line


def test_render_file_layout():
    rendered = render_file(FileContext.create(
        includes=["CoreMinimal.h", "monster_generated.h"],
        generated_include="monster_ue4_generated.generated.h",
        forward_declarations=["class UFBMyGame_Monster;"],
        blocks=["BLOCK_A", "BLOCK_B"],
    ))

    assert rendered == "\n".join([
        "// automatically generated by flatbind, do not modify",
        "",
        "#pragma once",
        "",
        '#include "CoreMinimal.h"',
        '#include "monster_generated.h"',
        "",
        "// Unreal header tool output goes last",
        '#include "monster_ue4_generated.generated.h"',
        "",
        "class UFBMyGame_Monster;",
        "",
        "BLOCK_A",
        "",
        "BLOCK_B",
    ]) + "\n"


def test_render_file_definitions_follow_blocks():
    rendered = render_file(FileContext.create(
        includes=["CoreMinimal.h"],
        generated_include="monster_ue4_generated.generated.h",
        forward_declarations=[],
        blocks=["BLOCK_A", "BLOCK_B"],
        definitions=["DEFS_A", "DEFS_B"],
    ))

    assert rendered.endswith("\n".join([
        "BLOCK_A",
        "",
        "BLOCK_B",
        "",
        "// conversion members, defined once every record above is complete",
        "",
        "DEFS_A",
        "",
        "DEFS_B",
    ]) + "\n")


def test_runtime_header():
    header = render_runtime_header()

    assert header.endswith("}  // namespace flatbuffers\n")
    assert "namespace ue4 {" in header
    for helper in ("CreateScalarVector", "CreateCastVector", "CreateStringVector",
                   "CreateTableVector", "CreateStructVector"):
        assert helper in header
