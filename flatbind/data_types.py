from enum import Enum, auto


class ScalarKind(Enum):
    BOOL = "bool"
    BYTE = "byte"
    UBYTE = "ubyte"
    SHORT = "short"
    USHORT = "ushort"
    INT = "int"
    UINT = "uint"
    LONG = "long"
    ULONG = "ulong"
    FLOAT = "float"
    DOUBLE = "double"
    # union type tag, stored as a ubyte on the wire
    UTYPE = "utype"


class TypeCategory(Enum):
    SCALAR = auto()
    ENUM = auto()
    STRING = auto()
    VECTOR = auto()
    FIXED_RECORD = auto()
    VARIABLE_RECORD = auto()
    UNION = auto()


class Attribute(Enum):
    """Schema attributes understood by the generator.

    Any other attribute key found in the schema is ignored.
    """
    READ_ONLY = "ue4_readonly"
    SAVE_GAME = "ue4_savegame"
    BYTE_ENUM = "ue4_byte_enum"
    EXPORT = "ue4_export"
    VALUE_TYPE = "ue4_value_type"
    CATEGORY = "ue4_category"
