from .conversion import ConversionEmitter, Deserializer, Serializer
from .declaration import DeclarationEmitter, EnumDeclaration, RecordDeclaration
from .generator import (GenerationPass, generate_file, generate_ue4,
                        generated_file_name, make_rule, save_generated_file)
from .options import GeneratorOptions
from .templates import render_runtime_header
from .type_resolver import TypeContext, TypeResolver
from .vector_helpers import VectorHelper, VectorHelperCall, select_vector_helper

__all__ = [
    "ConversionEmitter",
    "DeclarationEmitter",
    "Deserializer",
    "EnumDeclaration",
    "GenerationPass",
    "GeneratorOptions",
    "RecordDeclaration",
    "Serializer",
    "TypeContext",
    "TypeResolver",
    "VectorHelper",
    "VectorHelperCall",
    "generate_file",
    "generate_ue4",
    "generated_file_name",
    "make_rule",
    "render_runtime_header",
    "save_generated_file",
    "select_vector_helper",
]
