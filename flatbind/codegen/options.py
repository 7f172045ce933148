from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class GeneratorOptions:
    """Typed view over the ``[generator]`` section of the configuration."""

    reference_prefix: str = "UFB"
    value_prefix: str = "FFB"
    enum_prefix: str = "E"
    qualify_native_names: bool = True
    name_separator: str = "_"
    file_suffix: str = "_ue4_generated"
    runtime_header: str = "flatbuffers/flatbuffers_ue4.h"
    include_dependence_headers: bool = True
    class_specifiers: tuple[str, ...] = ("BlueprintType",)
    struct_specifiers: tuple[str, ...] = ("BlueprintType",)

    @classmethod
    def from_config(cls, config: Optional[dict[str, Any]]) -> "GeneratorOptions":
        generator_cfg: dict[str, Any] = (config or {}).get("generator", {})
        defaults = cls()
        return cls(
            reference_prefix=generator_cfg.get("reference_prefix", defaults.reference_prefix),
            value_prefix=generator_cfg.get("value_prefix", defaults.value_prefix),
            enum_prefix=generator_cfg.get("enum_prefix", defaults.enum_prefix),
            qualify_native_names=bool(generator_cfg.get(
                "qualify_native_names", defaults.qualify_native_names)),
            name_separator=generator_cfg.get("name_separator", defaults.name_separator),
            file_suffix=generator_cfg.get("file_suffix", defaults.file_suffix),
            runtime_header=generator_cfg.get("runtime_header", defaults.runtime_header),
            include_dependence_headers=bool(generator_cfg.get(
                "include_dependence_headers", defaults.include_dependence_headers)),
            class_specifiers=tuple(generator_cfg.get(
                "class_specifiers", defaults.class_specifiers)),
            struct_specifiers=tuple(generator_cfg.get(
                "struct_specifiers", defaults.struct_specifiers)),
        )
