"""Metadata records handed to the code generator."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from .goparse.syntax import NO_POS, Pos
from .typeexpr import TypeExpr


@dataclass(frozen=True)
class EmbeddedType:
    import_path: str
    struct_name: str

    def __str__(self) -> str:
        return f"{self.import_path}.{self.struct_name}"


@dataclass(frozen=True)
class MethodArg:
    name: str
    type_expr: TypeExpr
    # Empty for builtin types.
    import_path: str = ""


@dataclass(frozen=True)
class RenderCall:
    line: int
    names: tuple[str, ...] = ()


@dataclass(frozen=True)
class MethodSpec:
    name: str
    receiver: str
    import_path: str
    package_name: str
    imports: Mapping[str, str] = field(default_factory=dict)
    pos: Pos = NO_POS
    args: tuple[MethodArg, ...] = ()
    render_calls: tuple[RenderCall, ...] = ()


@dataclass(frozen=True)
class TypeInfo:
    struct_name: str
    import_path: str
    package_name: str
    imports: Mapping[str, str] = field(default_factory=dict)
    pos: Pos = NO_POS
    embedded_types: tuple[EmbeddedType, ...] = ()
    method_specs: tuple[MethodSpec, ...] = ()

    @property
    def qualified_name(self) -> str:
        return f"{self.import_path}.{self.struct_name}"

    def embeds(self, import_path: str, struct_name: str) -> bool:
        return EmbeddedType(import_path, struct_name) in self.embedded_types


@dataclass(frozen=True)
class SourceInfo:
    """The scan result of one package, or of a merged set of packages."""

    struct_specs: tuple[TypeInfo, ...] = ()
    # "<import path>.<func>" -> line -> validation key
    validation_keys: Mapping[str, Mapping[int, str]] = field(default_factory=dict)
    init_import_paths: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        frozen = {k: MappingProxyType(dict(v)) for k, v in self.validation_keys.items()}
        object.__setattr__(self, "validation_keys", MappingProxyType(frozen))

    def merge(self, other: "SourceInfo") -> "SourceInfo":
        keys = {**self.validation_keys, **other.validation_keys}
        return SourceInfo(
            struct_specs=self.struct_specs + other.struct_specs,
            validation_keys=keys,
            init_import_paths=self.init_import_paths + other.init_import_paths,
        )

    def struct(self, import_path: str, struct_name: str) -> TypeInfo | None:
        for spec in self.struct_specs:
            if spec.import_path == import_path and spec.struct_name == struct_name:
                return spec
        return None

    def types_that_embed(self, import_path: str, struct_name: str) -> list[TypeInfo]:
        """Return every struct that embeds the target, directly or transitively."""
        # Breadth-first over the embedding graph, starting at the target.
        found: list[TypeInfo] = []
        seen: set[tuple[str, str]] = set()
        queue = [(import_path, struct_name)]
        while queue:
            target = queue.pop(0)
            for spec in self.struct_specs:
                key = (spec.import_path, spec.struct_name)
                if key in seen or not spec.embeds(*target):
                    continue
                seen.add(key)
                found.append(spec)
                queue.append(key)
        return found

    def controller_specs(self, framework_import_path: str) -> list[TypeInfo]:
        return self.types_that_embed(framework_import_path, "Controller")

    def test_suites(self, testing_import_path: str) -> list[TypeInfo]:
        return self.types_that_embed(testing_import_path, "TestSuite")
