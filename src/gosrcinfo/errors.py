"""Domain-specific errors for gosrcinfo."""

from __future__ import annotations


class SourceInfoError(Exception):
    """Base error for gosrcinfo."""


class ToolchainError(SourceInfoError):
    """Raised when the Go toolchain is missing or a Go helper command fails."""


class PackageNotFoundError(SourceInfoError):
    """Raised by a package importer when an import path cannot be loaded."""

    def __init__(self, import_path: str, detail: str = "") -> None:
        msg = f"package not found: {import_path}"
        if detail:
            msg = f"{msg}\n{detail}"
        super().__init__(msg)
        self.import_path = import_path


class MalformedDeclarationError(SourceInfoError):
    """Raised when a parsed declaration does not have the expected shape."""


class SourceParseError(SourceInfoError):
    """Raised when Go source cannot be parsed."""

    def __init__(self, message: str, *, filename: str = "", line: int = 0, column: int = 0) -> None:
        where = filename
        if line:
            where = f"{filename}:{line}:{column}"
        super().__init__(f"{where}: {message}" if where else message)
        self.filename = filename
        self.line = line
        self.column = column


class CodecError(SourceInfoError):
    """Raised when a SourceInfo payload cannot be encoded or decoded."""
