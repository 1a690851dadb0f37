from __future__ import annotations


class ConversionError(RuntimeError):
    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


class ArchiveError(ConversionError):
    """Raised when the uploaded bytes are not a readable ZIP container."""


class CodecError(ConversionError):
    """Raised when an image cannot be decoded or re-encoded."""


__all__ = ["ArchiveError", "CodecError", "ConversionError"]
