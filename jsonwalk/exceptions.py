"""Custom exceptions for jsonwalk."""

from __future__ import annotations

from typing import Optional


class JsonWalkError(Exception):
    """Base exception for jsonwalk errors."""
    pass


class InputFormatError(JsonWalkError):
    """Raised when input text (JSON, CSV, YAML, properties) cannot be parsed."""
    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column


class PathSyntaxError(JsonWalkError):
    """Raised when an extended JSONPath expression cannot be compiled."""
    def __init__(self, expression: str, reason: str):
        super().__init__(f"Invalid JSONPath expression '{expression}': {reason}")
        self.expression = expression
        self.reason = reason


class ConversionError(JsonWalkError):
    """Raised when a properties/YAML/Spring conversion fails."""
    def __init__(self, message: str, mode: Optional[str] = None):
        super().__init__(f"Conversion failed: {message}")
        self.message = message
        self.mode = mode


class RecordSyntaxError(JsonWalkError):
    """Raised when a Java record or interface declaration is malformed."""
    def __init__(self, message: str, fragment: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.fragment = fragment


class ConfigError(JsonWalkError):
    """Raised when a configuration file is missing or invalid."""
    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.key = key
