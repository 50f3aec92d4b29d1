# Custom exceptions for Inscribe

class InscribeError(Exception):
    """Base exception for all application-specific errors."""

    error_type = "inscribe_error"

    def to_dict(self) -> dict:
        """Structured form used by the CLI and MCP error payloads."""
        return {"error_type": self.error_type, "message": str(self)}


class ConfigError(InscribeError):
    """Raised for configuration-related problems."""

    error_type = "config_error"


class FileIOError(InscribeError):
    """Raised when an underlying filesystem operation fails."""

    error_type = "io_failure"

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"I/O failure on {path}: {message}")

    def to_dict(self) -> dict:
        return {**super().to_dict(), "path": self.path}


class TargetNotFoundError(InscribeError):
    """Raised when insert/replace target a file that does not exist."""

    error_type = "file_not_found"

    def __init__(self, path: str, operation: str):
        self.path = path
        self.operation = operation
        super().__init__(f"Cannot {operation} non-existent file: {path}")

    def to_dict(self) -> dict:
        return {**super().to_dict(), "path": self.path, "operation": self.operation}


class PatternNotFoundError(InscribeError):
    """Raised when an insert anchor pattern matches no line."""

    error_type = "pattern_not_found"

    def __init__(self, path: str, pattern):
        self.path = path
        self.pattern = pattern
        super().__init__(f"Pattern {_pattern_text(pattern)!r} not found in {path}")

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "path": self.path,
            "pattern": _pattern_text(self.pattern),
        }


class InvalidPatternError(InscribeError):
    """Raised when a regex or its replacement template cannot be applied."""

    error_type = "invalid_pattern"

    def __init__(self, path: str, pattern, message: str):
        self.path = path
        self.pattern = pattern
        super().__init__(f"Invalid pattern {_pattern_text(pattern)!r} for {path}: {message}")

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "path": self.path,
            "pattern": _pattern_text(self.pattern),
        }


class InvalidLocationError(InscribeError):
    """Raised when an insert location cannot be applied to the file."""

    error_type = "invalid_location"

    def __init__(self, path: str, location: dict, message: str):
        self.path = path
        self.location = location
        super().__init__(f"Invalid location {location} for {path}: {message}")

    def to_dict(self) -> dict:
        return {**super().to_dict(), "path": self.path, "location": self.location}


class FormatterCommandError(InscribeError):
    """Raised by shell formatters on non-zero exit or timeout."""

    error_type = "formatter_failure"

    def __init__(self, command: str, exit_code=None, stderr: str = ""):
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(f"Formatter failed (exit {exit_code}): {command}")

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "command": self.command,
            "exit_code": self.exit_code,
            "stderr": self.stderr,
        }


class UnknownEffectError(InscribeError):
    """Raised when dispatching an effect key nobody registered."""

    error_type = "unknown_effect"

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"No effect registered under '{key}'")


def _pattern_text(pattern) -> str:
    return getattr(pattern, "pattern", pattern)
