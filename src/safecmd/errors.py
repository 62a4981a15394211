"""Error taxonomy shared by the policy, integrity, and approval layers."""

from __future__ import annotations

CONFIG_NOT_FOUND = "CONFIG_NOT_FOUND"
CONFIG_PARSE_ERROR = "CONFIG_PARSE_ERROR"
CONFIG_SCHEMA_INVALID = "CONFIG_SCHEMA_INVALID"
INTEGRITY_READ_ERROR = "INTEGRITY_READ_ERROR"
INTEGRITY_WRITE_ERROR = "INTEGRITY_WRITE_ERROR"
APPROVAL_NO_FILES = "APPROVAL_NO_FILES"
TEMPLATE_UNKNOWN = "TEMPLATE_UNKNOWN"
INIT_EXISTS = "INIT_EXISTS"


class SafeCommandError(Exception):
    """Base error; every subclass carries a stable reason code."""

    reason_code: str = "SAFE_COMMAND_ERROR"

    def __init__(self, message: str, reason_code: str | None = None) -> None:
        super().__init__(message)
        if reason_code is not None:
            self.reason_code = reason_code


class PolicyError(SafeCommandError):
    """Policy file could not be turned into a usable policy."""


class ConfigNotFound(PolicyError):
    reason_code = CONFIG_NOT_FOUND


class ConfigParseError(PolicyError):
    reason_code = CONFIG_PARSE_ERROR


class ConfigSchemaError(PolicyError):
    reason_code = CONFIG_SCHEMA_INVALID


class IntegrityError(SafeCommandError):
    """Integrity snapshot or tracked files could not be trusted."""


class IntegrityReadError(IntegrityError):
    """I/O or format failure while reading trust data. Always fail closed."""

    reason_code = INTEGRITY_READ_ERROR


class IntegrityWriteError(IntegrityError):
    """Snapshot could not be persisted; the previous snapshot, if any, is untouched."""

    reason_code = INTEGRITY_WRITE_ERROR


class ApprovalError(SafeCommandError):
    reason_code = APPROVAL_NO_FILES


class TemplateError(SafeCommandError):
    reason_code = TEMPLATE_UNKNOWN


class InitError(SafeCommandError):
    reason_code = INIT_EXISTS
