"""
TurretCAM - Exceptions
======================
Exception hierarchy shared by the nesting, toolpath and post-processing stages.

Recoverable conditions (an item that fits no sheet, an unknown tool id) are
logged and reported in results instead of being raised.
"""


class TurretCamError(Exception):
    """Base exception for all TurretCAM errors"""

    def __init__(self, message: str, code: str = None, details: dict = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"[{self.code}] {self.message} | Details: {self.details}"
        return f"[{self.code}] {self.message}"


# ============================================================
# Validation Errors
# ============================================================

class ValidationError(TurretCamError):
    """Invalid input data"""
    pass


class RequiredFieldError(ValidationError):
    """Missing required field"""

    def __init__(self, field: str, entity_type: str = None):
        msg = f"Field '{field}' is required"
        if entity_type:
            msg = f"{entity_type}: {msg}"
        super().__init__(msg, code="REQUIRED_FIELD", details={"field": field})


class InvalidFieldValueError(ValidationError):
    """Field value out of range or inconsistent"""

    def __init__(self, field: str, value, reason: str = None):
        msg = f"Invalid value for field '{field}': {value}"
        if reason:
            msg += f" - {reason}"
        super().__init__(
            msg,
            code="INVALID_FIELD_VALUE",
            details={"field": field, "value": str(value), "reason": reason}
        )


# ============================================================
# Configuration Errors
# ============================================================

class ConfigurationError(TurretCamError):
    """Missing or malformed configuration"""

    def __init__(self, message: str, path: str = None):
        super().__init__(
            message,
            code="CONFIGURATION_ERROR",
            details={"path": path} if path else None
        )


# ============================================================
# Nesting Errors
# ============================================================

class NestingError(TurretCamError):
    """Errors raised by the nesting engine"""
    pass


class NoStockSheetError(NestingError):
    """No eligible stock sheet is available"""

    def __init__(self, strategy: str = None):
        super().__init__(
            "No stock sheet available for nesting",
            code="NO_STOCK_SHEET",
            details={"strategy": strategy} if strategy else None
        )


# ============================================================
# Program Errors
# ============================================================

class ProgramEmissionError(TurretCamError):
    """Errors raised while generating the machine program"""
    pass


class ProgramNumberError(ProgramEmissionError):
    """Program number does not fit the O word"""

    def __init__(self, program_number):
        super().__init__(
            f"Program number {program_number} out of range 1..9999",
            code="PROGRAM_NUMBER",
            details={"program_number": program_number}
        )


__all__ = [
    'TurretCamError',
    'ValidationError',
    'RequiredFieldError',
    'InvalidFieldValueError',
    'ConfigurationError',
    'NestingError',
    'NoStockSheetError',
    'ProgramEmissionError',
    'ProgramNumberError',
]
