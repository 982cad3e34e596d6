"""
Exceptions raised while turning a type schema into TypeScript declarations.

Every error is terminal for the current generation run: the schema is an
offline, build-time input and there is nothing to retry.
"""

from typing import Any, List, Optional


class TsForgeError(Exception):
    """
    Base exception for all tsforge failures.

    Attributes:
        message: Human-readable error description
        context: Optional context about where the error occurred
        cause: Optional underlying exception that caused this error
    """

    def __init__(self, message: str, context: Optional[str] = None,
                 cause: Optional[Exception] = None) -> None:
        self.message = message
        self.context = context
        self.cause = cause
        full_message = message
        if context:
            full_message = f"{message} (context: {context})"
        super().__init__(full_message)


class ConfigurationError(TsForgeError):
    """ A type definition asks for an option its kind does not support """


class SchemaError(TsForgeError):
    """ The schema itself is malformed (bad references, bad variants) """


class CycleError(SchemaError):
    """
    Exception raised when a type references itself, directly or through
    other types or generic wrappers.

    Attributes:
        cycle_path: List of identities forming the cycle
    """

    def __init__(self, cycle_path: List[Any]) -> None:
        self.cycle_path = cycle_path
        cycle_str = ' -> '.join(describe_identity(i) for i in cycle_path)
        super().__init__(f"Recursive type reference detected: {cycle_str}")


class WriterStateError(TsForgeError):
    """ The TypeScript writer was driven out of order """


def describe_identity(identity: Any) -> str:
    """ Renders a registry identity for error messages """
    if isinstance(identity, tuple) and len(identity) == 2 and isinstance(identity[1], str):
        return identity[1]
    if isinstance(identity, tuple) and identity:
        args = ', '.join(describe_identity(i) for i in identity[1:])
        return f"{identity[0]}<{args}>"
    return str(identity)
