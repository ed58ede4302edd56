"""Core exception hierarchy.

This module defines the error and warning types of the engine. Problems
in user-authored DSL text are never raised: they are reported as
diagnostics. Exceptions are reserved for defects in grammar builders,
invalid context documents (label registries and available inputs) and
invalid conformance specification files.
"""

from os import linesep
from typing import TYPE_CHECKING, Any, TypedDict

from yaml import dump
from yaml.error import MarkedYAMLError

if TYPE_CHECKING:
    from typing import Self

if TYPE_CHECKING:
    from pydantic import ValidationError

SNIPPET_ELLIPSIS = f' ...{linesep}'
SNIPPET_INDENT = 2
SNIPPET_MARKER = '^'

FORMAT_REPLACER = '<runtime object>'
FORMAT_FILENAME = '<unicode string>'
FORMAT_INDENT = 4


class ErrorContext(TypedDict, total=False):
    """Container describing contextual information for error formatting.

    All fields are optional; the formatter adapts output based on
    provided values.
    """

    #: Name of the source file where the error occurred.
    filename: str | None

    #: Line number in the source file (0-based).
    line_num: int | None
    #: Column number in the source file (0-based).
    column_num: int | None
    #: End column of the offending span (0-based, exclusive).
    column_end: int | None

    #: Number of the specification step where the error occurred.
    step_num: int | None

    #: Source line the location refers to.
    source: str | None

    #: Underlying exception that triggered formatting.
    error: Exception | None

    #: Element associated with the error.
    element: Any


class ErrorFormatter:
    """Utility class for formatting engine errors.

    This formatter produces human-readable messages with an optional
    source location, the offending source line with a marker underneath,
    or a YAML rendering of the failing element.
    """

    @classmethod
    def format(cls, message: str, context: ErrorContext | None = None) -> str:
        """Format an error message using contextual information.

        Args:
            message: Base human-readable error message.
            context: Optional error context with location and data.

        Returns:
            A fully formatted error message suitable for display.
        """
        if not context:
            return message

        message += linesep
        message += cls.get_location_string(context, indent=FORMAT_INDENT)
        message += cls.get_snippet_string(context, indent=FORMAT_INDENT * 2)

        return message

    @classmethod
    def get_location_string(cls, context: ErrorContext, *,
                            indent: str | int | None = None) -> str:
        """Format source location information.

        Args:
            context: Error context containing location metadata.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted location string including filename, line,
            column, and step numbers when available.
        """
        indent = cls._ensure_indent(indent)

        filename = context.get('filename') or FORMAT_FILENAME

        message = f'{indent}in "{filename}"'
        if (line_num := context.get('line_num')) is not None:
            message += f', line {line_num + 1}'
            if (column_num := context.get('column_num')) is not None:
                message += f', column {column_num + 1}'
        message += linesep

        if (step_num := context.get('step_num')) is not None:
            message += f'{indent}on step {step_num + 1}{linesep}'

        return message

    @classmethod
    def get_snippet_string(cls, context: ErrorContext, *,
                           indent: str | int | None = None) -> str:
        """Generate a formatted snippet illustrating the error context.

        Args:
            context: Error context containing source or element data.
            indent: Optional indentation (string or number of spaces).

        Returns:
            A formatted multi-line snippet string, or an empty string
            if no snippet data is available.
        """
        indent = cls._ensure_indent(indent)

        if (error := context.get('error')) and isinstance(error, MarkedYAMLError):
            snippet = error.problem_mark.get_snippet(indent=0) if error.problem_mark else None
            return cls._make_indent(snippet or '', indent)

        if (source := context.get('source')) is not None:
            return cls._make_marker(source, context, indent)

        if element := context.get('element'):
            return f'{indent}{SNIPPET_ELLIPSIS}{cls._make_yaml(element, indent)}{linesep}'

        return ''

    @classmethod
    def _make_marker(cls, source: str, context: ErrorContext, indent: str) -> str:
        """Render a source line with a marker under the offending span.

        Args:
            source: The source line.
            context: Error context containing the column span.
            indent: String indentation prefix.

        Returns:
            The line and its marker line.
        """
        start = context.get('column_num') or 0
        end = context.get('column_end') or len(source)

        marker = ' ' * start + SNIPPET_MARKER * max(end - start, 1)

        return f'{indent}{source}{linesep}{indent}{marker}{linesep}'

    @classmethod
    def _filter_unsafe(cls, value: Any) -> Any:  # noqa: ANN401
        """Recursively sanitize values for safe YAML serialization.

        Args:
            value: Arbitrary value to sanitize.

        Returns:
            A YAML-safe representation of the value.
        """
        if value is None or isinstance(value, (str, int, float, bool)):
            return value

        if isinstance(value, dict):
            return {
                key: cls._filter_unsafe(item)
                for key, item in value.items()
            }

        if isinstance(value, (list, tuple, set)):
            return [cls._filter_unsafe(item) for item in value]

        return FORMAT_REPLACER

    @classmethod
    def _make_yaml(cls, value: Any, indent: str = '') -> str:  # noqa: ANN401
        """Serialize a value to a YAML-formatted string.

        Args:
            value: Arbitrary value to serialize.
            indent: Optional indentation prefix.

        Returns:
            A YAML-formatted string representation of the value.
        """
        data = dump(
            cls._filter_unsafe(value),
            indent=SNIPPET_INDENT,
            sort_keys=False,
        )

        return cls._make_indent(data, indent)

    @staticmethod
    def _make_indent(value: str, indent: str) -> str:
        """Apply indentation to a multi-line string, skipping blank lines."""
        if not indent:
            return value

        return linesep.join(
            f'{indent}{line}'
            for line in value.splitlines()
            if line.strip()
        )

    @staticmethod
    def _ensure_indent(indent: str | int | None = None) -> str:
        """Normalize indentation given as a string or a number of spaces."""
        if isinstance(indent, int) and indent > 0:
            return ' ' * indent

        if isinstance(indent, str):
            return indent

        return ''


class GrammarWarning(UserWarning):
    """Warning emitted for non-fatal grammar building issues.

    Used when a grammar builder violates a structural invariant while
    strict building is disabled.
    """


class DSLError(Exception, ErrorFormatter):
    """Base exception for all engine errors.

    All custom exceptions raised by the library inherit from this class
    to allow unified error handling by callers.
    """

    def __init__(self, message: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable error description.
            context: Optional error context for formatting.
        """
        self.message = message
        self.context = context

        super().__init__(message)

    def __str__(self) -> str:
        """String representation."""
        return self.format(self.message, self.context)


class GrammarBuildError(DSLError):
    """Error raised when a grammar builder produces an invalid grammar.

    This is a programming defect of a builder, not a problem of the text
    being validated, and is never reported to end users as a diagnostic.
    """


class ContextError(DSLError):
    """Error raised when a context document is invalid.

    Context documents describe label type registries and available inputs
    and are read from YAML.
    """

    @classmethod
    def from_yaml_error(cls, error: MarkedYAMLError) -> 'Self':
        """Create an error from a YAML parsing failure.

        Args:
            error: Exception raised by the YAML parser.

        Returns:
            An error carrying the YAML problem location.
        """
        mark = error.problem_mark
        error_context = ErrorContext(
            filename=mark.name if mark else None,
            line_num=mark.line if mark else None,
            column_num=mark.column if mark else None,
            error=error,
        )

        message = 'Invalid YAML'
        if error.problem:
            message += f'{linesep}{" " * FORMAT_INDENT}{error.problem}'

        return cls(message, context=error_context)

    @classmethod
    def from_pydantic_error(cls, error: 'ValidationError', *,
                            data: Any = None,  # noqa: ANN401
                            filename: str | None = None,
                            step_num: int | None = None) -> 'Self':
        """Create an error from a Pydantic validation failure.

        The first reported issue becomes the message; its location path
        is appended so that the failing field can be found in the document.

        Args:
            error: ValidationError raised by Pydantic.
            data: Validated document data.
            filename: Name of the source file.
            step_num: Number of the document in a multi-document stream.

        Returns:
            An error describing the validation failure.
        """
        error_context = ErrorContext(
            filename=filename,
            step_num=step_num,
            error=error,
            element=data if isinstance(data, dict) else None,
        )

        for item in error.errors(include_url=False, include_input=False):
            location = '.'.join(str(key) for key in item['loc'])
            message = item['msg']
            if location:
                message = f'{message} at `{location}`'
            return cls(message, context=error_context)

        return cls('Validation error', context=error_context)


class SpecError(ContextError):
    """Error raised when a conformance specification file is invalid."""
