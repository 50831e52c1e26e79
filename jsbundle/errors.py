"""
Error handling utilities for the unbundler.
"""


class UnbrowserifyError(Exception):
    """Base exception for unbundling errors with file names, line numbers and hints."""
    title = "Unbundling Error"

    def __init__(self, message, filename=None, line_number=None, column=None, context=None, suggestion=None):
        self.message = message
        self.filename = filename
        self.line_number = line_number
        self.column = column
        self.context = context  # The offending line
        self.suggestion = suggestion  # How to fix it
        super().__init__(self._format_error())

    def _format_error(self):
        """Format the error message with location, context and suggestion."""
        lines = [f"\n❌ {self.title}"]
        if self.filename:
            lines.append(f" in {self.filename}")
        if self.line_number:
            lines.append(f" at line {self.line_number}")
            if self.column:
                lines.append(f", column {self.column}")
        lines.append(":\n")

        lines.append(f"   {self.message}\n")

        if self.context:
            lines.append(f"   > {self.context}\n")

        if self.suggestion:
            lines.append(f"   💡 {self.suggestion}\n")

        return "".join(lines)


class JSSyntaxError(UnbrowserifyError):
    """The input is not valid JavaScript."""
    title = "Syntax Error"


class StructuralError(UnbrowserifyError):
    """The program does not have the shape of a browserify bundle."""
    title = "Bundle Structure Error"


class AmbiguousKernelError(StructuralError):
    """More than one top-level call could be the bundle kernel."""


class UnresolvedModuleError(UnbrowserifyError):
    """A module id is referenced but has no module or no name."""
    title = "Unresolved Module"


class UnsupportedCaseError(UnbrowserifyError):
    """A rule case file contains a construct the case loader does not know."""
    title = "Unsupported Test Case"


class VersionLookupError(UnbrowserifyError):
    """The package registry could not report a version."""
    title = "Version Lookup Error"


def get_line_context(source_code, line_number):
    """Extract the line of code from source by line number (1-based)."""
    if not source_code or line_number is None:
        return None
    source_lines = source_code.split('\n')
    if 0 < line_number <= len(source_lines):
        return source_lines[line_number - 1].strip()
    return None
