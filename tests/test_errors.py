"""
Unit tests for error formatting and diagnostics.
"""
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from jsbundle.diagnostics import debug_log, log, set_verbose, warn
from jsbundle.errors import (
    AmbiguousKernelError,
    JSSyntaxError,
    StructuralError,
    UnbrowserifyError,
    get_line_context,
)


class TestErrorFormatting:
    """Tests for UnbrowserifyError messages."""

    def test_full_message(self):
        """Location, context and suggestion all appear in the message."""
        error = JSSyntaxError(
            "Unexpected token ';'",
            filename='bundle.js',
            line_number=3,
            column=7,
            context='b = ;',
            suggestion='Remove the stray semicolon',
        )
        text = str(error)
        assert '❌ Syntax Error in bundle.js at line 3, column 7:' in text
        assert "   Unexpected token ';'" in text
        assert '   > b = ;' in text
        assert '   💡 Remove the stray semicolon' in text

    def test_minimal_message(self):
        """Without location only the title and message are shown."""
        text = str(UnbrowserifyError("Something broke"))
        assert text == '\n❌ Unbundling Error:\n   Something broke\n'

    def test_hierarchy(self):
        """Every error can be caught as UnbrowserifyError."""
        assert issubclass(AmbiguousKernelError, StructuralError)
        assert issubclass(StructuralError, UnbrowserifyError)
        assert AmbiguousKernelError.title == StructuralError.title

    def test_line_context(self):
        """The requested line is returned stripped."""
        assert get_line_context('a;\n  b;\nc;', 2) == 'b;'
        assert get_line_context('a;', 5) is None
        assert get_line_context(None, 1) is None


class TestDiagnostics:
    """Tests for the stderr helpers."""

    def test_log_and_warn(self, capsys):
        log("hello")
        warn("careful")
        err = capsys.readouterr().err
        assert 'INFO:' in err and 'hello' in err
        assert 'WARNING:' in err and 'careful' in err

    def test_debug_only_when_verbose(self, capsys):
        """debug_log is silent unless verbose mode is on."""
        debug_log("hidden")
        assert capsys.readouterr().err == ''
        set_verbose(True)
        try:
            debug_log("shown")
        finally:
            set_verbose(False)
        assert 'DEBUG:' in capsys.readouterr().err
