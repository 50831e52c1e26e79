"""
Normalisation rule cases.

A case file is plain JavaScript. Each top-level labelled block is one case:

    ternary_statement: {
        description: "a ternary used as a statement becomes an if"
        input: { a ? b() : c(); }
        expect: { if (a) b(); else c(); }
    }
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict

from . import nodes as js
from .config import OutputOptions
from .decompress import decompress
from .errors import UnsupportedCaseError
from .parser import parse
from .printer import print_to_string
from .scope import figure_out_scope


class RuleCase(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    description: Optional[str] = None
    input: Optional[js.Statement] = None
    expect: Optional[js.Statement] = None

    @property
    def title(self):
        return self.description or self.name


def _case_from_statement(statement, filename):
    if not isinstance(statement, js.LabeledStatement):
        raise UnsupportedCaseError(
            f"Unsupported statement {type(statement).__name__}",
            filename=filename,
            line_number=statement.start_line,
            suggestion="Every top-level statement of a case file must be a labelled block",
        )
    fields = {'name': statement.label}
    parts = statement.body.body if isinstance(statement.body, js.BlockStatement) else [statement.body]
    for part in parts:
        if not isinstance(part, js.LabeledStatement):
            raise UnsupportedCaseError(
                f"Unsupported statement {type(part).__name__}",
                filename=filename,
                line_number=part.start_line,
            )
        if part.label == 'description':
            body = part.body
            if not (isinstance(body, js.SimpleStatement) and isinstance(body.body, js.String)):
                raise UnsupportedCaseError(
                    "A description must be a string literal",
                    filename=filename,
                    line_number=part.start_line,
                )
            fields['description'] = body.body.value
        elif part.label in ('input', 'expect'):
            fields[part.label] = part.body
        else:
            raise UnsupportedCaseError(
                f"Unsupported label {part.label!r}",
                filename=filename,
                line_number=part.start_line,
                suggestion="Cases only know description, input and expect",
            )
    return RuleCase(**fields)


def load_cases(path):
    """Parse a case file into its ``RuleCase`` list, in file order."""
    with open(path, 'r', encoding='utf-8') as f:
        source = f.read()
    tree = figure_out_scope(parse(source, str(path)))
    return [_case_from_statement(statement, str(path)) for statement in tree.body]


def run_case(case, options=None, output_options=None):
    """Normalise the case input and return ``(actual, expected)`` printed code."""
    output_options = output_options or OutputOptions()
    actual = print_to_string(decompress(case.input, options), output_options)
    expected = print_to_string(case.expect, output_options)
    return actual, expected
