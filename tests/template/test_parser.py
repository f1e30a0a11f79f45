"""
Tests for the template parser: tree structure, grammar errors and
the parse → render → parse round trip.
"""

import pytest

from smartscript.errors import SmartScriptUserError
from smartscript.template import (
    ConstantDouble,
    ConstantInteger,
    DocumentNode,
    EchoNode,
    ForLoopNode,
    Function,
    LexError,
    Operator,
    ParseError,
    SmartScriptParser,
    StringLiteral,
    TextNode,
    Variable,
    parse,
    render,
)


def reparse(text: str, children: int = -1) -> DocumentNode:
    """
    Parses text, renders the tree, parses the rendering and checks both trees are equal.

    Args:
        text: Document body
        children: Expected number of direct document children; -1 to skip the check
    """
    document = parse(text)
    again = parse(render(document))
    if children >= 0:
        assert len(document.children) == children
        assert len(again.children) == children
    assert again == document
    return document


class TestParserBasics:

    def test_null_input(self):
        with pytest.raises(TypeError):
            SmartScriptParser(None)

    def test_empty_input(self):
        document = reparse("", 0)
        assert document == DocumentNode()

    def test_document_attribute(self):
        parser = SmartScriptParser("text")
        assert parser.document == DocumentNode(children=(TextNode("text"),))

    def test_plain_text(self):
        document = reparse("just text, { braces } and $ signs", 1)
        assert document.children[0] == TextNode("just text, { braces } and $ signs")

    def test_whitespace_between_tags_is_text(self):
        document = reparse("{$= 1 $} {$= 2 $}", 3)
        assert document.children[1] == TextNode(" ")


class TestEchoTags:

    def test_regular_echo(self):
        """Test an echo tag with every kind of element"""
        document = reparse('{$= i i * @sin  "0.000" @decfmt $}', 1)
        assert document.children[0] == EchoNode(elements=(
            Variable("i"),
            Variable("i"),
            Operator("*"),
            Function("sin"),
            StringLiteral("0.000"),
            Function("decfmt"),
        ))

    def test_numbers(self):
        document = reparse("{$= 1 -2 3.5 -0.25 $}", 1)
        assert document.children[0].elements == (
            ConstantInteger(1),
            ConstantInteger(-2),
            ConstantDouble(3.5),
            ConstantDouble(-0.25),
        )

    def test_empty_echo(self):
        document = reparse("{$=$}", 1)
        assert document.children[0] == EchoNode()

    def test_echo_without_whitespace(self):
        document = reparse("{$=i$}", 1)
        assert document.children[0] == EchoNode(elements=(Variable("i"),))

    def test_double_without_fraction(self):
        with pytest.raises(ParseError, match="Double value cannot end with a decimal point"):
            parse("{$= 1. i$}")

    def test_double_with_two_decimal_points(self):
        with pytest.raises(ParseError, match=r"Unrecognized character '\.'") as excinfo:
            parse("{$= 1.2.3$}")
        assert (excinfo.value.line, excinfo.value.column) == (1, 8)

    def test_double_out_of_range(self):
        with pytest.raises(ParseError, match="Double value out of range"):
            parse("{$= " + "9" * 400 + ".5 $}")

    def test_unicode_names(self):
        document = reparse("{$= čaša @zbroj_2 $}{$ FOR brojač 1 n $}{$END$}", 2)
        assert document.children[0] == EchoNode(elements=(Variable("čaša"), Function("zbroj_2")))
        assert document.children[1].variable == Variable("brojač")

    @pytest.mark.parametrize("body", [
        '{$= "\\\\" $}',
        '{$= "\\"" $}',
        '{$= "\\n" $}',
        '{$= "\\t" $}',
    ])
    def test_string_escapes(self, body):
        reparse(body, 1)

    def test_string_values_are_decoded(self):
        document = parse('{$= "a\\\\b" "q\\"" "x\\ny" $}')
        assert document.children[0].elements == (
            StringLiteral("a\\b"),
            StringLiteral('q"'),
            StringLiteral("x\ny"),
        )

    def test_illegal_escape_inside_string(self):
        with pytest.raises(ParseError, match="Cannot escape character"):
            parse('{$= "\\{" $}')

    def test_escaped_quotes_in_string(self):
        document = reparse('A tag follows {$= "Joe \\"Long\\" Smith"$}.', 3)
        assert document.children[1] == EchoNode(elements=(StringLiteral('Joe "Long" Smith'),))


class TestTextEscaping:

    def test_illegal_escape_outside_tags(self):
        with pytest.raises(ParseError, match="Cannot escape character"):
            parse("Text \\$ a")

    def test_escaped_tag_is_text(self):
        document = reparse("Example { bla } blu \\{$=1$}. Nothing interesting {=here}.", 1)
        assert document.children[0] == TextNode("Example { bla } blu {$=1$}. Nothing interesting {=here}.")

    def test_escaped_tag_then_real_tag(self):
        document = reparse("Example \\{$=1$}. Now actually write one {$=1$}", 2)
        assert document.children[0] == TextNode("Example {$=1$}. Now actually write one ")
        assert document.children[1] == EchoNode(elements=(ConstantInteger(1),))

    def test_escaped_backslash(self):
        document = reparse("C:\\\\temp \\\\{$= x $}", 2)
        assert document.children[0] == TextNode("C:\\temp \\")


class TestForLoops:

    def test_numbers_only(self):
        document = reparse("{$ FOR i -1 10 1 $} {$END$}", 1)
        loop = document.children[0]
        assert loop == ForLoopNode(
            Variable("i"), ConstantInteger(-1), ConstantInteger(10), ConstantInteger(1),
            children=(TextNode(" "),),
        )

    def test_without_step(self):
        document = reparse("{$FOR i 0 10$}{$END$}", 1)
        loop = document.children[0]
        assert loop.step is None
        assert loop.children == ()

    def test_numbers_and_strings(self):
        document = reparse('{$    FOR    sco_re            "-1"10 "1" $} {$END$}', 1)
        loop = document.children[0]
        assert loop.expressions == (
            Variable("sco_re"), StringLiteral("-1"), ConstantInteger(10), StringLiteral("1"),
        )

    def test_number_and_variable(self):
        document = reparse("{$ FOR year 1 last_year $} {$END$}", 1)
        assert document.children[0].end == Variable("last_year")

    def test_concatenated_elements(self):
        document = reparse('{$ FOR i-1.35bbb"1" $} {$END$}', 1)
        assert document.children[0].expressions == (
            Variable("i"), ConstantDouble(-1.35), Variable("bbb"), StringLiteral("1"),
        )

    def test_nested_loops(self):
        text = (
            "This is {$= i $}-th time.\n"
            "{$ FOR i 1 10 1 $}\n"
            "  outer {$= i $}\n"
            "  {$FOR j i 3$}inner {$= i j * $}{$END$}\n"
            "{$END$}\n"
        )
        document = reparse(text, 5)
        outer = document.children[3]
        assert isinstance(outer, ForLoopNode)
        inner = outer.children[3]
        assert isinstance(inner, ForLoopNode)
        assert inner.variable == Variable("j")
        assert inner.children == (
            TextNode("inner "),
            EchoNode(elements=(Variable("i"), Variable("j"), Operator("*"))),
        )

    def test_invalid_variable_name(self):
        with pytest.raises(ParseError):
            parse("{$FOR _ab 1 2$} {$END$}")

    def test_tag_never_closed(self):
        with pytest.raises(ParseError):
            parse("{$FOR ab 1 2$} {$END$")

    def test_missing_end(self):
        with pytest.raises(ParseError, match="Missing END tag") as excinfo:
            parse("{$ FOR i -1 10 1 $}")
        assert excinfo.value.line == 1
        assert excinfo.value.column == 4

    def test_too_many_end_tags(self):
        with pytest.raises(ParseError, match="Too many END tags"):
            parse("{$ FOR i -1 10 1 $} {$END$} {$END$}")

    def test_end_with_arguments(self):
        with pytest.raises(ParseError, match="END tag cannot have arguments"):
            parse("{$ FOR i 1 2 $}{$END i$}")

    def test_number_instead_of_variable(self):
        with pytest.raises(ParseError, match="must be a variable"):
            parse("{$ FOR 3 1 10 1 $} {$END$}")

    def test_operator_instead_of_variable(self):
        with pytest.raises(ParseError, match="must be a variable"):
            parse('{$ FOR * "1" -10 "1" $} {$END$}')

    def test_function_instead_of_expression(self):
        with pytest.raises(ParseError, match="Invalid FOR loop expression '@sin'"):
            parse("{$ FOR year @sin 10 $} {$END$}")

    def test_operator_instead_of_expression(self):
        with pytest.raises(ParseError, match="Invalid FOR loop expression"):
            parse("{$ FOR year 1 + $} {$END$}")

    @pytest.mark.parametrize("header", ["year", "year 3"])
    def test_too_few_arguments(self, header):
        with pytest.raises(ParseError, match="Too few arguments"):
            parse("{$ FOR " + header + " $} {$END$}")

    @pytest.mark.parametrize("header", ["year 1 10 1 3", 'year 1 10 "1" "10"'])
    def test_too_many_arguments(self, header):
        with pytest.raises(ParseError, match="Too many arguments"):
            parse("{$ FOR " + header + " $} {$END$}")


class TestTagErrors:

    def test_unknown_tag(self):
        with pytest.raises(ParseError, match="Unknown tag 'IF'"):
            parse("{$IF 1 2$}")

    def test_tag_names_are_case_sensitive(self):
        with pytest.raises(ParseError, match="Unknown tag 'for'"):
            parse("{$ for i 1 2 $}{$END$}")

    def test_unclosed_echo(self):
        with pytest.raises(ParseError, match="Tag was never closed"):
            parse("text {$= i 1")

    def test_open_tag_at_end(self):
        with pytest.raises(ParseError, match="Tag was never closed"):
            parse("text {$")

    def test_errors_are_user_errors(self):
        """Test parse failures can be handled through the common base"""
        for body in ("{$IF$}", "Text \\$"):
            with pytest.raises(SmartScriptUserError):
                parse(body)

    def test_parse_error_reports_token(self):
        with pytest.raises(ParseError) as excinfo:
            parse("line one\n{$ WHILE $}")
        error = excinfo.value
        assert error.reason == "Unknown tag 'WHILE'"
        assert error.token.value == "WHILE"
        assert (error.line, error.column) == (2, 4)

    def test_lexer_failure_becomes_parse_error(self):
        """Test a malformed character is reported as a ParseError caused by the LexError"""
        with pytest.raises(ParseError) as excinfo:
            parse("ok\n  {$= # $}")
        error = excinfo.value
        assert isinstance(error.__cause__, LexError)
        assert error.reason == "Unrecognized character '#'"
        assert error.token is None
        assert (error.line, error.column) == (2, 7)
        assert str(error) == "Unrecognized character '#' at 2:7"

    def test_tag_name_stays_ascii(self):
        with pytest.raises(ParseError, match="Invalid tag name start"):
            parse("{$ČAŠA$}")
