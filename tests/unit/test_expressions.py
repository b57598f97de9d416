"""Tests for the reference extractor."""

import pytest

from dynvar_resolver.expressions import (
    collect_references,
    define,
    extract_references,
    is_external_name,
    iter_references,
    parse_expression,
)
from dynvar_resolver.models import Literal, ProviderCall, Template, VariableRef


class TestParseExpression:
    """Test suite for splitting expression strings into parts."""

    def test_plain_text_is_a_single_literal(self):
        template = parse_expression("no placeholders here")
        assert template.parts == (Literal("no placeholders here"),)
        assert template.source == "no placeholders here"

    def test_empty_string_has_no_parts(self):
        assert parse_expression("").parts == ()

    def test_braced_reference(self):
        template = parse_expression("${INSTALL_PATH}/bin")
        assert template.parts == (
            VariableRef(name="INSTALL_PATH", raw="${INSTALL_PATH}"),
            Literal("/bin"),
        )

    def test_bare_reference_stops_at_separator(self):
        template = parse_expression("$home/conf")
        assert template.parts[0] == VariableRef(name="home", raw="$home")
        assert template.parts[1] == Literal("/conf")

    def test_bare_reference_allows_dots_and_dashes_inside(self):
        refs = [ref.name for ref in iter_references(parse_expression("$app.home-dir"))]
        assert refs == ["app.home-dir"]

    def test_bare_reference_drops_trailing_dot(self):
        template = parse_expression("see $name.")
        assert template.parts == (
            Literal("see "),
            VariableRef(name="name", raw="$name"),
            Literal("."),
        )

    def test_escaped_dollar_is_literal(self):
        template = parse_expression("costs $$5 and $$var")
        assert template.parts == (Literal("costs $5 and $var"),)
        assert extract_references(template) == frozenset()

    def test_lone_and_unterminated_dollars_are_literal(self):
        assert extract_references(parse_expression("$ 5 and ${unterminated")) == frozenset()
        assert extract_references(parse_expression("$1 and ${}")) == frozenset()

    def test_whitespace_inside_braces_is_stripped(self):
        assert extract_references(parse_expression("${ spaced }")) == {"spaced"}

    def test_adjacent_references(self):
        refs = [ref.name for ref in iter_references(parse_expression("${a}${b}$c"))]
        assert refs == ["a", "b", "c"]

    def test_references_alone_produce_no_empty_literals(self):
        template = parse_expression("${a}${b}")
        assert template.parts == (
            VariableRef(name="a", raw="${a}"),
            VariableRef(name="b", raw="${b}"),
        )
        assert all(not isinstance(part, Literal) for part in template.parts)

    @pytest.mark.parametrize(
        "token", ["ENV[HOME]", "SYSTEM[user.home]", "env.PATH", "sys.java.version"]
    )
    def test_environment_tokens_are_external(self, token):
        template = parse_expression("${" + token + "}")
        assert template.parts[0].external is True
        assert is_external_name(token)
        assert extract_references(template) == frozenset()
        assert extract_references(template, include_external=True) == {token}

    def test_regular_names_are_not_external(self):
        assert not is_external_name("ENVIRONMENT")
        assert not is_external_name("environment.name")


class TestExtractReferences:
    """Test suite for recursive reference extraction."""

    def test_duplicates_are_collapsed(self):
        template = parse_expression("${a}/${a}/$a")
        assert extract_references(template) == {"a"}

    def test_nested_provider_parameters(self):
        # ini lookup on a file read from an archive entry.
        archive_entry = ProviderCall(
            kind="jarfile",
            params=(
                ("file", parse_expression("${archive}")),
                ("entry", parse_expression("conf/${entry}")),
                ("key", parse_expression("location")),
            ),
        )
        lookup = ProviderCall(
            kind="configfile",
            params=(
                ("file", archive_entry),
                ("section", parse_expression("${section}")),
                ("key", parse_expression("${key}")),
            ),
        )
        assert extract_references(lookup) == {"archive", "entry", "section", "key"}

    def test_list_parameters(self):
        call = ProviderCall(
            kind="executable",
            params=(
                ("executable", parse_expression("${java}")),
                ("args", (parse_expression("-jar"), parse_expression("${jar}"))),
            ),
        )
        assert extract_references(call) == {"java", "jar"}

    def test_iteration_follows_text_order(self):
        call = ProviderCall(
            kind="configfile",
            params=(
                ("file", parse_expression("${f}")),
                ("key", parse_expression("${k1}.${k2}")),
            ),
        )
        assert [ref.name for ref in iter_references(call)] == ["f", "k1", "k2"]

    def test_self_reference_is_reported(self):
        definition = define("path", "${path}:/usr/bin")
        assert collect_references(definition) == {"path"}

    def test_unsupported_node_raises(self):
        with pytest.raises(TypeError):
            extract_references("not a node")

    def test_literal_has_no_references(self):
        assert extract_references(Literal("${not_parsed}")) == frozenset()


class TestDefine:
    """Test suite for the definition shorthand."""

    def test_every_value_becomes_a_candidate(self):
        definition = define("root", "${a}", "${b}", source_order=3, condition="c1")
        assert definition.source_order == 3
        assert len(definition.values) == 2
        assert all(candidate.condition == "c1" for candidate in definition.values)
        assert collect_references(definition) == {"a", "b"}

    def test_no_value_gives_empty_expression(self):
        definition = define("empty", is_static=True)
        assert definition.is_static
        assert definition.values[0].value == Template(source="", parts=())
