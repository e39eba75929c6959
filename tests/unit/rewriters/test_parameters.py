"""Tests for placeholder substitution."""

import logging

import pytest

from bq_query_viewer.exceptions import UnsupportedParameterTypeError
from bq_query_viewer.rewriters.base import ArrayParameter, ScalarParameter
from bq_query_viewer.rewriters.parameters import (
    substitute_parameter,
    substitute_parameters,
    unsupported_parameters,
)


class TestScalarSubstitution:
    """Test scalar parameter substitution."""

    @pytest.mark.parametrize("name,value", [("n", "v"), ("user_id", "abc"), ("x1", "")])
    def test_string_parameter_gets_trace_comment(self, name, value):
        parameter = ScalarParameter(name=name, type_tag="STRING", value=value)
        assert substitute_parameters(f"@{name}", [parameter]) == f"'{value}' /* = @{name} */"

    def test_null_scalar_renders_bare_null(self):
        parameter = ScalarParameter(name="n", type_tag="STRING", value=None)
        assert substitute_parameters("@n", [parameter]) == "null"

    def test_null_scalar_of_unknown_type_renders_null(self):
        parameter = ScalarParameter(name="ts", type_tag="TIMESTAMP", value=None)
        assert substitute_parameters("@ts", [parameter]) == "null"

    def test_all_occurrences_replaced(self):
        parameter = ScalarParameter(name="id", type_tag="INT64", value="7")
        query = "SELECT * FROM a WHERE id = @id OR parent_id = @id"
        assert substitute_parameters(query, [parameter]) == (
            "SELECT * FROM a WHERE id = 7 /* = @id */ OR parent_id = 7 /* = @id */"
        )

    def test_date_parameter(self):
        parameter = ScalarParameter(name="d", type_tag="DATE", value="2024-01-01")
        assert substitute_parameters("WHERE dt >= @d", [parameter]) == (
            "WHERE dt >= date '2024-01-01' /* = @d */"
        )

    def test_longer_placeholder_not_touched(self):
        """@id must not match inside @id_list."""
        parameter = ScalarParameter(name="id", type_tag="INT64", value="1")
        assert substitute_parameters("@id_list, @id", [parameter]) == (
            "@id_list, 1 /* = @id */"
        )

    def test_match_is_case_sensitive(self):
        parameter = ScalarParameter(name="id", type_tag="INT64", value="1")
        assert substitute_parameters("@ID", [parameter]) == "@ID"

    def test_placeholder_without_parameter_left_alone(self):
        parameter = ScalarParameter(name="a", type_tag="INT64", value="1")
        assert substitute_parameters("@a + @b", [parameter]) == "1 /* = @a */ + @b"

    def test_parameter_without_placeholder_is_ignored(self):
        parameter = ScalarParameter(name="unused", type_tag="INT64", value="1")
        assert substitute_parameters("SELECT 1", [parameter]) == "SELECT 1"

    def test_backslash_in_value_kept_literally(self):
        parameter = ScalarParameter(name="p", type_tag="STRING", value=r"a\1b")
        assert substitute_parameters("@p", [parameter]) == r"'a\1b' /* = @p */"

    def test_placeholder_inside_string_literal_is_replaced(self):
        """Substitution is textual; literals are not skipped."""
        parameter = ScalarParameter(name="n", type_tag="INT64", value="1")
        assert substitute_parameters("SELECT '@n'", [parameter]) == "SELECT '1 /* = @n */'"


class TestArraySubstitution:
    """Test array parameter substitution."""

    def test_int64_array(self):
        parameter = ArrayParameter(name="n", element_type_tag="INT64", values=("1", "2"))
        assert substitute_parameters("@n", [parameter]) == "[1, 2] /* = @n */"

    def test_string_array(self):
        parameter = ArrayParameter(name="tags", element_type_tag="STRING", values=("a", "b"))
        assert substitute_parameters("IN UNNEST(@tags)", [parameter]) == (
            "IN UNNEST(['a', 'b'] /* = @tags */)"
        )

    def test_empty_array(self):
        parameter = ArrayParameter(name="n", element_type_tag="INT64", values=())
        assert substitute_parameters("@n", [parameter]) == "[] /* = @n */"

    def test_null_array(self):
        parameter = ArrayParameter(name="n", element_type_tag="INT64", values=None)
        assert substitute_parameters("@n", [parameter]) == "null"

    def test_null_element(self):
        parameter = ArrayParameter(name="n", element_type_tag="STRING", values=("a", None))
        assert substitute_parameters("@n", [parameter]) == "['a', null] /* = @n */"


class TestUnsupportedTypes:
    """Test handling of types without a literal rendering."""

    def test_single_substitution_raises(self):
        parameter = ScalarParameter(name="f", type_tag="FLOAT64", value="1.5")
        with pytest.raises(UnsupportedParameterTypeError):
            substitute_parameter("@f", parameter)

    def test_unsupported_left_in_place_and_rest_substituted(self, caplog):
        parameters = [
            ScalarParameter(name="f", type_tag="FLOAT64", value="1.5"),
            ScalarParameter(name="i", type_tag="INT64", value="2"),
        ]
        with caplog.at_level(logging.DEBUG, logger="bq_query_viewer.rewriters.parameters"):
            result = substitute_parameters("@f + @i", parameters)

        assert result == "@f + 2 /* = @i */"
        assert "FLOAT64" in caplog.text
        assert all(record.levelno < logging.WARNING for record in caplog.records)

    def test_empty_array_of_unknown_type_left_in_place(self):
        parameter = ArrayParameter(name="a", element_type_tag="STRUCT", values=())
        assert substitute_parameters("@a", [parameter]) == "@a"

    def test_unsupported_parameters_lists_only_bound(self):
        bound = ScalarParameter(name="f", type_tag="FLOAT64", value="1.5")
        unbound = ScalarParameter(name="g", type_tag="FLOAT64", value=None)
        array = ArrayParameter(name="a", element_type_tag="NUMERIC", values=("1",))
        ok = ScalarParameter(name="s", type_tag="STRING", value="x")

        assert unsupported_parameters([bound, unbound, array, ok]) == [bound, array]


class TestOrdering:
    """Test parameters are applied in list order."""

    def test_input_list_not_mutated(self):
        parameters = [ScalarParameter(name="a", type_tag="INT64", value="1")]
        substitute_parameters("@a", parameters)
        assert parameters == [ScalarParameter(name="a", type_tag="INT64", value="1")]

    def test_deterministic_output(self):
        parameters = [
            ScalarParameter(name="a", type_tag="INT64", value="1"),
            ArrayParameter(name="b", element_type_tag="BOOL", values=("true", "false")),
        ]
        query = "SELECT @a, @b"
        assert substitute_parameters(query, parameters) == substitute_parameters(
            query, list(parameters)
        )
        assert substitute_parameters(query, parameters) == (
            "SELECT 1 /* = @a */, [true, false] /* = @b */"
        )
