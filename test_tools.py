"""Tests for stats, JSON text utilities, visualization, config, logging and CLI."""

import json
import logging

import pytest

from jsonwalk import ConfigError, InputFormatError, ToolkitConfig, load_config
from jsonwalk.cli import main
from jsonwalk.json_utils import (
    get_value_preview,
    get_value_type,
    json_to_tree,
    minify_json,
    parse_json,
    pretty_print_json,
    toggle_tree_node,
    validate_json,
)
from jsonwalk.log import LOGGER_NAME, JSONFormatter, setup_logging
from jsonwalk.models import ArrayNotation
from jsonwalk.stats import (
    analyze_json_stats,
    calculate_complexity_score,
    compare_stats,
    format_bytes,
    generate_stats_report,
    get_data_type_chart,
    get_optimization_suggestions,
    get_property_frequency_chart,
)
from jsonwalk.visualizer import (
    NodeIdCounter,
    filter_nodes,
    generate_visualization_data,
    get_visualization_stats,
)


def reset_package_logger():
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


class TestStats:
    """Test structural statistics."""

    def setup_method(self):
        self.stats = analyze_json_stats({"a": 1, "b": [1, 2], "c": {"d": "x"}})

    def test_counts(self):
        """Test node, depth, property, array and value counts."""
        assert self.stats.total_nodes == 7
        assert self.stats.max_depth == 2
        assert self.stats.total_properties == 4
        assert self.stats.total_arrays == 1
        assert self.stats.total_values == 4
        assert self.stats.average_array_length == 2

    def test_data_types(self):
        """Test per-kind counts."""
        assert self.stats.data_types == {"object": 2, "integer": 3, "array": 1, "string": 1}

    def test_memory_and_complexity(self):
        """Test the size estimate and complexity score."""
        assert self.stats.memory_estimate == 186
        assert self.stats.complexity_score == 20
        assert calculate_complexity_score(20, 10000, 5000, 5000) == 100

    def test_property_frequency(self):
        """Test counting property names."""
        stats = analyze_json_stats([{"id": 1}, {"id": 2, "name": "x"}])
        assert stats.property_frequency == {"id": 2, "name": 1}
        assert get_property_frequency_chart(stats) == [
            {"name": "id", "value": 2},
            {"name": "name", "value": 1},
        ]

    def test_format_bytes(self):
        """Test human readable sizes."""
        assert format_bytes(0) == "0 Bytes"
        assert format_bytes(500) == "500 Bytes"
        assert format_bytes(1024) == "1 KB"
        assert format_bytes(1536) == "1.5 KB"
        assert format_bytes(1024 * 1024) == "1 MB"

    def test_report(self):
        """Test the text report sections."""
        report = generate_stats_report(self.stats)
        assert report.startswith("JSON Statistics Report")
        assert "- Total Nodes: 7" in report
        assert "- Memory Estimate: 186 Bytes" in report

    def test_suggestions(self):
        """Test that a small document needs no optimization."""
        assert get_optimization_suggestions(self.stats) == ["JSON structure appears to be well-optimized"]

        deep = {"a": {"b": {"c": {"d": {"e": {"f": {"g": {"h": {"i": {"j": {"k": 1}}}}}}}}}}}
        suggestions = get_optimization_suggestions(analyze_json_stats(deep))
        assert "Consider flattening deeply nested structures (depth > 10)" in suggestions

    def test_compare(self):
        """Test differences between two stats."""
        after = analyze_json_stats({"a": 1})
        delta = compare_stats(self.stats, after)
        assert delta["nodes"] == -5
        assert delta["depth"] == -1

    def test_data_type_chart(self):
        """Test chart entries sorted by count."""
        chart = get_data_type_chart(self.stats)
        assert chart[0] == {"name": "integer", "value": 3, "percentage": 43}


class TestJsonUtils:
    """Test the JSON text boundary."""

    def test_parse_error_location(self):
        """Test that syntax errors carry line and column."""
        with pytest.raises(InputFormatError) as exc_info:
            parse_json('{"a": }')
        assert exc_info.value.line == 1
        assert exc_info.value.column == 7

    def test_validate(self):
        """Test validation results for good and bad text."""
        assert validate_json('{"a": 1}').is_valid is True
        assert validate_json('{"a": 1}').parsed == {"a": 1}

        result = validate_json('{\n  "a": \n}')
        assert result.is_valid is False
        assert result.errors[0].line == 3

    def test_pretty_and_minify(self):
        """Test formatting both ways."""
        assert pretty_print_json('{"a":[1,2]}') == '{\n  "a": [\n    1,\n    2\n  ]\n}'
        assert minify_json('{ "a" : [1, 2] }') == '{"a":[1,2]}'
        with pytest.raises(InputFormatError):
            minify_json("{")

    def test_tree(self):
        """Test tree paths, depths and default expansion."""
        root = json_to_tree('{"a": {"b": 1}, "c": [true]}')[0]
        assert root.key == "root"
        assert root.type == "object"
        assert root.expanded is True

        a, c = root.children
        assert (a.path, a.depth, a.expanded) == ("a", 1, True)
        assert a.children[0].path == "a.b"
        assert a.children[0].expanded is False
        assert c.children[0].path == "c[0]"
        assert c.children[0].type == "boolean"

    def test_toggle(self):
        """Test that toggling returns a new tree."""
        tree = json_to_tree('{"a": {"b": 1}}')
        toggled = toggle_tree_node(tree, "a")
        assert toggled[0].children[0].expanded is False
        assert tree[0].children[0].expanded is True

    def test_value_type_and_preview(self):
        """Test labels and truncated previews."""
        assert get_value_type([1, 2, 3]) == "array[3]"
        assert get_value_type({"a": 1}) == "object{1}"
        assert get_value_type(5) == "number"
        assert get_value_type(None) == "null"

        assert get_value_preview("short") == '"short"'
        preview = get_value_preview("x" * 60)
        assert len(preview) == 53
        assert preview.endswith("...")


class TestVisualizer:
    """Test the node/edge graph."""

    def setup_method(self):
        self.data = generate_visualization_data({"a": 1, "b": [True]})

    def test_nodes_and_edges(self):
        """Test ids, parents and edges in pre-order."""
        assert [n.id for n in self.data.nodes] == ["node_0", "node_1", "node_2", "node_3"]
        assert [n.label for n in self.data.nodes] == ["root", "a", "b", "[0]"]
        assert self.data.nodes[0].children == ["node_1", "node_2"]
        assert self.data.nodes[3].parent == "node_2"
        assert self.data.edges[0].id == "edge_node_0_node_1"
        assert len(self.data.edges) == 3

    def test_node_values(self):
        """Test that only leaves carry values."""
        assert self.data.nodes[0].value is None
        assert self.data.nodes[1].value == 1
        assert self.data.nodes[1].type == "value"
        assert self.data.nodes[2].type == "array"

    def test_counters_are_independent(self):
        """Test that every run starts from its own counter."""
        again = generate_visualization_data({"x": 1})
        assert again.nodes[0].id == "node_0"

        counter = NodeIdCounter()
        generate_visualization_data({"x": 1}, counter=counter)
        shared = generate_visualization_data({"y": 1}, counter=counter)
        assert shared.nodes[0].id == "node_2"

    def test_search_keeps_ancestors(self):
        """Test that a match keeps its path to the root."""
        filtered = filter_nodes(self.data, search_query="true")
        assert [n.id for n in filtered.nodes] == ["node_0", "node_2", "node_3"]
        assert len(filtered.edges) == 2

    def test_type_and_depth_filters(self):
        """Test filtering by data type and depth."""
        by_type = filter_nodes(self.data, filter_type="integer")
        assert [n.id for n in by_type.nodes] == ["node_0", "node_1"]

        by_depth = filter_nodes(self.data, max_depth=1)
        assert len(by_depth.nodes) == 3

    def test_stats(self):
        """Test graph statistics."""
        stats = get_visualization_stats(self.data)
        assert stats["total_nodes"] == 4
        assert stats["total_edges"] == 3
        assert stats["max_depth"] == 2
        assert stats["leaf_nodes"] == 2


class TestConfig:
    """Test loading toolkit configuration."""

    def test_yaml_config(self, tmp_path):
        """Test YAML values and derived options."""
        path = tmp_path / "jsonwalk.yaml"
        path.write_text("separator: _\narray_notation: dot\nindent: 4\nschema_required: true\n")

        config = load_config(path)
        assert config.indent == 4
        assert config.flatten_options().separator == "_"
        assert config.flatten_options().array_notation == ArrayNotation.DOT
        assert config.schema_options().required is True

    def test_json_config(self, tmp_path):
        """Test that JSON files are accepted."""
        path = tmp_path / "jsonwalk.json"
        path.write_text('{"suggestion_limit": 10}')
        assert load_config(path).suggestion_limit == 10

    def test_empty_config(self, tmp_path):
        """Test that an empty file yields defaults."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == ToolkitConfig()

    @pytest.mark.parametrize("content, key", [
        ("colour: blue\n", "colour"),
        ("indent: two\n", "indent"),
        ("preserve_arrays: 1\n", "preserve_arrays"),
        ("array_notation: slash\n", "array_notation"),
        ("separator: ''\n", "separator"),
        ("log_level: LOUD\n", "log_level"),
    ])
    def test_invalid_values(self, tmp_path, content, key):
        """Test that bad keys and values are reported with the key."""
        path = tmp_path / "bad.yaml"
        path.write_text(content)
        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert exc_info.value.key == key

    def test_missing_file(self, tmp_path):
        """Test a missing config file."""
        with pytest.raises(ConfigError):
            load_config(tmp_path / "nope.yaml")

    def test_not_a_mapping(self, tmp_path):
        """Test a config file holding a list."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            load_config(path)


class TestLogging:
    """Test logging setup."""

    def teardown_method(self):
        reset_package_logger()

    def test_setup(self):
        """Test level and handler configuration."""
        logger = setup_logging("debug", json_format=True)
        assert logger.name == "jsonwalk"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

        setup_logging("info")
        assert len(logger.handlers) == 1

    def test_json_formatter(self):
        """Test a formatted record."""
        record = logging.LogRecord("jsonwalk.cli", logging.INFO, __file__, 1, "hello %s", ("x",), None)
        payload = json.loads(JSONFormatter().format(record))
        assert payload["message"] == "hello x"
        assert payload["level"] == "INFO"
        assert payload["name"] == "jsonwalk.cli"

    def test_unknown_level(self):
        """Test that an unknown level name is rejected."""
        with pytest.raises(ValueError):
            setup_logging("loud")


class TestCli:
    """Test the command line entry point."""

    def teardown_method(self):
        reset_package_logger()

    def write(self, tmp_path, name, content):
        path = tmp_path / name
        path.write_text(content if isinstance(content, str) else json.dumps(content))
        return str(path)

    def test_flatten(self, tmp_path, capsys):
        """Test flattening a file."""
        path = self.write(tmp_path, "doc.json", {"a": {"b": 1, "c": [2, 3]}})
        assert main(["flatten", path]) == 0
        assert json.loads(capsys.readouterr().out) == {"a.b": 1, "a.c[0]": 2, "a.c[1]": 3}

    def test_flatten_with_config(self, tmp_path, capsys):
        """Test that config supplies default flatten options."""
        path = self.write(tmp_path, "doc.json", {"a": {"b": [1]}})
        config = self.write(tmp_path, "cfg.yaml", "separator: /\narray_notation: dot\n")
        assert main(["--config", config, "flatten", path]) == 0
        assert json.loads(capsys.readouterr().out) == {"a/b/0": 1}

    def test_unflatten_csv(self, tmp_path, capsys):
        """Test rebuilding a document from CSV."""
        path = self.write(tmp_path, "flat.csv", '"Key","Value","Type"\n"a.b","1","number"\n')
        assert main(["unflatten", path, "--csv"]) == 0
        assert json.loads(capsys.readouterr().out) == {"a": {"b": 1}}

    def test_query(self, tmp_path, capsys):
        """Test a path query printing values."""
        path = self.write(tmp_path, "doc.json", {"book": [{"title": "A"}, {"title": "B"}]})
        assert main(["query", path, "$.book[*].title", "--values"]) == 0
        assert json.loads(capsys.readouterr().out) == ["A", "B"]

    def test_query_invalid_expression(self, tmp_path, capsys):
        """Test that a path without $ is rejected."""
        path = self.write(tmp_path, "doc.json", {"a": 1})
        assert main(["query", path, "a"]) == 1
        assert "JSONPath must start with $" in capsys.readouterr().err

    def test_diff(self, tmp_path, capsys):
        """Test diff output and exit codes."""
        left = self.write(tmp_path, "left.json", {"x": 1})
        right = self.write(tmp_path, "right.json", {"x": 2})

        assert main(["diff", left, right, "--format", "unified"]) == 0
        assert capsys.readouterr().out == "- $.x: 1\n+ $.x: 2\n"

        assert main(["diff", left, right, "--exit-code"]) == 1
        assert main(["diff", left, left, "--exit-code"]) == 0

    def test_validate(self, tmp_path, capsys):
        """Test reporting a syntax error location."""
        path = self.write(tmp_path, "bad.json", '{"a": }')
        assert main(["validate", path]) == 1
        assert f"{path}:1:7:" in capsys.readouterr().err

    def test_convert(self, tmp_path, capsys):
        """Test a YAML to k8s env conversion."""
        path = self.write(tmp_path, "app.yaml", "app:\n  port: 8080\n")
        assert main(["convert", path, "--mode", "yaml-to-k8s-env"]) == 0
        assert capsys.readouterr().out == "- name: APP_PORT\n  value: '8080'\n"

    def test_proto(self, tmp_path, capsys):
        """Test a record conversion."""
        path = self.write(tmp_path, "User.java", "record User(String name)")
        assert main(["proto", path]) == 0
        assert "string name = 1;" in capsys.readouterr().out

    def test_sql(self, tmp_path, capsys):
        """Test filling placeholders from a pasted log."""
        path = self.write(
            tmp_path,
            "query.log",
            "select * from t where id = ?\n"
            "TRACE org.hibernate.orm.jdbc.bind - binding parameter [1] as [BIGINT] - [7]\n",
        )
        assert main(["sql", path]) == 0
        assert capsys.readouterr().out == "select * from t where id = '7'\n"

    def test_missing_file(self, tmp_path, capsys):
        """Test that errors become a message and exit status 1."""
        assert main(["format", str(tmp_path / "missing.json")]) == 1
        assert capsys.readouterr().err.startswith("Error: File not found")

    def test_bad_config(self, tmp_path, capsys):
        """Test that an invalid config is reported."""
        path = self.write(tmp_path, "doc.json", {"a": 1})
        config = self.write(tmp_path, "cfg.yaml", "colour: blue\n")
        assert main(["--config", config, "format", path]) == 1
        assert "Unknown configuration key: colour" in capsys.readouterr().err

    def test_non_utf8_file(self, tmp_path, capsys):
        """Test that undecodable input is reported as an error."""
        path = tmp_path / "latin1.json"
        path.write_bytes(b'{"name": "caf\xe9"}')
        assert main(["format", str(path)]) == 1
        assert capsys.readouterr().err.startswith("Error: File is not valid UTF-8")
