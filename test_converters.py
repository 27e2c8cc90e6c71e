"""Tests for the env var, protobuf and SQL placeholder converters."""

import pytest
import yaml

from jsonwalk import ConversionError, ConversionMode, RecordSyntaxError
from jsonwalk.env_converter import (
    convert_properties,
    convert_spring_to_env,
    convert_yaml_to_env,
    is_valid_k8s_env_name,
    parse_properties_format,
    property_key_to_env_var,
    validate_k8s_env_name,
)
from jsonwalk.protobuf import (
    clean_java_record,
    convert_interface_to_getters,
    convert_java_record_to_proto,
    convert_record_to_proto,
    convert_type,
    normalize_proto_field_order,
)
from jsonwalk.sql_placeholder import (
    extract_bindings,
    fill_placeholders,
    format_date_time,
    format_param,
    replace_query_params,
    split_sql_and_log,
)


class TestEnvNames:
    """Test property key and Kubernetes name handling."""

    def test_property_key_to_env_var(self):
        """Test dots, dashes and camelCase."""
        assert property_key_to_env_var("app.redis.value-key") == "APP_REDIS_VALUE_KEY"
        assert property_key_to_env_var("abc.efg.gh-oo.makeNow") == "ABC_EFG_GH_OO_MAKE_NOW"
        assert property_key_to_env_var("server.port") == "SERVER_PORT"

    def test_digit_before_capital(self):
        """Test that only a lowercase letter starts a camelCase boundary."""
        assert property_key_to_env_var("value2Key") == "VALUE2KEY"
        assert property_key_to_env_var("app.retryMax") == "APP_RETRY_MAX"

    def test_k8s_names(self):
        """Test valid and invalid Kubernetes env var names."""
        assert is_valid_k8s_env_name("_ok_1") is True
        assert is_valid_k8s_env_name("VALID_NAME") is True
        assert is_valid_k8s_env_name("123bad") is False
        assert is_valid_k8s_env_name("has-dash") is False
        assert is_valid_k8s_env_name("") is False

    def test_k8s_name_length(self):
        """Test the 63 character limit."""
        assert is_valid_k8s_env_name("A" * 63) is True
        result = validate_k8s_env_name("A" * 64)
        assert result.valid is False
        assert "63" in result.error


class TestPropertiesParser:
    """Test the Java properties parser."""

    def test_separators_and_comments(self):
        """Test = and : separators with comment lines skipped."""
        text = "# comment\n! bang\n// slashes\na.b=1\na.c: two\n\nd = x=y\n"
        assert parse_properties_format(text) == {
            "a": {"b": "1", "c": "two"},
            "d": "x=y",
        }

    def test_scalar_replaced_by_branch(self):
        """Test that a later dotted key replaces an earlier scalar."""
        assert parse_properties_format("a=1\na.b=2") == {"a": {"b": "2"}}


class TestYamlToEnv:
    """Test YAML to KEY=value conversion."""

    def test_nested_yaml(self):
        """Test nesting, lists, booleans and empty values."""
        text = (
            "app:\n"
            "  redis:\n"
            "    host: localhost\n"
            "    port: 6379\n"
            "  servers:\n"
            "    - a\n"
            "    - b\n"
            "  debug: true\n"
            "  empty:\n"
        )
        assert convert_yaml_to_env(text) == (
            "APP_REDIS_HOST=localhost\n"
            "APP_REDIS_PORT=6379\n"
            "APP_SERVERS=a,b\n"
            "APP_DEBUG=true\n"
            "APP_EMPTY="
        )

    def test_properties_fallback(self):
        """Test that non-mapping YAML is parsed as properties."""
        text = "app.name=demo\napp.port=8080"
        assert convert_yaml_to_env(text) == "APP_NAME=demo\nAPP_PORT=8080"

    def test_unparseable_input(self):
        """Test input that is neither YAML mapping nor properties."""
        with pytest.raises(ConversionError) as exc_info:
            convert_yaml_to_env("just some words")
        assert "Invalid input format" in str(exc_info.value)


class TestK8sEnv:
    """Test YAML to Kubernetes env list conversion."""

    def test_env_list(self):
        """Test the name/value list layout."""
        text = (
            "app:\n"
            "  redis:\n"
            "    host: localhost\n"
            "    port: 6379\n"
            "  database:\n"
            "    connection-url: jdbc:mysql://localhost:3306/db\n"
        )
        expected = (
            "- name: APP_REDIS_HOST\n"
            "  value: 'localhost'\n"
            "- name: APP_REDIS_PORT\n"
            "  value: '6379'\n"
            "- name: APP_DATABASE_CONNECTION_URL\n"
            "  value: 'jdbc:mysql://localhost:3306/db'"
        )
        assert convert_properties(text, "yaml-to-k8s-env") == expected

    def test_output_is_valid_yaml(self):
        """Test that the env list parses back with quotes intact."""
        text = "app:\n  msg: it's here\n  servers:\n    - s1\n    - s2\n"
        output = convert_properties(text, ConversionMode.YAML_TO_K8S_ENV)
        assert yaml.safe_load(output) == [
            {"name": "APP_MSG", "value": "it's here"},
            {"name": "APP_SERVERS", "value": "s1,s2"},
        ]

    def test_empty_values(self):
        """Test that empty and null values become empty strings."""
        text = 'app:\n  empty_value:\n  null_value: null\n  string_value: ""\n'
        output = convert_properties(text, "yaml-to-k8s-env")
        assert output.count("value: ''") == 3

    def test_properties_input(self):
        """Test properties text as k8s input."""
        text = (
            "app.redis.host=localhost\n"
            "app.redis.port=6379\n"
            "database.url=jdbc:mysql://localhost:3306/db"
        )
        output = convert_properties(text, "yaml-to-k8s-env")
        assert "- name: DATABASE_URL\n  value: 'jdbc:mysql://localhost:3306/db'" in output

    def test_invalid_name(self):
        """Test that a name starting with a digit is rejected."""
        with pytest.raises(ConversionError) as exc_info:
            convert_properties("'123-invalid': value", "yaml-to-k8s-env")
        assert "Invalid Kubernetes environment variable name" in str(exc_info.value)
        assert exc_info.value.mode == "yaml-to-k8s-env"

    def test_name_too_long(self):
        """Test that names over 63 characters are rejected."""
        text = f"app:\n  '{'a' * 64}': value\n"
        with pytest.raises(ConversionError, match="Invalid Kubernetes environment variable name"):
            convert_properties(text, "yaml-to-k8s-env")


class TestSpringToEnv:
    """Test Spring @Value extraction."""

    def test_values_with_defaults(self):
        """Test keys, defaults containing colons and de-duplication."""
        source = '''
        @Value("${app.redis.host:localhost}") private String host;
        @Value( "${app.timeout}" ) private int timeout;
        @Value("${app.url:http://x:80}") private String url;
        @Value("${app.redis.host:localhost}") private String again;
        '''
        assert convert_spring_to_env(source) == (
            "APP_REDIS_HOST=localhost\n"
            "APP_TIMEOUT=\n"
            "APP_URL=http://x:80"
        )

    def test_no_values(self):
        """Test that source without @Value is an error."""
        with pytest.raises(ConversionError, match="No @Value properties found"):
            convert_properties("class Foo {}", "spring-to-env")


class TestPropertiesYaml:
    """Test conversions between YAML and properties text."""

    def test_yaml_to_properties(self):
        """Test bracketed list indices in properties keys."""
        text = "app:\n  name: demo\n  servers:\n    - a\n    - b\n  debug: false\n"
        assert convert_properties(text, "yaml-to-properties") == (
            "app.name=demo\n"
            "app.servers[0]=a\n"
            "app.servers[1]=b\n"
            "app.debug=false"
        )

    def test_properties_to_yaml(self):
        """Test nesting, lists and typed scalars."""
        text = (
            "app.name=demo\n"
            "app.port=8080\n"
            "app.ratio=0.5\n"
            "app.servers[0]=a\n"
            "app.servers[1]=b\n"
            "app.debug=true\n"
            "app.extra=null\n"
        )
        output = convert_properties(text, "properties-to-yaml")
        assert yaml.safe_load(output) == {
            "app": {
                "name": "demo",
                "port": 8080,
                "ratio": 0.5,
                "servers": ["a", "b"],
                "debug": True,
                "extra": None,
            }
        }
        assert output.startswith("app:\n  name: demo")

    def test_properties_to_yaml_without_properties(self):
        """Test that comment-only input is an error."""
        with pytest.raises(ConversionError):
            convert_properties("# nothing here", "properties-to-yaml")


class TestConvertDispatch:
    """Test the conversion dispatcher."""

    def test_blank_input(self):
        """Test that blank input converts to nothing."""
        assert convert_properties("   \n", "yaml-to-env") == ""

    def test_invalid_mode(self):
        """Test that an unknown mode is an error."""
        with pytest.raises(ConversionError) as exc_info:
            convert_properties("a: 1", "yaml-to-xml")
        assert str(exc_info.value) == "Conversion failed: Invalid conversion mode"

    def test_enum_mode(self):
        """Test passing a ConversionMode member."""
        assert convert_properties("a: 1", ConversionMode.YAML_TO_ENV) == "A=1"


class TestProtobuf:
    """Test Java record to proto3 conversion."""

    def test_simple_record(self):
        """Test primitive and String fields."""
        proto = convert_record_to_proto("public record User(String name, int age, long id) {}")
        assert proto == (
            'syntax = "proto3";\n'
            "\n"
            "message User {\n"
            "  string name = 1;\n"
            "  int32 age = 2;\n"
            "  int64 id = 3;\n"
            "}"
        )

    def test_common_value_expansion(self):
        """Test that a CommonValue field becomes a code/name pair."""
        raw = convert_java_record_to_proto("record Order(String id, CodeValue statusCommonValue, int qty)")
        assert "CodeValue statusCode = 3;" in raw
        assert "string statusName = 4;" in raw

        proto = normalize_proto_field_order(raw)
        assert proto.endswith(
            "message Order {\n"
            "  string id = 1;\n"
            "  CodeValue statusCode = 2;\n"
            "  string statusName = 3;\n"
            "  int32 qty = 4;\n"
            "}"
        )

    def test_annotations_and_comments(self):
        """Test cleaning a multi-line annotated record."""
        source = (
            "@Builder\n"
            "// a record\n"
            "public record Item(\n"
            "    /* identifier */ String id,\n"
            "    double price\n"
            ") {}\n"
        )
        cleaned = clean_java_record(source)
        assert "@Builder" not in cleaned
        assert "identifier" not in cleaned

        proto = convert_record_to_proto(source)
        assert "string id = 1;" in proto
        assert "double price = 2;" in proto

    def test_type_mapping(self):
        """Test Java to proto scalar types."""
        assert convert_type("boolean") == "bool"
        assert convert_type("Instant") == "Instant"

    @pytest.mark.parametrize("source, message", [
        ("", "Input code cannot be empty"),
        ("class Foo {}", "Invalid Java record syntax"),
        ("record User()", "No fields found"),
        ("record User(String Name)", 'Invalid field name "Name"'),
        ("record User(string name)", 'Invalid type "string"'),
        ("record User(final String name)", "Invalid field format"),
    ])
    def test_invalid_records(self, source, message):
        """Test malformed record declarations."""
        with pytest.raises(RecordSyntaxError) as exc_info:
            clean_java_record(source)
        assert message in str(exc_info.value)

    def test_interface_getters(self):
        """Test default getters for interface accessors."""
        source = "public interface UserView {\n  String name();\n  int age();\n}"
        result = convert_interface_to_getters(source)
        assert result.startswith("public interface UserView {\n")
        assert "  default String getName() {\n    return name();\n  }" in result
        assert "  default int getAge() {\n    return age();\n  }" in result

    def test_interface_required(self):
        """Test that text without an interface is rejected."""
        with pytest.raises(RecordSyntaxError):
            convert_interface_to_getters("String name();")


HIBERNATE_LOG = (
    "2024-01-15 10:30:00 TRACE org.hibernate.orm.jdbc.bind - binding parameter [2] as [INTEGER] - [30]\n"
    "2024-01-15 10:30:00 TRACE org.hibernate.orm.jdbc.bind - binding parameter [1] as [VARCHAR] - [alice]"
)


class TestSqlPlaceholder:
    """Test filling JDBC placeholders from Hibernate logs."""

    def test_format_param_defaults(self):
        """Test null, booleans and plain strings."""
        assert format_param("null") == "NULL"
        assert format_param("true") == "1"
        assert format_param("false") == "0"
        assert format_param("abc") == "'abc'"

    def test_format_param_timestamps(self):
        """Test timestamp and ISO date-time literals."""
        assert format_param("2024-01-15 10:30:00") == "TIMESTAMP '2024-01-15 10:30:00'"
        assert format_param("2024-01-15T10:30:00Z") == "TIMESTAMP '2024-01-15 10:30:00'"
        assert format_param("2024-01-15T10:30:00.123+07:00") == "TIMESTAMP '2024-01-15 10:30:00'"

    def test_format_param_custom_rules(self):
        """Test overriding defaults and exact-value rules."""
        assert format_param("abc", {"default": lambda p: p.upper()}) == "ABC"
        assert format_param("42", {"42": lambda p: p}) == "42"
        assert format_param("null", {"null": lambda p: "DEFAULT"}) == "DEFAULT"

    def test_format_date_time_passthrough(self):
        """Test that unparseable text is returned unchanged."""
        assert format_date_time("2024-13-45T99:99") == "2024-13-45T99:99"

    def test_extract_bindings(self):
        """Test ordering by parameter number."""
        assert extract_bindings(HIBERNATE_LOG) == ["alice", "30"]
        assert extract_bindings("") == []
        assert extract_bindings("nothing bound") == []

    def test_replace_query_params(self):
        """Test in-order replacement of placeholders."""
        query = "select * from users where name = ? and age = ?"
        assert replace_query_params(query, ["alice", "30"]) == (
            "select * from users where name = 'alice' and age = '30'"
        )
        assert replace_query_params(query, ["alice"]).endswith("age = ?")
        assert replace_query_params("", ["x"]) == ""

    def test_split_sql_and_log(self):
        """Test splitting at the first bind log line."""
        text = "select *\nfrom users where id = ?\n" + HIBERNATE_LOG
        sql_query, log = split_sql_and_log(text)
        assert sql_query == "select *\nfrom users where id = ?"
        assert log == HIBERNATE_LOG

    def test_fill_placeholders(self):
        """Test the combined flow."""
        result = fill_placeholders("update t set a = ? where b = ?", HIBERNATE_LOG)
        assert result == "update t set a = 'alice' where b = '30'"

    def test_fill_placeholders_empty_inputs(self):
        """Test that missing SQL or log yields nothing."""
        assert fill_placeholders("", HIBERNATE_LOG) == ""
        assert fill_placeholders("select ?", "") == ""

    def test_fill_placeholders_failure(self):
        """Test that a failing rule yields an empty string."""
        def broken(param):
            raise ValueError("boom")

        assert fill_placeholders("select ?", HIBERNATE_LOG, {"default": broken}) == ""
