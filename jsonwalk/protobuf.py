"""Java record to proto3 message conversion."""

from __future__ import annotations

import logging
import re

from .exceptions import RecordSyntaxError

logger = logging.getLogger(__name__)

JAVA_TO_PROTO = {
    "int": "int32",
    "long": "int64",
    "float": "float",
    "double": "double",
    "boolean": "bool",
    "String": "string",
}

_ANNOTATION_LINE = re.compile(r'^\s*@\S+.*$', re.MULTILINE)
_BLOCK_COMMENT = re.compile(r'/\*.*?\*/', re.DOTALL)
_LINE_COMMENT = re.compile(r'//.*$', re.MULTILINE)
_EMPTY_BODY = re.compile(r'\{[^{}]*\}\s*$')
_RECORD_DECLARATION = re.compile(r'record\s+[A-Z]\w*\s*\([^)]*\)\s*$')
_RECORD = re.compile(r'record\s+(\w+)\s*\(([^)]*)\)')
_TYPE_NAME = re.compile(r'^[A-Z]\w*$')
_FIELD_NAME = re.compile(r'^[a-z]\w*$')
_COMMON_VALUE = re.compile(r'(\w+)CommonValue', re.IGNORECASE)
_MESSAGE = re.compile(r'message\s+(\w+)\s*\{(.*?)\}', re.DOTALL)
_GETTER = re.compile(r'(\w+)\s+(\w+)\(\);')
_INTERFACE = re.compile(r'interface\s+(\w+)')


def clean_java_record(java_code: str) -> str:
    """
    Strip annotations, comments and an empty body from a record declaration.

    Raises:
        RecordSyntaxError: if what remains is not ``record Name(Type field, ...)``
            or a field is malformed
    """
    if not java_code or not java_code.strip():
        raise RecordSyntaxError("Input code cannot be empty")

    cleaned = _ANNOTATION_LINE.sub("", java_code)
    cleaned = _BLOCK_COMMENT.sub("", cleaned)
    cleaned = _LINE_COMMENT.sub("", cleaned)
    cleaned = _EMPTY_BODY.sub("", cleaned.strip()).strip()

    if not _RECORD_DECLARATION.search(cleaned):
        raise RecordSyntaxError(
            "Invalid Java record syntax. Expected format: record ClassName(Type field1, Type field2, ...)",
            fragment=cleaned,
        )

    fields_str = _RECORD.search(cleaned).group(2)
    if not fields_str.strip():
        raise RecordSyntaxError("No fields found in record declaration", fragment=cleaned)

    for field in (f.strip() for f in fields_str.split(",")):
        if field:
            _validate_field(field)

    return cleaned


def _validate_field(field: str):
    parts = field.split()
    if len(parts) != 2:
        raise RecordSyntaxError(
            f'Invalid field format: "{field}". Expected format: "Type fieldName"',
            fragment=field,
        )

    type_name, name = parts
    if type_name not in JAVA_TO_PROTO and not _TYPE_NAME.match(type_name):
        raise RecordSyntaxError(
            f'Invalid type "{type_name}" in field "{field}". '
            "Type should be a primitive type or start with an uppercase letter",
            fragment=field,
        )

    if not _FIELD_NAME.match(name):
        raise RecordSyntaxError(
            f'Invalid field name "{name}" in field "{field}". '
            "Field name should start with a lowercase letter",
            fragment=field,
        )


def convert_type(java_type: str) -> str:
    """Map a Java type to its proto3 scalar; other types pass through."""
    return JAVA_TO_PROTO.get(java_type, java_type)


def convert_java_record_to_proto(cleaned_java: str) -> str:
    """
    Render a cleaned record as a proto3 message.

    A ``fooCommonValue`` field expands into ``fooCode`` and ``string fooName``.
    Field numbers follow the declaration slots and may leave gaps; run
    normalize_proto_field_order() to renumber them.
    """
    match = _RECORD.search(cleaned_java)
    if not match:
        raise RecordSyntaxError("Invalid Java record format", fragment=cleaned_java)

    record_name, fields_str = match.groups()
    fields = []

    for index, field in enumerate(fields_str.split(",")):
        parts = field.split()
        if len(parts) < 2:
            raise RecordSyntaxError(f"Invalid field format: {field.strip()}", fragment=field)

        type_name, name = parts[0], parts[1]
        common_value = _COMMON_VALUE.search(name)
        if common_value:
            base_name = common_value.group(1)
            fields.append(f"{convert_type(type_name)} {base_name}Code = {index * 2 + 1};")
            fields.append(f"string {base_name}Name = {index * 2 + 2};")
        else:
            fields.append(f"{convert_type(type_name)} {name} = {index + 1};")

    body = "\n  ".join(fields)
    return f'syntax = "proto3";\n\nmessage {record_name} {{\n  {body}\n}}'


def normalize_proto_field_order(proto_code: str) -> str:
    """Renumber fields of every message 1..n, keeping their order."""
    def renumber(match: re.Match) -> str:
        message_name = match.group(1)
        lines = [line.strip() for line in match.group(2).split("\n")]
        fields = [line for line in lines if line]

        renumbered = [
            f"  {field.split('=')[0].strip()} = {index};"
            for index, field in enumerate(fields, start=1)
        ]
        return "\n".join([f"message {message_name} {{", *renumbered, "}"])

    return _MESSAGE.sub(renumber, proto_code)


def convert_record_to_proto(java_code: str) -> str:
    """Clean, convert and renumber a Java record in one step."""
    cleaned = clean_java_record(java_code)
    proto = normalize_proto_field_order(convert_java_record_to_proto(cleaned))
    logger.debug("Converted record to proto:\n%s", proto)
    return proto


def convert_interface_to_getters(java_interface: str) -> str:
    """
    Add a ``getX()`` default method for every ``x()`` accessor of an interface.

    Raises:
        RecordSyntaxError: if no ``interface Name`` declaration is present
    """
    interface_match = _INTERFACE.search(java_interface)
    if not interface_match:
        raise RecordSyntaxError("Invalid interface format", fragment=java_interface)

    methods = []
    for type_name, name in _GETTER.findall(java_interface):
        getter = f"get{name[:1].upper()}{name[1:]}"
        methods.append(
            f"  {type_name} {name}();\n"
            f"\n"
            f"  default {type_name} {getter}() {{\n"
            f"    return {name}();\n"
            f"  }}"
        )

    body = "\n\n".join(methods)
    return f"public interface {interface_match.group(1)} {{\n{body}\n}}"
