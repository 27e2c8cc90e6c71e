"""Fill JDBC "?" placeholders from Hibernate parameter binding logs."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Callable, Optional

logger = logging.getLogger(__name__)

FormatRules = dict[str, Callable[[str], str]]

HIBERNATE_BIND_LOGGER = "org.hibernate.orm.jdbc.bind"

DEFAULT_RULES: FormatRules = {
    "null": lambda param: "NULL",
    "true": lambda param: "1",
    "false": lambda param: "0",
    "default": lambda param: f"'{param}'",
}

_FULL_TIMESTAMP = re.compile(r'^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$')
_ISO_DATE_TIME = re.compile(
    r'^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(?::\d{2})?(?:\.\d+)?(?:Z|[+-]\d{2}:?\d{2})?$'
)
_BINDING = re.compile(r'binding parameter \[(\d+)\] as \[\w+\] - \[(.*?)\]')


def format_date_time(text: str) -> str:
    """
    Normalise an ISO date-time to ``YYYY-MM-DD HH:MM:SS``.

    The wall-clock time is kept as written; any UTC offset is dropped.
    Unparseable input is returned unchanged.
    """
    candidate = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        return text
    return parsed.strftime("%Y-%m-%d %H:%M:%S")


def format_param(param: str, custom_rules: Optional[FormatRules] = None) -> str:
    """
    Render one bound value as a SQL literal.

    Args:
        param: Value as printed in the binding log
        custom_rules: Overrides for "null", "true", "false" and "default",
            or rules keyed by an exact parameter value

    Returns:
        SQL literal text
    """
    custom_rules = custom_rules or {}
    rules = {**DEFAULT_RULES, **custom_rules}

    if param in ("null", "true", "false"):
        return rules[param](param)

    if _FULL_TIMESTAMP.match(param):
        return f"TIMESTAMP '{param}'"

    if _ISO_DATE_TIME.match(param):
        return f"TIMESTAMP '{format_date_time(param)}'"

    if param in custom_rules:
        return custom_rules[param](param)
    return rules["default"](param)


def extract_bindings(log: str) -> list[Optional[str]]:
    """
    Collect bound values from Hibernate log lines, ordered by parameter number.

    Parameter numbers with no log line leave a None gap.
    """
    if not log:
        return []

    bound: dict[int, str] = {}
    for position, value in _BINDING.findall(log):
        bound[int(position)] = value

    if not bound:
        return []

    bindings: list[Optional[str]] = [None] * max(bound)
    for position, value in bound.items():
        if position >= 1:
            bindings[position - 1] = value
    return bindings


def replace_query_params(
    query: str,
    params: list[Optional[str]],
    custom_rules: Optional[FormatRules] = None
) -> str:
    """Replace each "?" in order; placeholders without a binding are kept."""
    if not query:
        return ""

    position = 0

    def substitute(match: re.Match) -> str:
        nonlocal position
        index = position
        position += 1
        if index >= len(params) or params[index] is None:
            logger.debug("No binding for placeholder %d", index + 1)
            return match.group(0)
        return format_param(params[index], custom_rules)

    return re.sub(r'\?', substitute, query)


def split_sql_and_log(text: str) -> tuple[str, str]:
    """
    Split pasted text into the SQL statement and the binding log.

    Everything from the first line mentioning the Hibernate bind logger
    onwards is log.
    """
    sql_lines = []
    log_lines = []
    found_log = False

    for line in text.split("\n"):
        if HIBERNATE_BIND_LOGGER in line:
            found_log = True
        if found_log:
            log_lines.append(line)
        else:
            sql_lines.append(line)

    return "\n".join(sql_lines).strip(), "\n".join(log_lines).strip()


def fill_placeholders(
    sql_query: str,
    log: str,
    custom_rules: Optional[FormatRules] = None
) -> str:
    """
    Substitute the values of a binding log into a query.

    Returns "" when either input is empty or formatting fails.
    """
    if not sql_query or not log:
        return ""

    try:
        return replace_query_params(sql_query, extract_bindings(log), custom_rules)
    except Exception:
        logger.exception("Error formatting SQL")
        return ""
