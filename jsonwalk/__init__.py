"""
jsonwalk - JSON tree-walk toolkit

Flatten and unflatten nested documents, diff two documents positionally,
evaluate JSONPath expressions, infer JSON Schemas from samples, and convert
YAML / properties / Spring configuration into environment variables.
"""

from .models import (
    MISSING,
    Kind,
    ArrayNotation,
    FlattenOptions,
    DiffType,
    DiffItem,
    DiffSummary,
    PathResult,
    ValidationResult,
    SchemaOptions,
    ConversionMode,
)
from .exceptions import (
    JsonWalkError,
    InputFormatError,
    PathSyntaxError,
    ConversionError,
    RecordSyntaxError,
    ConfigError,
)
from .classifier import classify
from .flattener import (
    flatten_json,
    unflatten_json,
    convert_to_csv,
    convert_from_csv,
    suggest_optimal_options,
)
from .differ import JsonDiffer, compare_json
from .diff_export import (
    generate_diff_summary,
    generate_unified_diff,
    calculate_similarity_score,
)
from .jsonpath import (
    ExtendedPathEvaluator,
    evaluate_json_path,
    validate_json_path,
    get_json_path_suggestions,
)
from .schema_generator import generate_json_schema
from .stats import analyze_json_stats
from .json_utils import parse_json, validate_json
from .env_converter import (
    convert_properties,
    property_key_to_env_var,
    is_valid_k8s_env_name,
)
from .config import ToolkitConfig, load_config

__version__ = "1.0.0"
__all__ = [
    # Models
    "MISSING",
    "Kind",
    "ArrayNotation",
    "FlattenOptions",
    "DiffType",
    "DiffItem",
    "DiffSummary",
    "PathResult",
    "ValidationResult",
    "SchemaOptions",
    "ConversionMode",
    # Errors
    "JsonWalkError",
    "InputFormatError",
    "PathSyntaxError",
    "ConversionError",
    "RecordSyntaxError",
    "ConfigError",
    # Core walks
    "classify",
    "flatten_json",
    "unflatten_json",
    "convert_to_csv",
    "convert_from_csv",
    "suggest_optimal_options",
    "JsonDiffer",
    "compare_json",
    "generate_diff_summary",
    "generate_unified_diff",
    "calculate_similarity_score",
    "ExtendedPathEvaluator",
    "evaluate_json_path",
    "validate_json_path",
    "get_json_path_suggestions",
    "generate_json_schema",
    "analyze_json_stats",
    # Text boundary
    "parse_json",
    "validate_json",
    # Converters
    "convert_properties",
    "property_key_to_env_var",
    "is_valid_k8s_env_name",
    # Config
    "ToolkitConfig",
    "load_config",
]
