"""Example usage of the jsonwalk toolkit."""

import json
from jsonwalk import (
    FlattenOptions,
    ArrayNotation,
    flatten_json,
    unflatten_json,
    compare_json,
    generate_unified_diff,
    calculate_similarity_score,
    evaluate_json_path,
    generate_json_schema,
    convert_properties,
)

# Invoice as returned by the legacy system
old_invoice = {
    "id": "INV-001",
    "total": 100.00,
    "status": "PAID",
    "customer": {"name": "Ada", "email": "ada@example.com"},
    "lineItems": [
        {"sku": "WIDGET-001", "quantity": 5, "unitPrice": 10.00},
        {"sku": "GADGET-002", "quantity": 2, "unitPrice": 25.50}
    ]
}

# Same invoice from the new system
new_invoice = {
    "id": "INV-001",
    "total": 100.00,
    "status": "paid",  # Enum casing changed
    "customer": {"name": "Ada", "email": "ada@example.com"},
    "lineItems": [
        {"sku": "WIDGET-001", "quantity": 6, "unitPrice": 10.00},  # Quantity changed
        {"sku": "GADGET-002", "quantity": 2, "unitPrice": 25.50},
        {"sku": "BOLT-003", "quantity": 100, "unitPrice": 0.05}  # Extra item
    ]
}

application_yaml = """
app:
  name: billing
  datasource:
    jdbcUrl: jdbc:postgresql://db:5432/billing
    pool-size: 10
  features:
    - invoices
    - refunds
"""


def main():
    print("=" * 60)
    print("jsonwalk - Example")
    print("=" * 60)

    differences = compare_json(old_invoice, new_invoice)

    print(f"\nSimilarity: {calculate_similarity_score(differences)}%")
    print(f"\nDifferences:")
    for diff in differences:
        if diff.message:
            print(f"  - [{diff.type.value}] {diff.path}")
            print(f"    {diff.message}")

    print("\n" + "-" * 60)
    print("Unified diff:")
    print(generate_unified_diff(differences), end="")


def example_flatten():
    """Flatten and rebuild a document."""
    print("\n" + "=" * 60)
    print("Flatten / Unflatten")
    print("=" * 60)

    flat = flatten_json(old_invoice)
    print(json.dumps(flat, indent=2))

    options = FlattenOptions(separator="_", array_notation=ArrayNotation.DOT)
    print(json.dumps(flatten_json(old_invoice["lineItems"], options), indent=2))

    assert unflatten_json(flat) == old_invoice


def example_query_and_schema():
    """Query paths and infer a schema."""
    print("\n" + "=" * 60)
    print("JSONPath and Schema")
    print("=" * 60)

    for result in evaluate_json_path(new_invoice, "$.lineItems[*].sku"):
        print(f"  {result.path} = {result.value}")

    print(json.dumps(generate_json_schema(new_invoice["customer"]), indent=2))


def example_env():
    """Convert Spring Boot YAML to environment variables."""
    print("\n" + "=" * 60)
    print("YAML to environment variables")
    print("=" * 60)

    print(convert_properties(application_yaml, "yaml-to-env"))
    print()
    print(convert_properties(application_yaml, "yaml-to-k8s-env"))


if __name__ == "__main__":
    main()
    example_flatten()
    example_query_and_schema()
    example_env()
