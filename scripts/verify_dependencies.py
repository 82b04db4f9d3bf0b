#!/usr/bin/env python3
"""
Dependency Verification Script
Imports every third-party library FutureCompass needs and reports failures.
"""

import sys
from importlib import import_module

# Runtime and test dependencies to verify
DEPENDENCIES = [
    ("pydantic", "Pydantic"),
    ("structlog", "Structlog"),
    ("httpx", "HTTPX"),
    ("jsonschema", "JSON Schema"),
    ("jinja2", "Jinja2"),
    ("dotenv", "python-dotenv"),
    ("rich", "Rich"),
    ("fastapi", "FastAPI"),
    ("uvicorn", "Uvicorn"),
    ("pytest", "Pytest"),
    ("pytest_asyncio", "pytest-asyncio"),
    ("pytest_mock", "pytest-mock"),
]


def verify_imports() -> list[str]:
    """Import each dependency; return display names of the ones that failed."""
    failed = []

    print("Checking FutureCompass dependencies")

    for module_name, display_name in DEPENDENCIES:
        try:
            import_module(module_name)
            print(f"[OK] {display_name}")
        except ImportError as e:
            print(f"[FAILED] {display_name}: {e}")
            failed.append(display_name)

    return failed


def main() -> int:
    failed = verify_imports()
    print("-" * 40)
    if not failed:
        print(f"[SUCCESS] {len(DEPENDENCIES)} packages importable")
        return 0
    print(f"[ERROR] missing: {', '.join(failed)}")
    print("Run: pip install -e \".[test]\"")
    return 1


if __name__ == "__main__":
    sys.exit(main())
