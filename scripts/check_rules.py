"""Run an entity validation described in a JSON file and print the result."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import anyio

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from rulebook.application.use_cases.validation import Validator  # noqa: E402
from rulebook.config import get_settings  # noqa: E402
from rulebook.domain.errors import ValidationConfigurationError  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments for a rule check."""

    parser = argparse.ArgumentParser(
        description="Validate actor/input/record data against entity validations.",
    )
    parser.add_argument(
        "validations",
        type=Path,
        help="JSON file with the entity validations (scopes and conditions)",
    )
    parser.add_argument(
        "data",
        type=Path,
        help="JSON file with optional 'input', 'actor' and 'record' objects",
    )
    parser.add_argument("--operation", required=True, help="Operation name, e.g. create")
    parser.add_argument("--entity", required=True, help="Entity name used in message ids")
    parser.add_argument(
        "--verbose-errors",
        action="store_true",
        help="Include expected/received values in the reported errors",
    )
    return parser.parse_args(argv)


def _load_json(path: Path) -> dict:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise SystemExit(f"Could not read {path}: {exc}") from exc


def main(argv: list[str] | None = None) -> int:
    """Validate the data file and return ``0`` when it passes."""

    args = parse_args(argv)
    validations = _load_json(args.validations)
    data = _load_json(args.data)

    validator = Validator.from_settings(get_settings())
    try:
        result = anyio.run(
            lambda: validator.validate_entity(
                operation_name=args.operation,
                entity_name=args.entity,
                entity_validations=validations,
                input=data.get("input"),
                actor=data.get("actor"),
                record=data.get("record"),
                verbose_errors=args.verbose_errors or None,
            )
        )
    except ValidationConfigurationError as exc:
        raise SystemExit(f"Invalid validations: {exc}") from exc

    print(json.dumps(result.to_dict(), indent=2))
    return 0 if result.passed else 1


if __name__ == "__main__":
    sys.exit(main())
