from __future__ import annotations

import argparse
import ast
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

SRC_ROOT = Path(__file__).resolve().parents[1] / "src" / "courier"

# Frameworks stay at the edges; inner layers only see the layers beneath them.
_EDGE_MODULES = {
    "fastapi",
    "starlette",
    "sqlalchemy",
    "alembic",
    "psycopg",
    "jwt",
    "httpx",
    "requests",
    "redis",
    "courier.api",
    "courier.infrastructure",
}

LAYER_POLICIES: dict[str, frozenset[str]] = {
    "domain": frozenset(
        _EDGE_MODULES
        | {
            "pydantic",
            "opentelemetry",
            "prometheus_client",
            "courier.application",
        }
    ),
    "application": frozenset(_EDGE_MODULES),
}


@dataclass(frozen=True)
class Violation:
    file_path: Path
    line: int
    module: str


def _python_files(root: Path) -> Iterable[Path]:
    if root.is_file() and root.suffix == ".py":
        yield root
        return
    if root.is_dir():
        yield from sorted(root.rglob("*.py"))


def _matches_forbidden(module: str, forbidden_modules: frozenset[str]) -> bool:
    for forbidden in forbidden_modules:
        if module == forbidden or module.startswith(f"{forbidden}."):
            return True
    return False


def _imported_modules(tree: ast.AST) -> Iterable[tuple[int, str]]:
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield node.lineno, alias.name
        elif isinstance(node, ast.ImportFrom) and node.module and node.level == 0:
            yield node.lineno, node.module


def _scan_file(file_path: Path, forbidden_modules: frozenset[str]) -> list[Violation]:
    tree = ast.parse(file_path.read_text(encoding="utf-8"), filename=str(file_path))
    return [
        Violation(file_path=file_path, line=line, module=module)
        for line, module in _imported_modules(tree)
        if _matches_forbidden(module, forbidden_modules)
    ]


def find_violations(
    paths: Sequence[Path],
    forbidden_modules: frozenset[str] = LAYER_POLICIES["domain"],
) -> list[Violation]:
    violations: list[Violation] = []
    for path in paths:
        for file_path in _python_files(path):
            violations.extend(_scan_file(file_path, forbidden_modules))
    return violations


def check_layers(layers: Sequence[str]) -> list[Violation]:
    violations: list[Violation] = []
    for layer in layers:
        violations.extend(find_violations([SRC_ROOT / layer], LAYER_POLICIES[layer]))
    return violations


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Layering check for src/courier: domain and application stay framework-free."
    )
    parser.add_argument(
        "--layer",
        action="append",
        choices=sorted(LAYER_POLICIES),
        default=[],
        help="Layer to check (repeatable). Defaults to every layer.",
    )
    parser.add_argument(
        "--path",
        action="append",
        default=[],
        help="Extra path to scan with the domain policy (repeatable).",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    if args.path:
        violations = find_violations([Path(item) for item in args.path])
    else:
        violations = check_layers(args.layer or sorted(LAYER_POLICIES))

    if not violations:
        print("depcheck passed")
        return 0

    print("depcheck failed: forbidden imports detected")
    for violation in violations:
        print(f"{violation.file_path}:{violation.line} -> {violation.module}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
