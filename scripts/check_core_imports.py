#!/usr/bin/env python3
"""
Fail if core imports the facade or the domain operations.
Checks all Python files under src/workfront_client/core/.
"""

from __future__ import annotations

import ast
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
PACKAGE = "workfront_client"
CORE_DIR = REPO_ROOT / "src" / PACKAGE / "core"

FORBIDDEN_PREFIXES = (
    f"{PACKAGE}.tools",
    f"{PACKAGE}.workfront",
    f"{PACKAGE}.models",
)


def is_forbidden(module: str) -> bool:
    return any(
        module == prefix or module.startswith(prefix + ".")
        for prefix in FORBIDDEN_PREFIXES
    )


def resolve_relative(path: Path, module: str, level: int) -> str:
    """Absolute dotted name of a relative import made from `path`."""
    parts = [PACKAGE, *path.relative_to(CORE_DIR.parent).parent.parts]
    if level > 1:
        parts = parts[: len(parts) - (level - 1)]
    if module:
        parts.append(module)
    return ".".join(parts)


def scan_file(path: Path) -> list[str]:
    errors: list[str] = []
    tree = ast.parse(path.read_text())
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                mod = alias.name
                if is_forbidden(mod):
                    errors.append(f"{path}: forbidden import '{mod}'")
        elif isinstance(node, ast.ImportFrom):
            mod = node.module or ""
            if node.level:
                mod = resolve_relative(path, mod, node.level)
                names = [f"{mod}.{alias.name}" for alias in node.names]
            else:
                names = []
            if any(is_forbidden(m) for m in [mod, *names] if m):
                errors.append(f"{path}: forbidden import '{mod}'")
    return errors


def main() -> int:
    violations: list[str] = []
    for py_file in CORE_DIR.rglob("*.py"):
        violations.extend(scan_file(py_file))

    if violations:
        for v in violations:
            print(v, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
