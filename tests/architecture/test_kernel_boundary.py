"""
Layer boundaries and purity contract.

1. fiscal_kernel/** may NOT import any higher layer. The kernel never
   depends upward.

2. Each higher layer may only import the layers below it:
   config -> kernel; engines -> kernel; modules -> kernel, config;
   presenters -> kernel.

3. Computation code never reads the wall clock.

4. The kernel invariants declaration is complete and non-empty.

These tests read source code via AST -- they cannot break anything.
"""

import ast
from pathlib import Path

from fiscal_kernel.invariants import (
    ALL_KERNEL_INVARIANTS,
    FORBIDDEN_KERNEL_IMPORTS,
    KernelInvariant,
)

ROOT = Path(__file__).resolve().parent.parent.parent

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _python_files(package: str) -> list[Path]:
    return sorted((ROOT / package).rglob("*.py"))


def _parse(filepath: Path) -> ast.AST | None:
    try:
        return ast.parse(filepath.read_text(), filename=str(filepath))
    except (SyntaxError, UnicodeDecodeError):
        return None


def _extract_imports(filepath: Path) -> list[tuple[int, str]]:
    """Extract (line_number, module_string) for all imports in a file."""
    tree = _parse(filepath)
    if tree is None:
        return []

    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom):
            if node.module:
                results.append((node.lineno, node.module))
    return results


def _violations(package: str, forbidden: tuple[str, ...]) -> list[str]:
    found: list[str] = []
    for filepath in _python_files(package):
        for lineno, module in _extract_imports(filepath):
            for prefix in forbidden:
                if module == prefix or module.startswith(f"{prefix}."):
                    found.append(
                        f"  {filepath.relative_to(ROOT)}:{lineno} imports '{module}'"
                    )
    return found


# ---------------------------------------------------------------------------
# Test: Kernel has no upward dependencies
# ---------------------------------------------------------------------------


class TestKernelNoUpwardDependencies:
    def test_kernel_does_not_import_forbidden_packages(self):
        violations = _violations("fiscal_kernel", FORBIDDEN_KERNEL_IMPORTS)
        assert not violations, (
            "Kernel boundary violation -- fiscal_kernel/** must not import "
            "upward packages:\n" + "\n".join(violations)
        )

    def test_kernel_does_not_parse_yaml(self):
        violations = _violations("fiscal_kernel", ("yaml",))
        assert not violations, (
            "Kernel purity violation -- parameter files are read by "
            "fiscal_config only:\n" + "\n".join(violations)
        )


# ---------------------------------------------------------------------------
# Test: Layer rules above the kernel
# ---------------------------------------------------------------------------


class TestLayerBoundaries:
    def test_config_depends_on_kernel_only(self):
        violations = _violations(
            "fiscal_config",
            ("fiscal_engines", "fiscal_modules", "fiscal_services", "fiscal_presenters"),
        )
        assert not violations, "\n".join(violations)

    def test_engines_do_not_read_config(self):
        violations = _violations(
            "fiscal_engines",
            ("fiscal_config", "fiscal_modules", "fiscal_services", "fiscal_presenters"),
        )
        assert not violations, (
            "Engine boundary violation -- fiscal_engines/** are pure stages "
            "over kernel records:\n" + "\n".join(violations)
        )

    def test_modules_do_not_orchestrate(self):
        violations = _violations(
            "fiscal_modules",
            ("fiscal_engines", "fiscal_services", "fiscal_presenters"),
        )
        assert not violations, "\n".join(violations)

    def test_presenters_read_kernel_records_only(self):
        violations = _violations(
            "fiscal_presenters",
            ("fiscal_config", "fiscal_engines", "fiscal_modules", "fiscal_services"),
        )
        assert not violations, (
            "Presenter boundary violation -- presenters never evaluate "
            "business rules:\n" + "\n".join(violations)
        )


# ---------------------------------------------------------------------------
# Test: No wall-clock reads in computation code
# ---------------------------------------------------------------------------


class TestNoWallClock:
    PACKAGES = ("fiscal_kernel", "fiscal_engines", "fiscal_modules", "fiscal_presenters")
    CLOCK_CALLS = {"now", "today", "utcnow"}

    def test_no_clock_calls(self):
        violations: list[str] = []
        for package in self.PACKAGES:
            for filepath in _python_files(package):
                tree = _parse(filepath)
                if tree is None:
                    continue
                for node in ast.walk(tree):
                    if (
                        isinstance(node, ast.Call)
                        and isinstance(node.func, ast.Attribute)
                        and node.func.attr in self.CLOCK_CALLS
                        and isinstance(node.func.value, ast.Name)
                        and node.func.value.id in ("datetime", "date")
                    ):
                        violations.append(
                            f"  {filepath.relative_to(ROOT)}:{node.lineno} "
                            f"calls {node.func.value.id}.{node.func.attr}()"
                        )
        assert not violations, (
            "Determinism violation -- reference dates must be passed in:\n"
            + "\n".join(violations)
        )


# ---------------------------------------------------------------------------
# Test: Invariants declaration
# ---------------------------------------------------------------------------


class TestKernelInvariantsDeclaration:
    def test_declaration_is_complete(self):
        assert ALL_KERNEL_INVARIANTS == frozenset(KernelInvariant)
        assert len(ALL_KERNEL_INVARIANTS) == 7

