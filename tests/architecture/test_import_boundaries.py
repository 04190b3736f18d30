"""
Import-boundary enforcement.

1. Kernel independence: inventory_kernel/** may not import inventory_config.
2. Layer direction: domain and selectors may not import services.
3. Clock discipline: only inventory_kernel/domain/clock.py reads the wall
   clock, and the kernel never reads the environment.
4. Config centralisation: only inventory_config/__init__.py may import the
   loader.

All scanning is done via AST; these tests are read-only.
"""

import ast
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[2]


def _python_files(package: str) -> list[Path]:
    return sorted((REPO_ROOT / package).rglob("*.py"))


def _parse(filepath: Path) -> ast.AST | None:
    try:
        return ast.parse(filepath.read_text(), filename=str(filepath))
    except (SyntaxError, UnicodeDecodeError):
        return None


def _extract_imports(filepath: Path) -> list[tuple[int, str]]:
    """Return (line_number, module_string) for every import in *filepath*."""
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


def _extract_attribute_refs(filepath: Path) -> list[tuple[int, str]]:
    """Return (line_number, 'receiver.attr') for two-level attribute references."""
    tree = _parse(filepath)
    if tree is None:
        return []

    return [
        (node.lineno, f"{node.value.id}.{node.attr}")
        for node in ast.walk(tree)
        if isinstance(node, ast.Attribute) and isinstance(node.value, ast.Name)
    ]


def _matches_any(module: str, prefixes: tuple[str, ...]) -> bool:
    return any(module == p or module.startswith(f"{p}.") for p in prefixes)


def _relative(filepath: Path) -> str:
    return str(filepath.relative_to(REPO_ROOT))


class TestKernelIndependence:
    def test_kernel_never_imports_config(self):
        violations = [
            f"  {_relative(path)}:{lineno} imports '{module}'"
            for path in _python_files("inventory_kernel")
            for lineno, module in _extract_imports(path)
            if _matches_any(module, ("inventory_config",))
        ]

        assert not violations, (
            "inventory_kernel must not depend on inventory_config; "
            "use inventory_config.bridges instead:\n" + "\n".join(violations)
        )


class TestLayerDirection:
    FORBIDDEN = ("inventory_kernel.services",)

    def test_domain_and_selectors_do_not_import_services(self):
        violations: list[str] = []
        for package in ("inventory_kernel/domain", "inventory_kernel/selectors"):
            for path in _python_files(package):
                for lineno, module in _extract_imports(path):
                    if _matches_any(module, self.FORBIDDEN):
                        violations.append(f"  {_relative(path)}:{lineno} imports '{module}'")

        assert not violations, "Upward import into services:\n" + "\n".join(violations)


class TestClockDiscipline:
    WALL_CLOCK = frozenset({
        "datetime.now",
        "datetime.utcnow",
        "date.today",
        "time.time",
    })
    ENVIRONMENT = frozenset({"os.environ", "os.getenv"})
    CLOCK_MODULE = "inventory_kernel/domain/clock.py"

    def test_only_clock_module_reads_wall_clock(self):
        violations = [
            f"  {_relative(path)}:{lineno} uses {ref}"
            for path in _python_files("inventory_kernel")
            if _relative(path) != self.CLOCK_MODULE
            for lineno, ref in _extract_attribute_refs(path)
            if ref in self.WALL_CLOCK
        ]

        assert not violations, (
            "Wall-clock access outside the Clock abstraction:\n" + "\n".join(violations)
        )

    def test_kernel_does_not_read_environment(self):
        violations = [
            f"  {_relative(path)}:{lineno} uses {ref}"
            for path in _python_files("inventory_kernel")
            for lineno, ref in _extract_attribute_refs(path)
            if ref in self.ENVIRONMENT
        ]

        assert not violations, (
            "Environment access in the kernel; route it through "
            "inventory_config:\n" + "\n".join(violations)
        )


class TestConfigCentralisation:
    def test_only_package_entry_point_imports_loader(self):
        allowed = {"inventory_config/__init__.py", "inventory_config/loader.py"}
        violations: list[str] = []

        for package in ("inventory_kernel", "inventory_config", "scripts"):
            for path in _python_files(package):
                if _relative(path) in allowed:
                    continue
                for lineno, module in _extract_imports(path):
                    if _matches_any(module, ("inventory_config.loader",)):
                        violations.append(f"  {_relative(path)}:{lineno} imports '{module}'")

        assert not violations, (
            "Use inventory_config.get_active_config() instead of the loader:\n"
            + "\n".join(violations)
        )
