from __future__ import annotations

import ast
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
PACKAGE = ROOT / "cpm_core"


def _line_count(path: Path) -> int:
    return len(path.read_text(encoding="utf-8", errors="ignore").splitlines())


def _python_files(root: Path):
    for path in root.rglob("*.py"):
        if "dist" in path.parts or "build" in path.parts:
            continue
        yield path


def _imported_modules(path: Path) -> list[str]:
    tree = ast.parse(path.read_text(encoding="utf-8", errors="ignore"))
    modules: list[str] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            modules.extend(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.level == 0:
            modules.append(node.module or "")
    return modules


def test_no_python_module_exceeds_hard_line_limit():
    offenders = []
    for path in _python_files(ROOT):
        lines = _line_count(path)
        if lines > 1200:
            offenders.append((str(path.relative_to(ROOT)), lines))
    assert not offenders, f"Modules exceed hard 1200-line limit: {offenders}"


def test_domain_layer_does_not_import_services():
    violations: list[tuple[str, str]] = []
    for path in _python_files(PACKAGE / "domain"):
        for name in _imported_modules(path):
            if name.startswith("cpm_core.services"):
                violations.append((str(path.relative_to(ROOT)), name))
    assert not violations, f"Domain layer imports service layer: {violations}"


def test_scheduling_engine_has_no_io_dependencies():
    forbidden = {"sqlite3", "sqlalchemy", "requests", "socket", "subprocess", "threading"}
    violations: list[tuple[str, str]] = []
    for path in _python_files(PACKAGE / "services"):
        for name in _imported_modules(path):
            if name.split(".")[0] in forbidden:
                violations.append((str(path.relative_to(ROOT)), name))
    assert not violations, f"Scheduling services import I/O modules: {violations}"
