import importlib
from pathlib import Path

import courier_routing

PACKAGE_ROOT = Path(courier_routing.__file__).parent


def _source_dirs() -> list[Path]:
    return sorted(
        {path.parent for path in PACKAGE_ROOT.rglob("*.py") if "__pycache__" not in path.parts}
    )


def test_every_source_directory_is_a_regular_package():
    missing = [str(path.relative_to(PACKAGE_ROOT)) for path in _source_dirs() if not (path / "__init__.py").exists()]
    assert missing == []


def test_every_subpackage_imports():
    for path in _source_dirs():
        relative = path.relative_to(PACKAGE_ROOT)
        name = ".".join(("courier_routing", *relative.parts))
        module = importlib.import_module(name)
        assert module.__file__ is not None
