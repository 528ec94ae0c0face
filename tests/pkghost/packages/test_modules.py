# tests/pkghost/packages/test_modules.py
import sys
import textwrap

import pytest

from pkghost.packages import ModuleGraph


def _write(path, content):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding="utf-8")


@pytest.fixture()
def pkg_dir(tmp_path):
    root = tmp_path / "foo"
    _write(root / "helper.py", "VALUE = 41\n")
    _write(root / "lib" / "util.py", "def inc(x):\n    return x + 1\n")
    _write(
        root / "main.py",
        """
        from . import helper
        from .lib import util

        ANSWER = util.inc(helper.VALUE)
        """,
    )
    return root


def test_load_supports_relative_imports_and_records_children(pkg_dir):
    graph = ModuleGraph()
    module = graph.load(pkg_dir / "main.py", packageRoot=pkg_dir)
    assert module.ANSWER == 42
    assert graph.get(pkg_dir / "main.py") is module
    children = graph.children(pkg_dir / "main.py")
    assert pkg_dir / "helper.py" in children
    assert pkg_dir / "lib" / "util.py" in children
    assert pkg_dir / "helper.py" in graph
    assert module.__name__ in sys.modules


def test_load_twice_returns_cached_module(pkg_dir):
    graph = ModuleGraph()
    first = graph.load(pkg_dir / "main.py", packageRoot=pkg_dir)
    assert graph.load(pkg_dir / "main.py", packageRoot=pkg_dir) is first


def test_evict_removes_children_under_prefix(pkg_dir):
    graph = ModuleGraph()
    module = graph.load(pkg_dir / "main.py", packageRoot=pkg_dir)
    name = module.__name__

    assert graph.evict(pkg_dir / "main.py", pkg_dir)
    assert pkg_dir / "main.py" not in graph
    assert pkg_dir / "helper.py" not in graph
    assert name not in sys.modules
    assert not any(key.startswith(name.rpartition(".")[0] + ".") for key in sys.modules)

    again = graph.load(pkg_dir / "main.py", packageRoot=pkg_dir)
    assert again is not module
    assert again.ANSWER == 42


def test_evict_keeps_children_outside_prefix(pkg_dir):
    graph = ModuleGraph()
    graph.load(pkg_dir / "main.py", packageRoot=pkg_dir)
    assert graph.evict(pkg_dir / "main.py", pkg_dir / "lib")
    assert pkg_dir / "main.py" not in graph
    assert pkg_dir / "lib" / "util.py" not in graph
    assert pkg_dir / "helper.py" in graph


def test_evict_unknown_path_returns_false(tmp_path):
    assert not ModuleGraph().evict(tmp_path / "nope.py", tmp_path)


def test_failed_execution_leaves_nothing_behind(tmp_path):
    root = tmp_path / "broken"
    _write(root / "helper.py", "X = 1\n")
    _write(root / "main.py", "from . import helper\nraise RuntimeError('bad main')\n")
    before = set(sys.modules)

    graph = ModuleGraph()
    with pytest.raises(RuntimeError, match="bad main"):
        graph.load(root / "main.py", packageRoot=root)
    assert len(graph) == 0
    assert set(sys.modules) - before <= {"_pkghost_packages"}


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        ModuleGraph().load(tmp_path / "missing.py")
