import os
import sys

import pytest

# Ensure repo-local imports (e.g., `import uci_client`) resolve without installing.
root_dir = os.path.abspath(os.path.dirname(__file__))
if root_dir not in sys.path:
    sys.path.insert(0, root_dir)


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "-G",
        "--gui",
        action="store_true",
        default=False,
        dest="run_gui",
        help="Run tests marked with @pytest.mark.gui (requires PySide6)",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "gui: tests that need PySide6 / a Qt event loop")


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    if not config.getoption("run_gui"):
        skip_gui = pytest.mark.skip(reason="use -G/--gui to enable GUI tests")
        for item in items:
            if "gui" in item.keywords:
                item.add_marker(skip_gui)
