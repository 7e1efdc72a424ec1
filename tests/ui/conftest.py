from __future__ import annotations

import pytest


@pytest.fixture(scope="session")
def qapp():
    try:
        from PySide6.QtWidgets import QApplication
    except Exception:  # noqa: BLE001
        pytest.skip("PySide6 no disponible correctamente en entorno CI", allow_module_level=True)
    app = QApplication.instance() or QApplication([])
    yield app
