from __future__ import annotations

import importlib
import os
import platform
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def _is_linux_headless() -> bool:
    if platform.system() != "Linux":
        return False
    return not (os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY"))


if _is_linux_headless():
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    os.environ.setdefault("QT_OPENGL", "software")


_UI_BACKEND_ERROR: str | None = None


def _detect_ui_backend_issue() -> str | None:
    try:
        importlib.import_module("PySide6")
        importlib.import_module("PySide6.QtWidgets")
        return None
    except Exception as exc:  # pragma: no cover - depende del host de ejecución
        return f"PySide6/Qt no disponible para tests UI: {exc}"


def pytest_configure(config: pytest.Config) -> None:
    global _UI_BACKEND_ERROR
    config.addinivalue_line("markers", "ui: tests de interfaz PySide6")
    _UI_BACKEND_ERROR = _detect_ui_backend_issue()


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    skip_ui = None
    if _UI_BACKEND_ERROR is not None:
        skip_ui = pytest.mark.skip(reason=_UI_BACKEND_ERROR)

    for item in items:
        if "tests/ui/" in item.nodeid:
            item.add_marker(pytest.mark.ui)
        if skip_ui is not None and "ui" in item.keywords:
            item.add_marker(skip_ui)


from garantias.domain.models import RegistroGarantia


@pytest.fixture
def registro_factory():
    contador = {"n": 0}

    def _crear(**campos: object) -> RegistroGarantia:
        contador["n"] += 1
        base = {
            "id": f"row-{contador['n']}",
            "fecha": "2024-01-05",
            "nombre_equipo": "iPhone 13",
            "marca_equipo": "Apple",
            "imei_malo": f"35000000000{contador['n']:04d}",
            "tienda": "K24 Norte",
            "falla": "Pantalla",
        }
        base.update(campos)
        return RegistroGarantia(**base)  # type: ignore[arg-type]

    return _crear


class FakeTransporte:
    def __init__(self, nombre: str, filas: list[dict[str, str]] | None = None, error: Exception | None = None) -> None:
        self.nombre = nombre
        self._filas = filas or []
        self._error = error
        self.llamadas: list[float] = []

    def obtener_filas(self, timeout: float) -> list[dict[str, str]]:
        self.llamadas.append(timeout)
        if self._error is not None:
            raise self._error
        return list(self._filas)


class FakeMutaciones:
    def __init__(self, ok: bool = True, configurado: bool = True) -> None:
        self.ok = ok
        self._configurado = configurado
        self.llamadas: list[tuple] = []

    @property
    def configurado(self) -> bool:
        return self._configurado

    def crear(self, registro: RegistroGarantia) -> bool:
        self.llamadas.append(("crear", registro))
        return self.ok

    def actualizar(self, registro: RegistroGarantia, imei_original: str) -> bool:
        self.llamadas.append(("actualizar", registro, imei_original))
        return self.ok

    def eliminar(self, registro: RegistroGarantia) -> bool:
        self.llamadas.append(("eliminar", registro))
        return self.ok


@pytest.fixture
def fake_transporte():
    return FakeTransporte


@pytest.fixture
def fake_mutaciones():
    return FakeMutaciones
