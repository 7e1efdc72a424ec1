from __future__ import annotations

import json

import requests

from garantias.infrastructure.script_client import ScriptMutacionesClient, construir_payload


class _FakeResponse:
    def __init__(self, payload=None, raise_json: bool = False) -> None:
        self._payload = payload
        self._raise_json = raise_json

    def json(self):
        if self._raise_json:
            raise ValueError("no json")
        return self._payload


class _FakeSession:
    def __init__(self, response: _FakeResponse | None = None, error: Exception | None = None) -> None:
        self._response = response
        self._error = error
        self.posts: list[dict] = []

    def post(self, url: str, data: bytes, headers: dict[str, str]):
        self.posts.append({"url": url, "body": json.loads(data.decode("utf-8")), "headers": headers})
        if self._error is not None:
            raise self._error
        return self._response


def test_update_con_resultado_error_devuelve_false(registro_factory) -> None:
    session = _FakeSession(_FakeResponse({"result": "error"}))
    client = ScriptMutacionesClient("https://script.example/exec", session)

    assert client.actualizar(registro_factory(imei_malo="222"), "111") is False
    body = session.posts[0]["body"]
    assert body["action"] == "update"
    assert body["originalImei"] == "111"
    assert body["imeiMalo"] == "222"


def test_create_exitoso(registro_factory) -> None:
    session = _FakeSession(_FakeResponse({"result": "success"}))
    client = ScriptMutacionesClient("https://script.example/exec", session)

    assert client.crear(registro_factory(equipo_procesado=True)) is True
    post = session.posts[0]
    assert post["headers"]["Content-Type"].startswith("text/plain")
    assert post["body"]["action"] == "create"
    assert post["body"]["equipoProcesado"] is True
    assert "originalImei" not in post["body"]


def test_delete_solo_envia_imei(registro_factory) -> None:
    payload = construir_payload("delete", registro_factory(imei_malo="555"))

    assert payload == {"action": "delete", "imeiMalo": "555"}


def test_errores_de_red_y_json_devuelven_false(registro_factory) -> None:
    caido = ScriptMutacionesClient("https://x", _FakeSession(error=requests.ConnectionError("down")))
    basura = ScriptMutacionesClient("https://x", _FakeSession(_FakeResponse(raise_json=True)))

    assert caido.eliminar(registro_factory()) is False
    assert basura.crear(registro_factory()) is False


def test_sin_url_no_hay_post(registro_factory) -> None:
    session = _FakeSession(_FakeResponse({"result": "success"}))
    client = ScriptMutacionesClient("  ", session)

    assert client.configurado is False
    assert client.crear(registro_factory()) is False
    assert session.posts == []
