import asyncio

import httpx
import pytest

from uplink.main import app


@pytest.fixture(autouse=True)
def default_env(monkeypatch):
    monkeypatch.delenv("UPLINK_PORT", raising=False)
    monkeypatch.delenv("UPLINK_TRAILING", raising=False)


async def _request(method: str, path: str, **kwargs) -> httpx.Response:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.request(method, path, **kwargs)


def _post(path: str, **kwargs) -> httpx.Response:
    return asyncio.run(_request("POST", path, **kwargs))


def test_health():
    resp = asyncio.run(_request("GET", "/health"))
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


def test_decode_hex_payload():
    resp = _post("/api/uplinks/decode", json={"payload_hex": "05 F8 00 42", "fPort": 6})
    assert resp.status_code == 200
    body = resp.json()
    assert body["port"] == 6
    assert body["bitmap"] == 0x05
    assert body["fields"] == {"battery_v": -0.5, "boot": 66}
    assert body["units"] == {"battery_v": "V", "boot": "-"}
    assert body["derived"] is None


def test_decode_byte_list_with_derived_values():
    resp = _post("/api/uplinks/decode", json={"bytes": [0x08, 0x23, 0x00, 0x80, 0x00]})
    assert resp.status_code == 200
    body = resp.json()
    assert body["fields"]["temp_c"] == 35.0
    assert body["derived"]["dew_point_c"] == pytest.approx(23.0, abs=0.5)
    assert body["derived"]["heat_index_c"] == pytest.approx(40.7, abs=0.2)


def test_decode_wrong_port():
    resp = _post("/api/uplinks/decode", json={"payload_hex": "011800", "fPort": 3})
    assert resp.status_code == 422
    assert "unsupported port 3" in resp.json()["detail"]


def test_decode_truncated_record():
    resp = _post("/api/uplinks/decode", json={"payload_hex": "08198D"})
    assert resp.status_code == 400
    assert "truncated" in resp.json()["detail"]


def test_decode_empty_record():
    resp = _post("/api/uplinks/decode", json={"bytes": []})
    assert resp.status_code == 400
    assert "bitmap" in resp.json()["detail"]


def test_decode_trailing_policy_from_environment(monkeypatch):
    resp = _post("/api/uplinks/decode", json={"payload_hex": "011800FF"})
    assert resp.status_code == 200

    monkeypatch.setenv("UPLINK_TRAILING", "reject")
    resp = _post("/api/uplinks/decode", json={"payload_hex": "011800FF"})
    assert resp.status_code == 400
    assert "trailing" in resp.json()["detail"]


@pytest.mark.parametrize(
    "body",
    [
        {"payload_hex": "not hex"},
        {"bytes": [1, 256]},
        {"payload_hex": "011800", "bytes": [1, 24, 0]},
        {},
    ],
)
def test_decode_invalid_request_body(body):
    resp = _post("/api/uplinks/decode", json=body)
    assert resp.status_code == 422


def test_decode_raw_body():
    resp = _post(
        "/api/uplinks/decode/raw",
        content=bytes.fromhex("011800"),
        headers={"Content-Type": "application/octet-stream", "X-Port": "6"},
    )
    assert resp.status_code == 200
    assert resp.json()["fields"] == {"battery_v": 1.5}


def test_decode_raw_uses_configured_port(monkeypatch):
    monkeypatch.setenv("UPLINK_PORT", "2")
    resp = _post("/api/uplinks/decode/raw", content=b"\x01\x18\x00")
    assert resp.status_code == 200
    resp = _post("/api/uplinks/decode/raw", content=b"\x01\x18\x00", headers={"X-Port": "6"})
    assert resp.status_code == 422


def test_encode_readings():
    resp = _post("/api/uplinks/encode", json={"Vbat": -0.5, "boot": 66})
    assert resp.status_code == 200
    assert resp.json() == {"payload_hex": "05F80042", "bitmap": 5, "length": 4}


def test_encode_clamps_out_of_range_values():
    resp = _post("/api/uplinks/encode", json={"battery_v": 100.0})
    assert resp.json()["payload_hex"] == "017FFF"


def test_encode_then_decode():
    encoded = _post(
        "/api/uplinks/encode",
        json={"temp_c": 30.0, "rh_pct": 70.0, "light_wm2": 512.0, "probe_temp_c": 28.5},
    ).json()
    resp = _post("/api/uplinks/decode", json={"payload_hex": encoded["payload_hex"]})
    fields = resp.json()["fields"]
    assert fields["temp_c"] == 30.0
    assert fields["rh_pct"] == pytest.approx(70.0, abs=0.01)
    assert fields["light_wm2"] == pytest.approx(512.0, rel=1e-3)
    assert fields["probe_temp_c"] == 28.5
