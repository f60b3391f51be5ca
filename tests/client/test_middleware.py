"""中间件逐个单测：超时 / BaseUrl / Opts / 保存 body / JSON / 日志打码。"""

from __future__ import annotations

import logging

import pytest

from tiktok_shop.client.errors import PayloadDecodeError, PayloadEncodeError
from tiktok_shop.client.middleware import (
    BaseUrlMiddleware,
    JsonMiddleware,
    LoggerMiddleware,
    OptsMiddleware,
    SaveRequestBodyMiddleware,
    TimeoutMiddleware,
    redact_query,
)
from tiktok_shop.client.models import RawResponse, Request


def _request(**kwargs) -> Request:
    params = {"method": "GET", "url": "/api/orders/search"}
    params.update(kwargs)
    return Request(**params)


class _Clock:
    def __init__(self, *values: float) -> None:
        self.values = list(values)

    def __call__(self) -> float:
        return self.values.pop(0)


def test_timeout_stamps_timeout_and_deadline():
    mw = TimeoutMiddleware(5, clock=_Clock(100.0))
    req = mw.transform_request(_request())
    assert req.opts["timeout"] == 5
    assert req.opts["deadline"] == 105.0


def test_timeout_turns_late_response_into_failure():
    mw = TimeoutMiddleware(5, clock=_Clock(100.0, 106.0))
    req = mw.transform_request(_request())

    resp = mw.transform_response(req, RawResponse(status=200, body="{}"))

    assert not resp.ok
    assert isinstance(resp.error, TimeoutError)


def test_timeout_passes_response_within_deadline():
    mw = TimeoutMiddleware(5, clock=_Clock(100.0, 104.0))
    req = mw.transform_request(_request())
    resp = RawResponse(status=200, body="{}")
    assert mw.transform_response(req, resp) is resp


@pytest.mark.parametrize(
    "base, path, expected",
    [
        ("https://open-api.tiktokglobalshop.com", "/api/orders", "https://open-api.tiktokglobalshop.com/api/orders"),
        ("https://open-api.tiktokglobalshop.com/", "api/orders", "https://open-api.tiktokglobalshop.com/api/orders"),
        ("https://sandbox.example.com/base", "/v2/x", "https://sandbox.example.com/base/v2/x"),
        ("https://a.example.com", "https://b.example.com/y", "https://b.example.com/y"),
    ],
)
def test_base_url_resolution(base, path, expected):
    assert BaseUrlMiddleware(base).transform_request(_request(url=path)).url == expected


def test_opts_injects_proxy_credential_and_api_name():
    credential = {"app_key": "k", "app_secret": "s"}
    mw = OptsMiddleware("http://127.0.0.1:9090", credential)

    req = mw.transform_request(_request(url="https://h/api/orders", opts={"api_name": "/api/orders"}))

    assert req.opts["proxy"] == "http://127.0.0.1:9090"
    assert req.opts["credential"] is credential
    assert req.opts["api_name"] == "/api/orders"


def test_opts_falls_back_to_url_path_for_api_name():
    req = OptsMiddleware(None, {}).transform_request(_request(url="https://h/api/products"))
    assert req.opts["api_name"] == "/api/products"


def test_save_request_body_keeps_structured_body_before_serialization():
    body = {"page_size": 20}
    saved = SaveRequestBodyMiddleware().transform_request(_request(body=body))
    encoded = JsonMiddleware().transform_request(saved)

    assert encoded.opts["request_body"] is body
    assert encoded.body == '{"page_size":20}'


def test_json_encodes_body_and_sets_content_type():
    req = JsonMiddleware().transform_request(_request(method="POST", body={"name": "中文"}))
    assert req.body == '{"name":"中文"}'
    assert req.headers["Content-Type"] == "application/json"


def test_json_leaves_empty_body_alone():
    req = _request()
    assert JsonMiddleware().transform_request(req) is req


@pytest.mark.parametrize("body", ['{"a":1}', b'{"a":1}'])
def test_json_passes_pre_encoded_body_through(body):
    req = _request(method="POST", body=body)
    assert JsonMiddleware().transform_request(req) is req


def test_json_raises_on_unserializable_body():
    with pytest.raises(PayloadEncodeError):
        JsonMiddleware().transform_request(_request(body={"x": object()}))


def test_json_decodes_json_response():
    resp = RawResponse(status=200, headers={"content-type": "application/json"}, body='{"code": 0}')
    decoded = JsonMiddleware().transform_response(_request(), resp)
    assert decoded.body == {"code": 0}
    assert decoded.ok


def test_json_keeps_non_json_response_as_text():
    resp = RawResponse(status=502, headers={"Content-Type": "text/html"}, body="<html>bad gateway</html>")
    assert JsonMiddleware().transform_response(_request(), resp) is resp


def test_json_broken_payload_becomes_failure():
    resp = RawResponse(status=200, headers={"Content-Type": "application/json"}, body="{not json")
    decoded = JsonMiddleware().transform_response(_request(), resp)
    assert isinstance(decoded.error, PayloadDecodeError)


def test_redact_query_masks_sign_and_access_token():
    query = (("app_key", "k"), ("sign", "abc"), ("access_token", "tok"), ("timestamp", 1))
    assert redact_query(query) == [("app_key", "k"), ("sign", "***"), ("access_token", "***"), ("timestamp", 1)]


# 日志中间件只打 DEBUG，且不出现 sign / secret 明文
def test_logger_never_writes_signature(caplog):
    caplog.set_level(logging.DEBUG, logger="tiktok_shop")
    mw = LoggerMiddleware()
    req = mw.transform_request(
        _request(
            query=(("app_key", "k"), ("sign", "deadbeef")),
            opts={"api_name": "/api/orders/search", "credential": {"app_secret": "topsecret"}},
        )
    )
    mw.transform_response(req, RawResponse(status=200, body={"code": 0}))

    assert caplog.records
    assert all(r.levelno == logging.DEBUG for r in caplog.records)
    text = caplog.text
    assert "deadbeef" not in text
    assert "topsecret" not in text
