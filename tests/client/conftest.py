"""Shared fakes for client tests: 不发真实 HTTP，只记录收到的 Request。"""

from __future__ import annotations

import json
from typing import List, Optional

import pytest

from tiktok_shop.client.models import RawResponse, Request
from tiktok_shop.client.response import DefaultResponseHandler
from tiktok_shop.core.config import ClientConfig


def _json_response(payload: dict, status: int = 200) -> RawResponse:
    return RawResponse(
        status=status,
        headers={"Content-Type": "application/json; charset=utf-8"},
        body=json.dumps(payload),
    )


class FakeAdapter:
    """记录每次 call 的 Request，按顺序返回预置的 RawResponse。"""

    def __init__(self, *responses: RawResponse) -> None:
        self.responses = list(responses) or [_json_response({"code": 0, "message": "Success", "data": {}})]
        self.calls: List[Request] = []

    def call(self, request: Request) -> RawResponse:
        self.calls.append(request)
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]


@pytest.fixture
def fake_adapter() -> FakeAdapter:
    return FakeAdapter()


def _make_config(credential: Optional[dict] = None, **overrides) -> ClientConfig:
    params = {
        "response_handler": DefaultResponseHandler(),
        "credential": credential or {},
        "timeout": 30,
    }
    params.update(overrides)
    return ClientConfig(**params)


@pytest.fixture
def make_config():
    """工厂 fixture：make_config(credential=..., proxy=...) 生成 ClientConfig。"""
    return _make_config


@pytest.fixture
def make_adapter():
    """工厂 fixture：make_adapter(resp1, resp2, ...) 生成 FakeAdapter。"""
    return FakeAdapter


@pytest.fixture
def json_response():
    """工厂 fixture：json_response({"code": 0}, status=200) 生成 JSON RawResponse。"""
    return _json_response
