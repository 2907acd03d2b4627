"""Unit tests for the sample post generator (httpx.MockTransport)."""

import json

import httpx
import pytest

from src.tf_seed.generator import (
    FALLBACK_POSTS,
    GenerationError,
    SamplePostGenerator,
    parse_posts,
)


def _reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _generator(handler) -> SamplePostGenerator:
    return SamplePostGenerator(
        api_key="test-key", model="gemini-test", timeout=1.0, transport=httpx.MockTransport(handler)
    )


class TestParsePosts:
    def test_json_array_of_strings(self) -> None:
        assert parse_posts(_reply('["one", " two ", ""]')) == ["one", "two"]

    def test_non_array_reply_is_empty(self) -> None:
        assert parse_posts(_reply('{"posts": ["x"]}')) == []

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(GenerationError):
            parse_posts(_reply("not json"))

    def test_unexpected_shape_raises(self) -> None:
        with pytest.raises(GenerationError):
            parse_posts({"candidates": []})


class TestSamplePostGenerator:
    async def test_success(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=_reply(json.dumps(["a", "https://b.io c"])))

        posts = await _generator(handler).generate()

        assert posts == ["a", "https://b.io c"]
        assert seen[0].url.params["key"] == "test-key"
        assert "gemini-test:generateContent" in seen[0].url.path
        body = json.loads(seen[0].content)
        assert body["generationConfig"]["responseMimeType"] == "application/json"

    async def test_http_error_falls_back(self) -> None:
        posts = await _generator(lambda r: httpx.Response(500)).generate()
        assert posts == FALLBACK_POSTS

    async def test_transport_error_falls_back(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        assert await _generator(handler).generate() == FALLBACK_POSTS

    async def test_malformed_body_falls_back(self) -> None:
        posts = await _generator(lambda r: httpx.Response(200, text="<html>")).generate()
        assert posts == FALLBACK_POSTS

    async def test_missing_key_falls_back_without_network(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        gen = SamplePostGenerator(api_key="", transport=httpx.MockTransport(handler))
        assert await gen.generate() == FALLBACK_POSTS

    async def test_fallback_is_a_copy(self) -> None:
        posts = await SamplePostGenerator(api_key="").generate()
        posts.append("mutated")
        assert len(FALLBACK_POSTS) == 2
