"""
Tests for providers/gemini_provider.py.

The google-genai client is replaced by a MagicMock so no network is used.

Covers:
  - request: model id, image part MIME type, JSON response_mime_type
  - reply parsing: JSON and prose-wrapped replies, no-JSON reply
  - API / network errors → TransportError
  - data-URI prefixed input is accepted
"""
from __future__ import annotations

import base64
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from google.genai import errors as genai_errors

from errors import ParseError, TransportError
from providers.gemini_provider import GeminiProvider


def make_provider(reply_text: str | None = None, side_effect=None):
    mock_client = MagicMock()
    mock_client.aio.models.generate_content = AsyncMock(
        return_value=MagicMock(text=reply_text),
        side_effect=side_effect,
    )
    with patch("providers.gemini_provider.genai.Client", return_value=mock_client):
        provider = GeminiProvider("test-gemini-key", "gemini-2.0-flash")
    return provider, mock_client.aio.models.generate_content


@pytest.fixture
def png_b64(png_bytes) -> str:
    return base64.b64encode(png_bytes).decode()


@pytest.mark.asyncio
class TestIdentify:
    async def test_json_reply(self, png_b64):
        provider, call = make_provider(
            '{"bagName": "Speedy 30", "brand": "Louis Vuitton", "description": "Doctor bag",'
            ' "confidence": "High", "estimatedPrice": "$1,500"}'
        )
        ident = await provider.identify(png_b64)
        assert ident.name == "Speedy 30"
        assert ident.brand == "Louis Vuitton"
        assert ident.estimated_price == "$1,500"

        kwargs = call.call_args.kwargs
        assert kwargs["model"] == "gemini-2.0-flash"
        assert kwargs["config"].response_mime_type == "application/json"
        image_part = kwargs["contents"][0]
        assert image_part.inline_data.mime_type == "image/png"

    async def test_prose_wrapped_reply(self, png_b64):
        provider, _ = make_provider(
            'Sure! Here is the result: {"bagName":"Birkin","brand":"Hermès","confidence":"High"}'
        )
        ident = await provider.identify(png_b64)
        assert (ident.name, ident.brand, ident.description, ident.confidence) == (
            "Birkin", "Hermès", "", "High",
        )
        assert ident.estimated_price is None

    async def test_no_json_raises_parse_error(self, png_b64):
        provider, _ = make_provider("I'm not able to identify this bag.")
        with pytest.raises(ParseError):
            await provider.identify(png_b64)

    async def test_empty_reply_raises_parse_error(self, png_b64):
        provider, _ = make_provider(None)
        with pytest.raises(ParseError):
            await provider.identify(png_b64)

    async def test_api_error_becomes_transport_error(self, png_b64):
        error = genai_errors.ClientError(
            403,
            {"error": {"code": 403, "message": "API key not valid", "status": "PERMISSION_DENIED"}},
        )
        provider, _ = make_provider(side_effect=error)
        with pytest.raises(TransportError) as exc_info:
            await provider.identify(png_b64)
        assert exc_info.value.status == 403

    async def test_network_error_becomes_transport_error(self, png_b64):
        provider, _ = make_provider(side_effect=httpx.ConnectError("dns failure"))
        with pytest.raises(TransportError, match="dns failure"):
            await provider.identify(png_b64)

    async def test_data_uri_prefix_stripped(self, jpeg_bytes):
        provider, call = make_provider('{"bagName": "Kelly"}')
        data_uri = "data:image/jpeg;base64," + base64.b64encode(jpeg_bytes).decode()
        ident = await provider.identify(data_uri)
        assert ident.name == "Kelly"
        assert call.call_args.kwargs["contents"][0].inline_data.data == jpeg_bytes
