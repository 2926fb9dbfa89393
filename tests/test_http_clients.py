"""Tests for HTTP-based adapters."""

import asyncio
from pathlib import Path

import httpx
import pytest

from fruit_scan.adapters.classification_client import HttpxClassificationClient
from fruit_scan.adapters.nutrition_data_client import HttpxNutritionDataClient
from fruit_scan.domain.artifacts import ImageArtifact
from fruit_scan.domain.errors import (
    CaptureError,
    ConfigurationError,
    MalformedResponseError,
    NetworkError,
    ServiceError,
)


def _classifier(handler) -> HttpxClassificationClient:  # type: ignore[no-untyped-def]
    transport = httpx.MockTransport(handler)
    return HttpxClassificationClient(
        base_url="http://classifier.test/",
        http_client=httpx.AsyncClient(transport=transport),
    )


def _nutrition(  # type: ignore[no-untyped-def]
    handler, credentials=("app-id", "app-key")
) -> HttpxNutritionDataClient:
    transport = httpx.MockTransport(handler)
    return HttpxNutritionDataClient(
        base_url="https://nutrition.test/api",
        http_client=httpx.AsyncClient(transport=transport),
        credentials=credentials,
    )


def test_classification_client_posts_multipart_image(
    artifact: ImageArtifact,
) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"fruit": "apple"})

    result = asyncio.run(_classifier(handler).predict(artifact))

    assert result == {"fruit": "apple"}
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/predict"
    assert request.headers["content-type"].startswith("multipart/form-data")
    body = request.read()
    assert b'name="image"' in body
    assert b'filename="apple.jpg"' in body
    assert b"Content-Type: image/jpeg" in body


def test_classification_client_maps_status_to_service_error(
    artifact: ImageArtifact,
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    with pytest.raises(ServiceError) as exc_info:
        asyncio.run(_classifier(handler).predict(artifact))

    assert exc_info.value.status_code == 500


def test_classification_client_maps_transport_errors(artifact: ImageArtifact) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError):
        asyncio.run(_classifier(handler).predict(artifact))


def test_classification_client_maps_timeouts(artifact: ImageArtifact) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(NetworkError):
        asyncio.run(_classifier(handler).predict(artifact))


def test_classification_client_rejects_non_json(artifact: ImageArtifact) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>oops</html>")

    with pytest.raises(MalformedResponseError):
        asyncio.run(_classifier(handler).predict(artifact))


def test_classification_client_does_not_send_unreadable_photo(
    tmp_path: Path,
) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"fruit": "apple"})

    missing = ImageArtifact(uri=tmp_path / "missing.jpg")

    with pytest.raises(CaptureError):
        asyncio.run(_classifier(handler).predict(missing))

    assert calls == []


def test_nutrition_client_sends_credentials_and_ingredient() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"totalNutrients": {}})

    result = asyncio.run(_nutrition(handler).nutrition_data("green apple 1"))

    assert result == {"totalNutrients": {}}
    request = seen[0]
    assert request.method == "GET"
    assert request.url.path == "/api/nutrition-data"
    assert request.url.params["app_id"] == "app-id"
    assert request.url.params["app_key"] == "app-key"
    assert request.url.params["ingr"] == "green apple 1"
    assert b" " not in request.url.raw_path


def test_nutrition_client_without_credentials_sends_nothing() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    client = _nutrition(handler, credentials=None)

    with pytest.raises(ConfigurationError):
        asyncio.run(client.nutrition_data("apple 1"))

    assert calls == []


def test_nutrition_client_maps_unauthorized() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"message": "unauthorized"})

    with pytest.raises(ServiceError) as exc_info:
        asyncio.run(_nutrition(handler).nutrition_data("apple 1"))

    assert exc_info.value.status_code == 401


def test_classification_client_forwards_artifact_mime_type(tmp_path: Path) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"fruit": "kiwi"})

    path = tmp_path / "kiwi.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\n" + b"rest")
    png = ImageArtifact(uri=path, mime_type="image/png", filename="kiwi.png")

    asyncio.run(_classifier(handler).predict(png))

    body = seen[0].read()
    assert b'filename="kiwi.png"' in body
    assert b"Content-Type: image/png" in body


def test_invalid_base_url_is_a_configuration_error(artifact: ImageArtifact) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"fruit": "apple"})

    client = HttpxClassificationClient(
        base_url="http://classifier.test:notaport",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )

    with pytest.raises(ConfigurationError):
        asyncio.run(client.predict(artifact))

    assert calls == []
