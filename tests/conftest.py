"""Shared test fixtures for tire_intake tests."""

import io
from types import SimpleNamespace

import httpx
import pytest
from PIL import Image


class FakeMessages:
    """Stand-in for `Anthropic().messages` that records each request."""

    def __init__(self, text):
        self.text = text
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        content = [] if self.text is None else [SimpleNamespace(type="text", text=self.text)]
        return SimpleNamespace(content=content)


class FakeClient:
    def __init__(self, text):
        self.messages = FakeMessages(text)


class FailingMessages:
    """`messages` whose every request raises the given SDK error."""

    def __init__(self, error):
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        raise self.error


class FailingClient:
    def __init__(self, error):
        self.messages = FailingMessages(error)


@pytest.fixture
def fake_client():
    """Factory for a client whose model answers with the given text."""
    return FakeClient


@pytest.fixture
def failing_client():
    """Factory for a client whose request fails with the given exception."""
    return FailingClient


@pytest.fixture
def api_request():
    """The HTTP request SDK errors are attached to."""
    return httpx.Request("POST", "https://api.anthropic.com/v1/messages")


@pytest.fixture
def png_bytes():
    """A small in-memory PNG."""
    buffer = io.BytesIO()
    Image.new("RGB", (40, 20), "white").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def jpeg_bytes():
    """A small in-memory JPEG."""
    buffer = io.BytesIO()
    Image.new("RGB", (40, 20), "white").save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def sample_model_response():
    """Model answer wrapped in prose and a code fence."""
    return (
        "Here is the result:\n"
        "```json\n"
        '[{"brand":"Largo","size":"165 70 R13","quantity":4,"price":320000,"total":1280000}]\n'
        "```"
    )


@pytest.fixture
def sample_ocr_text():
    """OCR output of a two-row stock list with header and total lines."""
    return "\n".join([
        "Товар номи Улч бир Сони Нархи Қиймати",
        "Largo 165/70 R13 дона 4 320000 1280000",
        "",
        "Cotecho, Cho1 175/70R13 дона 2 350000 700000",
        "Jami: 1980000",
    ])


@pytest.fixture
def no_tesseract_env(monkeypatch):
    """Pretend tesseract is installed; OCR output is set per test."""
    import pytesseract

    monkeypatch.setattr(pytesseract, "get_tesseract_version", lambda: "5.3.0")
    state = {"text": "", "images": []}

    def fake_image_to_string(image, lang=None, config=None):
        state["images"].append(image)
        state["lang"] = lang
        state["config"] = config
        return state["text"]

    monkeypatch.setattr(pytesseract, "image_to_string", fake_image_to_string)
    return state
