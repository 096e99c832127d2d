"""Tests for request construction and failure handling in the Gemini client."""

import asyncio

import pytest
from google.genai import types

from lexigem.exceptions import AnalysisErrorKind, AnalysisFailure
from lexigem.schemas import ChatMessage
from lexigem.services.gemini_client import (
    ANALYSIS_PROMPT,
    ANALYSIS_SCHEMA,
    AnalysisRequest,
    RESPONSE_FIELDS,
)

from conftest import SAMPLE_ANALYSIS, make_model_client


def test_request_pairs_prompt_with_inline_file(pdf_upload):
    contents = AnalysisRequest(upload=pdf_upload).contents()

    assert len(contents) == 1
    parts = contents[0].parts
    assert parts[0].text == ANALYSIS_PROMPT
    assert parts[1].inline_data.mime_type == "application/pdf"
    assert parts[1].inline_data.data == pdf_upload.content


def test_prompt_lists_the_five_categories_in_order():
    positions = [
        ANALYSIS_PROMPT.index(label)
        for label in ("**Summary:**", "**Pros:**", "**Cons:**", "**Potential Loopholes:**", "**Potential Challenges:**")
    ]
    assert positions == sorted(positions)


def test_request_declares_strict_json_schema(pdf_upload):
    config = AnalysisRequest(upload=pdf_upload).config()

    assert config.response_mime_type == "application/json"
    assert config.response_schema == ANALYSIS_SCHEMA
    assert ANALYSIS_SCHEMA.type == types.Type.OBJECT
    assert set(ANALYSIS_SCHEMA.required) == set(RESPONSE_FIELDS)
    assert ANALYSIS_SCHEMA.properties["summary"].type == types.Type.STRING
    for name in ("pros", "cons", "potentialLoopholes", "potentialChallenges"):
        assert ANALYSIS_SCHEMA.properties[name].type == types.Type.ARRAY
        assert ANALYSIS_SCHEMA.properties[name].items.type == types.Type.STRING


def test_analyze_document_makes_one_call(pdf_upload, sample_json):
    model_client = make_model_client(responses=[sample_json])

    result = asyncio.run(model_client.analyze_document(pdf_upload))

    calls = model_client.client.models.calls
    assert len(calls) == 1
    assert calls[0]["model"] == "test-model"
    assert result.summary == SAMPLE_ANALYSIS["summary"]


@pytest.mark.parametrize("error", [
    ConnectionError("connection reset"),
    TimeoutError("read timed out"),
    RuntimeError("429 RESOURCE_EXHAUSTED"),
])
def test_transport_errors_are_normalized(pdf_upload, error):
    model_client = make_model_client(error=error)

    with pytest.raises(AnalysisFailure) as excinfo:
        asyncio.run(model_client.analyze_document(pdf_upload))

    assert excinfo.value.kind == AnalysisErrorKind.TRANSPORT_OR_MODEL
    assert len(model_client.client.models.calls) == 1


@pytest.mark.parametrize("text", [None, ""])
def test_empty_model_response_is_a_model_error(pdf_upload, text):
    model_client = make_model_client(responses=[text])

    with pytest.raises(AnalysisFailure) as excinfo:
        asyncio.run(model_client.analyze_document(pdf_upload))

    assert excinfo.value.kind == AnalysisErrorKind.TRANSPORT_OR_MODEL


def test_malformed_model_output_is_a_parse_error(pdf_upload):
    model_client = make_model_client(responses=["Here is your analysis: it looks fine."])

    with pytest.raises(AnalysisFailure) as excinfo:
        asyncio.run(model_client.analyze_document(pdf_upload))

    assert excinfo.value.kind == AnalysisErrorKind.PARSE


def test_chat_reply_sends_history_then_question():
    model_client = make_model_client(responses=["  A lease is a contract.  "])
    history = [
        ChatMessage.from_text("user", "Hi"),
        ChatMessage.from_text("model", "Hello, how can I help?"),
    ]

    reply = asyncio.run(model_client.generate_chat_reply(history, "What is a lease?"))

    assert reply == "A lease is a contract."
    call = model_client.client.models.calls[0]
    assert call["model"] == "test-chat-model"
    assert [content.role for content in call["contents"]] == ["user", "model", "user"]
    assert call["contents"][-1].parts[0].text == "What is a lease?"
    assert call["config"].system_instruction
