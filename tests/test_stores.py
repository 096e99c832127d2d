"""Tests for the document, file and chat stores."""

import os

import pytest

from lexigem.exceptions import PersistenceError, RecordNotFoundError
from lexigem.schemas import AnalysisResult, ChatMessage, DocumentUpload
from lexigem.services.chat_store import ChatStore
from lexigem.services.document_store import DocumentStore

from conftest import SAMPLE_ANALYSIS


@pytest.fixture
def result():
    return AnalysisResult.model_validate(SAMPLE_ANALYSIS)


# File handler

def test_upload_is_stored_under_user_scoped_path(file_handler, pdf_upload):
    storage_path = file_handler.save_upload(pdf_upload, user_id=3)

    user_dir, name = storage_path.split("/")
    assert user_dir == "3"
    assert name.endswith(".pdf")
    with open(file_handler.absolute_path(storage_path), "rb") as f:
        assert f.read() == pdf_upload.content
    assert file_handler.public_url(storage_path) == f"http://testserver/files/{storage_path}"


def test_upload_never_overwrites(file_handler, pdf_upload, monkeypatch):
    monkeypatch.setattr(file_handler, "build_storage_path", lambda upload, user_id: "3/fixed.pdf")
    file_handler.save_upload(pdf_upload, user_id=3)

    with pytest.raises(PersistenceError):
        file_handler.save_upload(pdf_upload, user_id=3)


def test_storage_path_cannot_escape_upload_dir(file_handler):
    with pytest.raises(PersistenceError):
        file_handler.absolute_path("../outside.pdf")


def test_file_without_extension_uses_mime_type_suffix(file_handler):
    upload = DocumentUpload(file_name="scan", content=b"x", mime_type="image/png")
    assert file_handler.build_storage_path(upload, 1).endswith(".png")

    unknown = DocumentUpload(file_name="scan", content=b"x", mime_type="application/x-unknown-kind")
    assert file_handler.build_storage_path(unknown, 1).endswith(".bin")


@pytest.mark.parametrize("file_name", ["x./../../8/owned", "lease.p df", "notes.averyverylongext", "a../b"])
def test_unsafe_extension_is_not_used_in_storage_path(file_handler, file_name):
    upload = DocumentUpload(file_name=file_name, content=b"x", mime_type="application/pdf")

    storage_path = file_handler.build_storage_path(upload, 1)

    user_dir, name = storage_path.split("/")
    assert user_dir == "1"
    stem, ext = name.split(".")
    assert stem.isdigit()
    assert ext == "pdf"


# Document store

def test_save_analysis_stores_file_and_record(db, user, file_handler, pdf_upload, result):
    store = DocumentStore(db, file_handler)

    document = store.save_analysis(user.id, pdf_upload, result)

    assert document.id is not None
    assert document.file_name == "lease.pdf"
    assert document.file_type == "application/pdf"
    assert document.file_size == len(pdf_upload.content)
    assert document.potential_loopholes == SAMPLE_ANALYSIS["potentialLoopholes"]
    assert document.file_url.startswith("http://testserver/files/")
    assert os.path.exists(file_handler.absolute_path(document.storage_path))


def test_user_documents_newest_first_and_scoped(db, user, other_user, file_handler, result):
    store = DocumentStore(db, file_handler)
    for name in ("a.pdf", "b.pdf"):
        upload = DocumentUpload(file_name=name, content=b"x", mime_type="application/pdf")
        store.save_document(user.id, upload, result)
    store.save_document(
        other_user.id,
        DocumentUpload(file_name="c.pdf", content=b"x", mime_type="application/pdf"),
        result
    )

    names = [doc.file_name for doc in store.get_user_documents(user.id)]

    assert names == ["b.pdf", "a.pdf"]


def test_delete_document_removes_record_then_file(db, user, file_handler, pdf_upload, result):
    store = DocumentStore(db, file_handler)
    document = store.save_analysis(user.id, pdf_upload, result)
    file_path = file_handler.absolute_path(document.storage_path)

    store.delete_document(document.id, user.id)

    assert store.get_user_documents(user.id) == []
    assert not os.path.exists(file_path)


def test_delete_document_of_other_user_is_not_found(db, user, other_user, file_handler, pdf_upload, result):
    store = DocumentStore(db, file_handler)
    document = store.save_document(user.id, pdf_upload, result)

    with pytest.raises(RecordNotFoundError):
        store.delete_document(document.id, other_user.id)


def test_failed_record_insert_removes_uploaded_file(db, user, file_handler, pdf_upload, result, monkeypatch):
    store = DocumentStore(db, file_handler)
    saved_paths = []
    original_upload = store.upload_file

    def tracking_upload(upload, user_id):
        path = original_upload(upload, user_id)
        saved_paths.append(path)
        return path

    def failing_save(*args, **kwargs):
        raise PersistenceError("insert failed")

    monkeypatch.setattr(store, "upload_file", tracking_upload)
    monkeypatch.setattr(store, "save_document", failing_save)

    with pytest.raises(PersistenceError):
        store.save_analysis(user.id, pdf_upload, result)

    assert not os.path.exists(file_handler.absolute_path(saved_paths[0]))


# Chat store

def test_chat_session_starts_empty(db, user):
    session = ChatStore(db).create_chat_session(user.id, title="Lease questions")

    assert session.session_id
    assert session.title == "Lease questions"
    assert session.message_count == 0


def test_duplicate_session_id_is_rejected(db, user):
    store = ChatStore(db)
    store.create_chat_session(user.id, session_id="s1")

    with pytest.raises(PersistenceError):
        store.create_chat_session(user.id, session_id="s1")


def test_messages_append_in_order_and_count(db, user):
    store = ChatStore(db)
    store.create_chat_session(user.id, session_id="s1")

    store.save_message("s1", user.id, "user", "Is a verbal contract binding?")
    store.save_messages("s1", user.id, [
        ChatMessage.from_text("model", "Often, yes."),
        ChatMessage.from_text("user", "Even for land?"),
    ])

    transcript = store.get_transcript("s1", user.id)
    assert [(m.role, m.text) for m in transcript] == [
        ("user", "Is a verbal contract binding?"),
        ("model", "Often, yes."),
        ("user", "Even for land?"),
    ]
    assert store.get_chat_session("s1", user.id).message_count == 3


def test_saving_to_unknown_session_fails(db, user):
    with pytest.raises(RecordNotFoundError):
        ChatStore(db).save_message("missing", user.id, "user", "hello")


def test_sessions_listed_by_recent_activity(db, user):
    store = ChatStore(db)
    store.create_chat_session(user.id, session_id="old")
    store.create_chat_session(user.id, session_id="new")
    store.save_message("old", user.id, "user", "bump")

    assert [s.session_id for s in store.get_user_chat_sessions(user.id)] == ["old", "new"]


def test_rename_and_delete_session(db, user, other_user):
    store = ChatStore(db)
    store.create_chat_session(user.id, session_id="s1")
    store.save_message("s1", user.id, "user", "hello")

    assert store.update_chat_session_title("s1", user.id, "Renamed").title == "Renamed"

    with pytest.raises(RecordNotFoundError):
        store.delete_chat_session("s1", other_user.id)

    store.delete_chat_session("s1", user.id)

    assert store.get_user_chat_sessions(user.id) == []
    assert store.get_chat_history("s1", user.id) == []


def test_accepted_types_match_upload_choices(file_handler):
    assert file_handler.is_accepted_type("application/pdf")
    assert file_handler.is_accepted_type("image/webp")
    assert not file_handler.is_accepted_type("text/html")
