"""
Tests for the document stores and the local bucket.
"""

import pytest

from form_automation.storage import (
    DocumentNotFoundError,
    InMemoryDocumentStore,
    LocalBucket,
    create_document_store,
)
from form_automation.storage.sqlalchemy_store import SQLAlchemyDocumentStore


@pytest.fixture(params=["memory", "sqlite"])
def doc_store(request, tmp_path):
    if request.param == "memory":
        yield InMemoryDocumentStore()
    else:
        store = SQLAlchemyDocumentStore(f"sqlite:///{tmp_path / 'docs.db'}")
        yield store
        store.close()


class TestDocumentStore:
    """Behaviour shared by every store implementation."""

    def test_set_and_get(self, doc_store):
        doc_store.set("c", "a", {"x": 1})

        assert doc_store.get("c", "a") == {"x": 1}
        assert doc_store.get("c", "missing") is None

    def test_set_overwrites(self, doc_store):
        doc_store.set("c", "a", {"x": 1, "y": 2})
        doc_store.set("c", "a", {"x": 3})

        assert doc_store.get("c", "a") == {"x": 3}

    def test_update_merges(self, doc_store):
        doc_store.set("c", "a", {"x": 1, "y": 2})
        doc_store.update("c", "a", {"y": 5, "z": 6})

        assert doc_store.get("c", "a") == {"x": 1, "y": 5, "z": 6}

    def test_update_missing(self, doc_store):
        with pytest.raises(DocumentNotFoundError):
            doc_store.update("c", "missing", {"x": 1})

    def test_add_generates_unique_ids(self, doc_store):
        first = doc_store.add("c", {"n": 1})
        second = doc_store.add("c", {"n": 2})

        assert first != second
        assert doc_store.get("c", second) == {"n": 2}

    def test_where_filters_in_insertion_order(self, doc_store):
        doc_store.add("c", {"run": "a", "n": 1})
        doc_store.add("c", {"run": "b", "n": 2})
        doc_store.add("c", {"run": "a", "n": 3})
        doc_store.add("other", {"run": "a", "n": 4})

        assert [d["n"] for d in doc_store.where("c", "run", "a")] == [1, 3]

    def test_returned_documents_are_copies(self, doc_store):
        doc_store.set("c", "a", {"x": 1})
        doc_store.get("c", "a")["x"] = 99

        assert doc_store.get("c", "a") == {"x": 1}


class TestCreateDocumentStore:
    def test_in_memory_without_url(self):
        assert isinstance(create_document_store(None), InMemoryDocumentStore)

    def test_sqlalchemy_with_url(self, tmp_path):
        store = create_document_store(f"sqlite:///{tmp_path / 'x.db'}")
        try:
            assert isinstance(store, SQLAlchemyDocumentStore)
        finally:
            store.close()


class TestLocalBucket:
    """Tests for the object bucket."""

    def test_upload_and_download(self, tmp_path):
        bucket = LocalBucket(tmp_path)
        bucket.upload("uploads/a.pdf", b"%PDF-1.4")

        assert bucket.exists("uploads/a.pdf")
        assert bucket.download("uploads/a.pdf") == b"%PDF-1.4"

    def test_missing_object(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            LocalBucket(tmp_path).download("uploads/none.pdf")

    def test_rejects_escaping_paths(self, tmp_path):
        with pytest.raises(ValueError):
            LocalBucket(tmp_path / "bucket").upload("../outside.pdf", b"x")
