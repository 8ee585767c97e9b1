"""Split LangChain documents with a DocumentSplitter."""
from __future__ import annotations

from typing import Any, Iterable

from langchain_core.documents import Document as LCDocument

from chunk_engine.core.document_splitter import DocumentSplitter
from chunk_engine.core.models import Document, TextSegment
from chunk_engine.utils.metadata_utils import stringify_metadata


def from_langchain(doc: LCDocument) -> Document:
    return Document(doc.page_content, stringify_metadata(dict(doc.metadata or {})))


def to_langchain(segment: TextSegment) -> LCDocument:
    return LCDocument(page_content=segment.text, metadata=dict(segment.metadata))


def split_langchain_documents(splitter: DocumentSplitter, docs: Iterable[LCDocument]) -> list[LCDocument]:
    """Split LangChain documents, keeping document order then segment order.

    Metadata values are coerced to strings and ``None`` values dropped, the
    same normalisation applied to files loaded by the document processor.
    """
    out: list[LCDocument] = []
    for doc in docs:
        out.extend(to_langchain(segment) for segment in splitter.split(from_langchain(doc)))
    return out


def split_texts(splitter: DocumentSplitter, texts: Iterable[str], metadatas: Iterable[dict[str, Any]] | None = None) -> list[LCDocument]:
    """Counterpart of LangChain's ``create_documents`` for plain texts."""
    texts = list(texts)
    metas = list(metadatas) if metadatas is not None else [{} for _ in texts]
    if len(metas) != len(texts):
        raise ValueError(f"Got {len(texts)} texts but {len(metas)} metadata dicts")
    docs = [LCDocument(page_content=t, metadata=m) for t, m in zip(texts, metas)]
    return split_langchain_documents(splitter, docs)
