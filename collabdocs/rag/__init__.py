"""
RAG module - retrieval-augmented generation building blocks.

- embeddings.py : text -> vector (Google embedding API)
- retrieval.py  : top-k accessible documents by cosine distance
- prompt.py     : token budgeting, context and prompt assembly
"""
from collabdocs.rag.prompt import (
    estimate_tokens,
    truncate_to_tokens,
    build_context,
    format_history,
    construct_prompt,
)
from collabdocs.rag.embeddings import Embedder, get_embedder, set_embedder, cosine_similarity
from collabdocs.rag.retrieval import DocumentRetriever, RetrievedDocument

__all__ = [
    "estimate_tokens",
    "truncate_to_tokens",
    "build_context",
    "format_history",
    "construct_prompt",
    "Embedder",
    "get_embedder",
    "set_embedder",
    "cosine_similarity",
    "DocumentRetriever",
    "RetrievedDocument",
]
