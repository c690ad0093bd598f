"""
Vector retrieval over document embeddings.

Only documents the requesting user holds a role on are searchable, and
trashed documents are never returned. On PostgreSQL the ranking runs
in the database with pgvector's cosine distance operator (<=>); other
dialects load the candidate vectors and rank them with cosine_similarity.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import and_
from sqlalchemy.orm import Session

from collabdocs.core.logging_config import LoggerMixin
from collabdocs.database.models import Document, DocumentPermission, DocumentProject
from collabdocs.rag.embeddings import cosine_similarity


@dataclass
class RetrievedDocument:
    """A search hit; distance is cosine distance (0 = identical direction)."""
    id: int
    name: str
    content: str
    distance: float

    def to_context(self) -> dict:
        return {"name": self.name, "content": self.content}


class DocumentRetriever(LoggerMixin):
    """Top-k similarity search restricted to a user's accessible documents."""

    def _candidates(
        self,
        session: Session,
        user_id: int,
        project_id: Optional[int],
        exclude_ids: Iterable[int],
        *columns,
    ):
        query = (
            session.query(Document, *columns)
            .join(
                DocumentPermission,
                and_(
                    DocumentPermission.document_id == Document.id,
                    DocumentPermission.user_id == user_id,
                ),
            )
            .filter(Document.embedding.isnot(None))
            .filter(Document.is_trashed.is_(False))
        )

        if project_id is not None:
            query = query.join(DocumentProject, DocumentProject.document_id == Document.id).filter(
                DocumentProject.project_id == project_id
            )

        exclude_ids = [i for i in exclude_ids if i is not None]
        if exclude_ids:
            query = query.filter(~Document.id.in_(exclude_ids))

        return query

    def search(
        self,
        session: Session,
        user_id: int,
        embedding: Sequence[float],
        project_id: Optional[int] = None,
        k: int = 3,
        exclude_ids: Iterable[int] = (),
    ) -> List[RetrievedDocument]:
        """
        Find the k documents closest to an embedding.

        Args:
            session: Open database session
            user_id: Only documents this user has any role on are considered
            embedding: Query vector
            project_id: Restrict the search to one project
            k: Number of results
            exclude_ids: Document ids to skip (e.g. the session's own document)

        Returns:
            Hits ordered by ascending cosine distance
        """
        if k <= 0:
            return []

        if session.get_bind().dialect.name == "postgresql":
            hits = self._search_pgvector(session, user_id, embedding, project_id, k, exclude_ids)
        else:
            hits = self._search_numpy(session, user_id, embedding, project_id, k, exclude_ids)

        self.logger.debug(f"Retrieved {len(hits)} document(s) for user {user_id} (project={project_id})")
        return hits

    def _search_pgvector(self, session, user_id, embedding, project_id, k, exclude_ids):
        distance = Document.embedding.cosine_distance(list(embedding)).label("distance")
        rows = (
            self._candidates(session, user_id, project_id, exclude_ids, distance)
            .order_by(distance)
            .limit(k)
            .all()
        )
        return [
            RetrievedDocument(id=doc.id, name=doc.name, content=doc.content or "", distance=float(dist))
            for doc, dist in rows
        ]

    def _search_numpy(self, session, user_id, embedding, project_id, k, exclude_ids):
        documents = self._candidates(session, user_id, project_id, exclude_ids).all()

        scored = sorted(
            ((1.0 - cosine_similarity(embedding, doc.embedding), doc) for doc in documents),
            key=lambda pair: (pair[0], pair[1].id),
        )
        return [
            RetrievedDocument(id=doc.id, name=doc.name, content=doc.content or "", distance=dist)
            for dist, doc in scored[:k]
        ]
