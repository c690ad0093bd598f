import pytest

from collabdocs.database.models import Document, DocumentPermission, DocumentProject, Project, User
from collabdocs.rag.embeddings import cosine_similarity
from collabdocs.rag.retrieval import DocumentRetriever


def _vector(*values):
    return list(values) + [0.0] * (8 - len(values))


@pytest.fixture
def library(database):
    """Two users, four documents, one project."""
    with database.get_session() as session:
        owner = User(name="Owner", email="owner@example.com", password_hash="x", ai_credits=1)
        other = User(name="Other", email="other@example.com", password_hash="x", ai_credits=1)
        session.add_all([owner, other])
        session.flush()

        project = Project(name="Thesis", user_id=owner.id)
        session.add(project)
        session.flush()

        docs = {
            "exact": Document(name="Exact", content="exact", user_id=owner.id, embedding=_vector(1.0)),
            "close": Document(name="Close", content="close", user_id=owner.id, embedding=_vector(1.0, 0.5)),
            "far": Document(name="Far", content="far", user_id=owner.id, embedding=_vector(0.0, 1.0)),
            "trashed": Document(
                name="Trashed", content="trashed", user_id=owner.id, embedding=_vector(1.0), is_trashed=True
            ),
            "foreign": Document(name="Foreign", content="foreign", user_id=other.id, embedding=_vector(1.0)),
            "unembedded": Document(name="Plain", content="plain", user_id=owner.id),
        }
        session.add_all(docs.values())
        session.flush()

        for doc in docs.values():
            session.add(DocumentPermission(document_id=doc.id, user_id=doc.user_id, role="owner"))

        session.add(DocumentProject(document_id=docs["close"].id, project_id=project.id))
        session.add(DocumentProject(document_id=docs["far"].id, project_id=project.id))

        ids = {key: doc.id for key, doc in docs.items()}
        return {"owner": owner.id, "other": other.id, "project": project.id, "docs": ids}


def _search(database, **kwargs):
    with database.get_session() as session:
        return DocumentRetriever().search(session, **kwargs)


def test_ranked_by_cosine_distance(database, library):
    hits = _search(database, user_id=library["owner"], embedding=_vector(1.0), k=3)

    assert [hit.name for hit in hits] == ["Exact", "Close", "Far"]
    assert hits[0].distance == pytest.approx(0.0, abs=1e-6)
    assert hits[2].distance == pytest.approx(1.0, abs=1e-6)


def test_only_accessible_non_trashed_documents(database, library):
    hits = _search(database, user_id=library["owner"], embedding=_vector(1.0), k=10)
    names = {hit.name for hit in hits}

    assert "Trashed" not in names
    assert "Foreign" not in names
    assert "Plain" not in names


def test_shared_document_becomes_searchable(database, library):
    with database.get_session() as session:
        session.add(DocumentPermission(document_id=library["docs"]["foreign"], user_id=library["owner"], role="viewer"))

    hits = _search(database, user_id=library["owner"], embedding=_vector(1.0), k=10)
    assert "Foreign" in {hit.name for hit in hits}


def test_project_scope_and_exclusion(database, library):
    hits = _search(
        database,
        user_id=library["owner"],
        embedding=_vector(1.0),
        project_id=library["project"],
        k=5,
        exclude_ids=[library["docs"]["close"], None],
    )

    assert [hit.name for hit in hits] == ["Far"]


def test_k_zero_returns_nothing(database, library):
    assert _search(database, user_id=library["owner"], embedding=_vector(1.0), k=0) == []


def test_zero_query_vector_ranks_by_id(database, library):
    hits = _search(database, user_id=library["owner"], embedding=_vector(), k=3)

    assert [hit.name for hit in hits] == ["Exact", "Close", "Far"]
    assert all(hit.distance == pytest.approx(1.0) for hit in hits)


def test_cosine_similarity_helper():
    assert cosine_similarity([1, 0], [1, 0]) == pytest.approx(1.0)
    assert cosine_similarity([1, 0], [0, 1]) == pytest.approx(0.0)
    assert cosine_similarity([0, 0], [1, 0]) == 0.0
