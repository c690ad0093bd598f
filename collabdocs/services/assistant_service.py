"""
Writing Assistant Service - RAG chat and one-shot editing commands.

This service orchestrates the message flow:
1. Verifies the session belongs to the caller
2. Reserves one AI credit
3. Embeds the message and stores it
4. Retrieves similar documents the caller can access
5. Builds the context-budgeted prompt from prior history
6. Calls the LLM (the credit is refunded if any step from 3 on fails)
7. Stores and returns the reply

Routes stay thin; everything here is callable without HTTP.
"""
import json
import re
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func

from collabdocs.core.config import get_settings
from collabdocs.core.exceptions import (
    EmbeddingError,
    SessionNotFoundError,
    ValidationError,
)
from collabdocs.core.logging_config import LoggerMixin
from collabdocs.core.validators import sanitize_text, validate_message
from collabdocs.database.connection import DatabaseConnection, get_database
from collabdocs.database.models import Document, DocumentProject, WritingMessage, WritingSession
from collabdocs.llm.client import get_llm_client
from collabdocs.llm.prompts import (
    APPLY_SUGGESTION_SYSTEM_PROMPT,
    COMMAND_NAMES,
    DECISION_SYSTEM_PROMPT,
    WELCOME_MESSAGE,
    WRITING_ASSISTANT_SYSTEM_PROMPT,
    get_apply_suggestion_user_prompt,
    get_command_system_prompt,
    get_command_user_prompt,
    get_decision_user_prompt,
)
from collabdocs.rag.embeddings import get_embedder
from collabdocs.rag.prompt import build_context, construct_prompt
from collabdocs.rag.retrieval import DocumentRetriever
from collabdocs.services.credit_service import CreditService
from collabdocs.services.permissions import document_permissions

SNIPPET_LENGTH = 100
MAX_SUGGESTION_CANDIDATES = 5

_JSON_ARRAY_REGEX = re.compile(r"\[.*\]", re.DOTALL)


def parse_decision(text: Optional[str]) -> str:
    """Normalise an LLM yes/no answer to 'True' or 'False'."""
    if not text:
        return "False"
    word = text.strip().split()[0] if text.strip() else ""
    word = word.strip("\"'`.,!:;()[]{}*").lower()
    return "True" if word in ("true", "yes") else "False"


def parse_document_changes(text: Optional[str]) -> List[Dict]:
    """
    Extract [{document_id, new_content}] from an LLM reply.

    Code fences and surrounding prose are ignored. Malformed entries are
    dropped; an unparseable reply yields [].
    """
    if not text:
        return []

    match = _JSON_ARRAY_REGEX.search(text)
    if match is None:
        return []

    try:
        data = json.loads(match.group())
    except json.JSONDecodeError:
        return []

    if not isinstance(data, list):
        return []

    changes = []
    for item in data:
        if not isinstance(item, dict):
            continue
        document_id = item.get("document_id")
        new_content = item.get("new_content")
        if isinstance(document_id, str) and document_id.isdigit():
            document_id = int(document_id)
        if isinstance(document_id, int) and isinstance(new_content, str):
            changes.append({"document_id": document_id, "new_content": new_content})
    return changes


class AssistantService(LoggerMixin):
    """Business logic behind /api/writing-assistant."""

    def __init__(
        self,
        db: Optional[DatabaseConnection] = None,
        credits: Optional[CreditService] = None,
        retriever: Optional[DocumentRetriever] = None,
    ):
        self.db = db or get_database()
        self.settings = get_settings()
        self.credits = credits or CreditService(self.db)
        self.retriever = retriever or DocumentRetriever()

    # ------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------

    def list_sessions(self, user_id: int) -> List[Dict]:
        """Caller's sessions, most recently updated first."""
        with self.db.get_session() as session:
            sessions = (
                session.query(WritingSession)
                .filter(WritingSession.user_id == user_id)
                .order_by(WritingSession.updated_at.desc(), WritingSession.id.desc())
                .all()
            )

            latest_ids = dict(
                session.query(WritingMessage.session_id, func.max(WritingMessage.id))
                .filter(WritingMessage.session_id.in_([s.id for s in sessions]))
                .group_by(WritingMessage.session_id)
                .all()
            ) if sessions else {}

            latest = {}
            if latest_ids:
                for message in session.query(WritingMessage).filter(WritingMessage.id.in_(latest_ids.values())):
                    latest[message.session_id] = message.content

            results = []
            for s in sessions:
                data = s.to_dict()
                content = latest.get(s.id)
                data["last_message_snippet"] = content[:SNIPPET_LENGTH] if content else None
                results.append(data)
            return results

    def create_session(self, user_id: int, title: str, document_id: Optional[int] = None) -> Dict:
        """
        Start a conversation seeded with the assistant greeting.

        A linked document requires at least viewer access.
        """
        title = (title or "").strip()
        if not title:
            raise ValidationError("Title cannot be empty", field="title")

        with self.db.get_session() as session:
            if document_id is not None:
                document_permissions.require(session, user_id, document_id, "viewer")

            now = datetime.utcnow()
            writing_session = WritingSession(
                user_id=user_id,
                document_id=document_id,
                title=title,
                created_at=now,
                updated_at=now,
            )
            session.add(writing_session)
            session.flush()

            session.add(WritingMessage(session_id=writing_session.id, role="assistant", content=WELCOME_MESSAGE))

            self.logger.info(f"User {user_id} started writing session {writing_session.id}")
            return writing_session.to_dict()

    def get_session(self, user_id: int, session_id: int) -> Dict:
        with self.db.get_session() as session:
            writing_session = self._owned_session(session, user_id, session_id)
            return {
                "session": writing_session.to_dict(),
                "messages": [m.to_dict() for m in writing_session.messages],
            }

    def delete_session(self, user_id: int, session_id: int) -> None:
        with self.db.get_session() as session:
            writing_session = self._owned_session(session, user_id, session_id)
            session.delete(writing_session)
        self.logger.info(f"User {user_id} deleted writing session {session_id}")

    # ------------------------------------------------------------
    # RAG message pipeline
    # ------------------------------------------------------------

    def send_message(self, user_id: int, session_id: int, content: str) -> Dict:
        """
        Answer a message in a session using retrieved document context.

        Returns:
            {"role": "assistant", "content", "credits_remaining"}

        Raises:
            SessionNotFoundError: Session missing or not the caller's
            InsufficientCreditsError: No credits left
            LLMError: Every provider failed (credit refunded, as for any
                failure after the reservation)
        """
        is_valid, content, error = validate_message(content)
        if not is_valid:
            raise ValidationError(error, field="content")

        with self.db.get_session() as session:
            writing_session = self._owned_session(session, user_id, session_id)
            linked_document_id = writing_session.document_id

        with self.credits.charge(user_id) as remaining:
            reply = self._answer(user_id, session_id, content, linked_document_id)

        return {"role": "assistant", "content": reply, "credits_remaining": remaining}

    def _answer(self, user_id: int, session_id: int, content: str, linked_document_id: Optional[int]) -> str:
        """Embed, store, retrieve, prompt and store the reply. Runs inside a charge."""
        query_embedding = self._embed_or_none(content, query=True)

        with self.db.get_session() as session:
            writing_session = self._owned_session(session, user_id, session_id)

            history = [
                {"role": m.role, "content": m.content}
                for m in writing_session.messages
            ]

            session.add(WritingMessage(
                session_id=session_id,
                role="user",
                content=content,
                embedding=query_embedding,
            ))
            writing_session.updated_at = datetime.utcnow()

            primary, project_id = self._linked_document(session, user_id, linked_document_id)

            retrieved = []
            if query_embedding is not None:
                retrieved = self.retriever.search(
                    session,
                    user_id=user_id,
                    embedding=query_embedding,
                    project_id=project_id,
                    k=self.settings.rag_top_k,
                    exclude_ids=[linked_document_id],
                )

        context = build_context(
            primary,
            [hit.to_context() for hit in retrieved],
            self.settings.max_context_tokens,
        )
        prompt = construct_prompt(
            content,
            history,
            context,
            max_history_tokens=self.settings.max_history_tokens,
            max_context_tokens=self.settings.max_context_tokens,
        )

        self.logger.info(
            f"Session {session_id}: {len(retrieved)} retrieved document(s), "
            f"linked={'yes' if primary else 'no'}, history={len(history)} message(s)"
        )

        reply = get_llm_client().generate(prompt, system_prompt=WRITING_ASSISTANT_SYSTEM_PROMPT)

        reply_embedding = self._embed_or_none(reply, query=False)

        with self.db.get_session() as session:
            session.add(WritingMessage(
                session_id=session_id,
                role="assistant",
                content=reply,
                embedding=reply_embedding,
            ))
            writing_session = session.get(WritingSession, session_id)
            if writing_session is not None:
                writing_session.updated_at = datetime.utcnow()

        return reply

    # ------------------------------------------------------------
    # One-shot commands
    # ------------------------------------------------------------

    def run_command(self, user_id: int, command: str, content: str, style: Optional[str] = None) -> str:
        """
        Apply an editing command (grammar, summarize, ...) to selected text.

        Costs one credit; refunded if the call fails.
        """
        if command not in COMMAND_NAMES:
            raise ValidationError(f"Unknown command: {command}", field="command")
        if not content or not content.strip():
            raise ValidationError("Content cannot be empty", field="content")
        if command == "rewrite" and not (style or "").strip():
            raise ValidationError("Style cannot be empty", field="style")

        with self.credits.charge(user_id):
            response = get_llm_client().generate(
                get_command_user_prompt(content),
                system_prompt=get_command_system_prompt(command, style=style),
            )

        self.logger.info(f"User {user_id} ran '{command}' on {len(content)} characters")
        return response.strip()

    def suggest_changes(
        self,
        user_id: int,
        session_id: int,
        suggestion: str,
        current_document_id: Optional[int] = None,
    ) -> List[Dict]:
        """
        Turn a suggestion into proposed document edits (not applied).

        Candidates are the current document, the session's linked document
        and the other documents of their project, limited to documents
        the caller can edit. Costs one credit.

        Returns:
            [{document_id, old_content, new_content}]
        """
        if not suggestion or not suggestion.strip():
            raise ValidationError("Suggestion cannot be empty", field="suggestion_content")

        with self.db.get_session() as session:
            writing_session = self._owned_session(session, user_id, session_id)
            candidates = self._suggestion_candidates(
                session, user_id, [current_document_id, writing_session.document_id]
            )

        if not candidates:
            return []

        with self.credits.charge(user_id):
            reply = get_llm_client().generate(
                get_apply_suggestion_user_prompt(suggestion, list(candidates.values())),
                system_prompt=APPLY_SUGGESTION_SYSTEM_PROMPT,
            )

        changes = []
        for change in parse_document_changes(reply):
            candidate = candidates.get(change["document_id"])
            if candidate is None or change["new_content"] == candidate["content"]:
                continue
            changes.append({
                "document_id": change["document_id"],
                "old_content": candidate["content"],
                "new_content": change["new_content"],
            })

        self.logger.info(f"Session {session_id}: {len(changes)} suggested document change(s)")
        return changes

    def decide_proactive_diff(
        self,
        ai_response: str,
        context_type: str,
        command_name: Optional[str] = None,
        user_prompt: Optional[str] = None,
        document_snippet: Optional[str] = None,
    ) -> str:
        """Ask the LLM whether a reply should be offered as a diff. Not charged."""
        reply = get_llm_client().generate(
            get_decision_user_prompt(ai_response, context_type, command_name, user_prompt, document_snippet),
            system_prompt=DECISION_SYSTEM_PROMPT,
        )
        return parse_decision(reply)

    def sanitize(self, text: str) -> str:
        return sanitize_text(text)

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    def _owned_session(self, session, user_id: int, session_id: int) -> WritingSession:
        writing_session = (
            session.query(WritingSession)
            .filter(WritingSession.id == session_id, WritingSession.user_id == user_id)
            .one_or_none()
        )
        if writing_session is None:
            raise SessionNotFoundError(session_id)
        return writing_session

    def _embed_or_none(self, text: str, query: bool) -> Optional[List[float]]:
        embedder = get_embedder()
        try:
            return embedder.embed_query(text) if query else embedder.embed(text)
        except EmbeddingError as e:
            self.logger.warning(f"Continuing without embedding: {e.message}")
            return None

    def _linked_document(self, session, user_id: int, document_id: Optional[int]):
        """(context dict, project id) for the session's document, if still readable."""
        if document_id is None:
            return None, None

        document = session.get(Document, document_id)
        if document is None or document.is_trashed:
            return None, None
        if not document_permissions.check(session, user_id, document_id, "viewer"):
            return None, None

        link = session.get(DocumentProject, document_id)
        project_id = link.project_id if link is not None else None
        return {"name": document.name, "content": document.content or ""}, project_id

    def _suggestion_candidates(self, session, user_id: int, seed_ids: List[Optional[int]]) -> Dict[int, Dict]:
        ids = []
        for document_id in seed_ids:
            if document_id is not None and document_id not in ids:
                ids.append(document_id)

        project_ids = [
            link.project_id
            for link in session.query(DocumentProject).filter(DocumentProject.document_id.in_(ids))
        ] if ids else []
        if project_ids:
            for (document_id,) in (
                session.query(DocumentProject.document_id)
                .filter(DocumentProject.project_id.in_(project_ids))
                .order_by(DocumentProject.document_id)
            ):
                if document_id not in ids:
                    ids.append(document_id)

        candidates = {}
        for document_id in ids:
            if len(candidates) >= MAX_SUGGESTION_CANDIDATES:
                break
            document = session.get(Document, document_id)
            if document is None or document.is_trashed:
                continue
            if not document_permissions.check(session, user_id, document_id, "editor"):
                continue
            candidates[document_id] = {
                "id": document.id,
                "name": document.name,
                "content": document.content or "",
            }
        return candidates


# Module-level instance
_assistant_service: Optional[AssistantService] = None


def get_assistant_service() -> AssistantService:
    global _assistant_service
    if _assistant_service is None:
        _assistant_service = AssistantService()
    return _assistant_service
