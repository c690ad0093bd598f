"""
Writing Assistant Routes - /api/writing-assistant.

Endpoints:
- GET    /                          : List the caller's sessions
- POST   /                          : Start a session
- GET    /{id}                      : Session with its messages
- DELETE /{id}                      : Delete a session
- POST   /{id}/message              : RAG chat (1 credit)
- POST   /{id}/apply-suggestion     : Proposed document edits (1 credit)
- POST   /grammar, /summarize, ...  : One-shot commands (1 credit each)
- POST   /decide-proactive-diff     : Should a reply be shown as a diff? (no credit)
- POST   /sanitize-text             : Strip HTML and Markdown (free)

Every route that calls the LLM is rate limited per user.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends

from collabdocs.api.deps import ai_rate_limit, require_user_id
from collabdocs.models.assistant import (
    ApplySuggestionRequest,
    AssistantReply,
    CommandReply,
    DecisionRequest,
    DecisionResponse,
    RewriteRequest,
    SanitizeTextRequest,
    SanitizeTextResponse,
    SelectedTextRequest,
    SendMessageRequest,
    SessionCreate,
    SessionResponse,
    SessionSummary,
    SessionWithMessages,
    SuggestedDocumentChange,
)
from collabdocs.models.common import ErrorResponse, result
from collabdocs.services.assistant_service import get_assistant_service

router = APIRouter(
    prefix="/api/writing-assistant",
    tags=["Writing Assistant"],
    responses={
        401: {"model": ErrorResponse, "description": "Not logged in"},
        503: {"model": ErrorResponse, "description": "LLM service unavailable"},
    }
)

AI_RESPONSES = {
    402: {"model": ErrorResponse, "description": "No AI credits left"},
    429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
}


# ============================================================
# One-shot commands
# ============================================================

def _run_command(command: str, content: str, user_id: int, style: Optional[str] = None) -> CommandReply:
    return CommandReply(response=get_assistant_service().run_command(user_id, command, content, style=style))


@router.post("/grammar", response_model=CommandReply, responses=AI_RESPONSES, summary="Fix grammar")
@router.post("/grammer", response_model=CommandReply, include_in_schema=False)
async def grammar(request: SelectedTextRequest, user_id: int = Depends(ai_rate_limit)):
    return _run_command("grammar", request.content, user_id)


@router.post("/summarize", response_model=CommandReply, responses=AI_RESPONSES, summary="Summarize")
async def summarize(request: SelectedTextRequest, user_id: int = Depends(ai_rate_limit)):
    return _run_command("summarize", request.content, user_id)


@router.post("/rephrase", response_model=CommandReply, responses=AI_RESPONSES, summary="Rephrase")
async def rephrase(request: SelectedTextRequest, user_id: int = Depends(ai_rate_limit)):
    return _run_command("rephrase", request.content, user_id)


@router.post("/expand", response_model=CommandReply, responses=AI_RESPONSES, summary="Expand")
async def expand(request: SelectedTextRequest, user_id: int = Depends(ai_rate_limit)):
    return _run_command("expand", request.content, user_id)


@router.post("/shrink", response_model=CommandReply, responses=AI_RESPONSES, summary="Shorten")
async def shrink(request: SelectedTextRequest, user_id: int = Depends(ai_rate_limit)):
    return _run_command("shrink", request.content, user_id)


@router.post("/factcheck", response_model=CommandReply, responses=AI_RESPONSES, summary="Fact-check")
async def factcheck(request: SelectedTextRequest, user_id: int = Depends(ai_rate_limit)):
    return _run_command("factcheck", request.content, user_id)


@router.post("/rewrite", response_model=CommandReply, responses=AI_RESPONSES, summary="Rewrite in a style")
async def rewrite(request: RewriteRequest, user_id: int = Depends(ai_rate_limit)):
    return _run_command("rewrite", request.content, user_id, style=request.style)


@router.post(
    "/decide-proactive-diff",
    response_model=DecisionResponse,
    summary="Should a reply be offered as a document diff?",
)
async def decide_proactive_diff(request: DecisionRequest, user_id: int = Depends(ai_rate_limit)):
    decision = get_assistant_service().decide_proactive_diff(
        request.ai_response_content,
        request.context.type,
        command_name=request.context.command_name,
        user_prompt=request.context.user_prompt,
        document_snippet=request.document_content_snippet,
    )
    return DecisionResponse(decision=decision)


@router.post("/sanitize-text", response_model=SanitizeTextResponse, summary="Strip HTML and Markdown")
async def sanitize_text(request: SanitizeTextRequest, user_id: int = Depends(require_user_id)):
    return SanitizeTextResponse(sanitized_text=get_assistant_service().sanitize(request.text_to_sanitize))


# ============================================================
# Sessions
# ============================================================

@router.get("", response_model=List[SessionSummary], summary="The caller's sessions")
async def list_sessions(user_id: int = Depends(require_user_id)):
    return get_assistant_service().list_sessions(user_id)


@router.post("", response_model=SessionResponse, summary="Start a session")
async def create_session(request: SessionCreate, user_id: int = Depends(require_user_id)):
    return get_assistant_service().create_session(user_id, request.title, document_id=request.document_id)


@router.get(
    "/{session_id}",
    response_model=SessionWithMessages,
    summary="Session with its messages",
    responses={404: {"model": ErrorResponse, "description": "No such session"}},
)
async def get_session(session_id: int, user_id: int = Depends(require_user_id)):
    return get_assistant_service().get_session(user_id, session_id)


@router.delete(
    "/{session_id}",
    summary="Delete a session",
    responses={404: {"model": ErrorResponse, "description": "No such session"}},
)
async def delete_session(session_id: int, user_id: int = Depends(require_user_id)):
    get_assistant_service().delete_session(user_id, session_id)
    return result(message="Session deleted")


@router.post(
    "/{session_id}/message",
    response_model=AssistantReply,
    responses=AI_RESPONSES,
    summary="Send a message",
    description="""
    Ask the assistant about your documents.

    The message is embedded, the most similar documents you can access
    are retrieved (the session's own document always comes first), and
    the reply is generated from that context plus recent history.
    Costs one AI credit, refunded if the LLM is unavailable.
    """,
)
async def send_message(session_id: int, request: SendMessageRequest, user_id: int = Depends(ai_rate_limit)):
    return get_assistant_service().send_message(user_id, session_id, request.content)


@router.post(
    "/{session_id}/apply-suggestion",
    response_model=List[SuggestedDocumentChange],
    responses=AI_RESPONSES,
    summary="Turn a suggestion into document edits",
)
async def apply_suggestion(
    session_id: int,
    request: ApplySuggestionRequest,
    user_id: int = Depends(ai_rate_limit),
):
    """Proposed edits only; nothing is written to the documents."""
    return get_assistant_service().suggest_changes(
        user_id,
        session_id,
        request.suggestion_content,
        current_document_id=request.current_document_id,
    )
