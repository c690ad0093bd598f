"""
Request and response models for the writing assistant API.

The proactive-diff payload keeps the camelCase keys the editor sends
(aiResponseContent, commandName, ...) via field aliases.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SessionCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255, examples=["Essay feedback"])
    document_id: Optional[int] = Field(default=None, description="Document this conversation is about")


class SessionResponse(BaseModel):
    id: int
    user_id: int
    document_id: Optional[int] = None
    title: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SessionSummary(SessionResponse):
    """Session list entry with a snippet of its latest message."""
    last_message_snippet: Optional[str] = None


class MessageResponse(BaseModel):
    id: int
    session_id: int
    role: str
    content: str
    created_at: Optional[datetime] = None


class SessionWithMessages(BaseModel):
    session: SessionResponse
    messages: List[MessageResponse]


class SendMessageRequest(BaseModel):
    content: str = Field(..., min_length=1, description="The user's message to the assistant")


class AssistantReply(BaseModel):
    role: str = Field(default="assistant")
    content: str
    credits_remaining: int


class SelectedTextRequest(BaseModel):
    """Text selected in the editor for a one-shot command."""
    content: str = Field(..., min_length=1)


class RewriteRequest(BaseModel):
    content: str = Field(..., min_length=1)
    style: str = Field(..., min_length=1, examples=["formal"])


class CommandReply(BaseModel):
    response: str


class ApplySuggestionRequest(BaseModel):
    suggestion_content: str = Field(..., min_length=1)
    current_document_id: Optional[int] = None


class SuggestedDocumentChange(BaseModel):
    document_id: int
    old_content: str
    new_content: str


class ProactiveDiffContext(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(..., description="'command' or 'chat'")
    command_name: Optional[str] = Field(default=None, alias="commandName")
    user_prompt: Optional[str] = Field(default=None, alias="userPrompt")


class DecisionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ai_response_content: str = Field(..., alias="aiResponseContent")
    context: ProactiveDiffContext
    document_content_snippet: Optional[str] = Field(default=None, alias="documentContentSnippet")


class DecisionResponse(BaseModel):
    decision: str = Field(..., description="'True' when the reply should be offered as a document diff")


class SanitizeTextRequest(BaseModel):
    text_to_sanitize: str


class SanitizeTextResponse(BaseModel):
    sanitized_text: str
