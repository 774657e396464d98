from pydantic import BaseModel, Field, validator
from typing import List


class SummarizeResponse(BaseModel):
    """Response after uploading and summarizing a document."""
    summary: str
    file_id: str = Field(..., alias="fileId")


class ChatTurn(BaseModel):
    """One earlier question/answer exchange supplied by the client."""
    question: str
    answer: str


class ChatRequest(BaseModel):
    """Follow-up question about a summarized document."""
    message: str = Field(..., min_length=1, max_length=4000)
    file_id: str = Field(..., alias="fileId", min_length=1, max_length=200)
    chat_history: List[ChatTurn] = Field(default_factory=list, alias="chatHistory")

    @validator('message')
    def validate_message(cls, v):
        """Ensure message is not just whitespace."""
        if not v.strip():
            raise ValueError("Message cannot be empty or only whitespace")
        return v.strip()

    @validator('file_id')
    def validate_file_id(cls, v):
        """Ensure fileId is not just whitespace."""
        if not v.strip():
            raise ValueError("fileId cannot be empty")
        return v.strip()


class SourceChunk(BaseModel):
    """A retrieved chunk the answer was grounded on."""
    text: str
    chunk_idx: int
    similarity_score: float


class ChatResponse(BaseModel):
    """Answer to a chat message. ``timestamp`` is epoch milliseconds."""
    response: str
    timestamp: int
    sources: List[SourceChunk] = []


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    active_sessions: int
    ttl_seconds: float
