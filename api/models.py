"""
API Models

Pydantic request/response models for the article translator API.
Wire names are camelCase; Python attributes are snake_case.
"""

from pydantic import BaseModel, Field
from typing import List, Optional


class CamelModel(BaseModel):
    """Base model accepting either field names or camelCase aliases"""

    class Config:
        populate_by_name = True


# ==================== REQUEST MODELS ====================

class TranslateRequest(CamelModel):
    """Request body for POST /api/translate"""
    text: Optional[str] = Field(default=None, description="HTML to translate")
    client_id: Optional[str] = Field(
        default=None,
        alias="clientId",
        description="WebSocket client id to receive progress events",
    )


# ==================== RESPONSE MODELS ====================

class DirectTranslationResponse(CamelModel):
    """Short text translated in one call"""
    translated_text: str = Field(..., alias="translatedText")


class TranslationJobResponse(CamelModel):
    """Long text accepted as a background job"""
    translation_id: str = Field(..., alias="translationId")
    status: str = "processing"
    message: str = "Translation started"
    total_chunks: int = Field(..., alias="totalChunks")
    poll_url: str = Field(..., alias="pollUrl")


class ProgressInfo(BaseModel):
    completed: int
    total: int


class CompletedChunk(BaseModel):
    index: int
    text: str


class TranslationStatusResponse(CamelModel):
    """Point-in-time view of a translation job"""
    id: str
    status: str
    progress: ProgressInfo
    completed_chunks: List[CompletedChunk] = Field(default_factory=list, alias="completedChunks")
    translated_text: Optional[str] = Field(default=None, alias="translatedText")
    error: Optional[str] = None


class NotFoundResponse(BaseModel):
    status: str = "not_found"
    message: str = "Translation not found"


class ImportResponse(BaseModel):
    """Extracted article HTML"""
    content: str


class HealthResponse(CamelModel):
    status: str = "ok"
    message: str = "Server is running"
    version: str
    timestamp: float
    active_jobs: int = Field(default=0, alias="activeJobs")
    connected_clients: int = Field(default=0, alias="connectedClients")
