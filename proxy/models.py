"""
Pydantic models for the browser-facing API.
"""
from typing import Any, List, Optional, Union
from pydantic import BaseModel, Field


class ConversationTurn(BaseModel):
    """One entry of the client-held conversation history"""
    role: str
    content: Optional[Union[str, List[Any]]] = None


class ChatRequest(BaseModel):
    """Chat turn request; field names match the browser client's JSON"""
    message: Optional[str] = None
    conversationHistory: List[ConversationTurn] = Field(default_factory=list)


class LogoutResponse(BaseModel):
    success: bool = True
    message: str = "Logged out successfully"
