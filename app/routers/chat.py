"""Chatbot routes.

A thin proxy over `ChatbotClient`: the client itself degrades to a fallback
answer, so the only error this router returns is a missing question.
"""
import logging
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.services.chatbot_client import chatbot_client

router = APIRouter(prefix="/chatbot", tags=["chatbot"])
logger = logging.getLogger(__name__)


class ChatQuestion(BaseModel):
    query: Optional[str] = None


class ChatAnswer(BaseModel):
    answer: str


@router.post("/ask", response_model=ChatAnswer)
async def ask(payload: ChatQuestion):
    """Answer a short tourism question."""
    if not payload.query or not payload.query.strip():
        logger.info("Chatbot question rejected: empty query")
        return JSONResponse(status_code=400, content={"error": "Query is required"})

    question = payload.query.strip()
    logger.info(f"Chatbot question received ({len(question)} chars)")
    answer = await chatbot_client.ask(question)
    return ChatAnswer(answer=answer)
