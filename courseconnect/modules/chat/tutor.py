"""AI tutor chat.

Replies come from the configured LLM with the recent conversation folded into
the prompt. When no model is configured or the call fails, a canned reply
picked by keywords in the student's message is returned instead.
"""

from __future__ import annotations

import re
from typing import Literal, Optional

from pydantic import BaseModel
from pydantic_ai import Agent

from courseconnect.core.config import settings
from courseconnect.core.logging import get_logger
from courseconnect.modules.llm import build_model

logger = get_logger(__name__)

HISTORY_LIMIT = 10
DEFAULT_SUBJECT = "academic subjects"

SYSTEM_PROMPT = (
    "You are CourseConnect AI, a helpful and friendly tutor for college "
    "students. Provide clear, educational explanations. Be encouraging and "
    "supportive, use examples when helpful and ask a follow-up question that "
    "helps the student learn. Keep responses conversational but informative. "
    "If asked about topics outside academics, politely steer back to the "
    "student's coursework. Use LaTeX ($...$) for math."
)

# (keywords, reply); the first rule with a whole-word match wins
FALLBACK_REPLIES: tuple[tuple[tuple[str, ...], str], ...] = (
    (
        ("derivative", "derivatives", "differentiate"),
        "Sure! A derivative tells you how fast a function is changing at any "
        "point. Think of it as the slope of the curve. For example, if "
        "f(x) = x², then f'(x) = 2x, so at x = 3 the slope is 6.",
    ),
    (
        ("integral", "integrals", "integrate"),
        "Integrals are the reverse of derivatives! They find the area under a "
        "curve or recover a function from its derivative. Are you working on "
        "definite or indefinite integrals?",
    ),
    (
        ("chain rule",),
        "The chain rule handles composite functions: the derivative of "
        "f(g(x)) is f'(g(x)) × g'(x). Take the derivative of the outer "
        "function, then multiply by the derivative of the inner one. Want a "
        "step-by-step example?",
    ),
    (
        ("limit", "limits"),
        "Limits describe what a function approaches as its input nears a "
        "value. For example, lim(x→0) sin(x)/x = 1. They are the foundation "
        "of both derivatives and integrals. Which limit are you working on?",
    ),
    (
        ("hello", "hi", "hey"),
        "Hello! I'm your CourseConnect AI tutor. I can help with {subject} "
        "and any other academic questions. What would you like to learn about "
        "today?",
    ),
    (
        ("help", "stuck"),
        "I'm here to help! Tell me the specific problem or concept in "
        "{subject} you're working on and we'll break it down step by step.",
    ),
)

DEFAULT_REPLY = (
    "That's an interesting question! I'm best with {subject}. Could you "
    "rephrase it in terms of the concepts you're studying so I can help?"
)


class ChatTurn(BaseModel):
    sender: str
    message: str


class TutorReply(BaseModel):
    response: str
    model: str
    source: Literal["ai", "fallback"]


def _model_name() -> str:
    if (settings.model_provider or "google").lower() == "openrouter":
        return settings.openrouter_model
    return settings.google_model


def build_prompt(
    message: str, context: Optional[str], history: list[ChatTurn]
) -> str:
    parts = [f"You specialize in {context or DEFAULT_SUBJECT}."]
    recent = [t for t in history if t.message.strip()][-HISTORY_LIMIT:]
    if recent:
        lines = "\n".join(f"{t.sender}: {t.message.strip()}" for t in recent)
        parts.append(f"Recent conversation context:\n{lines}")
    parts.append(f"Student's question: {message.strip()}")
    parts.append("Please provide a helpful, educational response.")
    return "\n\n".join(parts)


def fallback_reply(message: str, context: Optional[str] = None) -> str:
    text = message.lower()
    subject = context or DEFAULT_SUBJECT
    for keywords, reply in FALLBACK_REPLIES:
        if any(re.search(rf"\b{re.escape(k)}\b", text) for k in keywords):
            return reply.format(subject=subject)
    return DEFAULT_REPLY.format(subject=subject)


async def ask_model(prompt: str) -> str:
    agent = Agent(model=build_model(), system_prompt=SYSTEM_PROMPT, retries=1)
    res = await agent.run(prompt)
    return str(res.output).strip()


async def tutor_reply(
    message: str,
    *,
    context: Optional[str] = None,
    history: Optional[list[ChatTurn]] = None,
) -> TutorReply:
    prompt = build_prompt(message, context, history or [])
    try:
        answer = await ask_model(prompt)
    except Exception as e:  # noqa: BLE001
        logger.warning(f"Tutor model unavailable, using canned reply: {e}")
        answer = ""
    if answer:
        return TutorReply(response=answer, model=_model_name(), source="ai")
    return TutorReply(
        response=fallback_reply(message, context), model="fallback", source="fallback"
    )
