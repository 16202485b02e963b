from .tutor import ChatTurn, TutorReply, build_prompt, fallback_reply, tutor_reply

__all__ = [
    "ChatTurn",
    "TutorReply",
    "build_prompt",
    "fallback_reply",
    "tutor_reply",
]
