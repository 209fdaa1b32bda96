"""
Conversation context windowing.

Bounds an arbitrarily long chat history before it is sent upstream:
short histories pass through, long ones keep the opening exchange plus the
most recent turns, oversized results are trimmed from just after the opening,
and very long assistant replies keep only their head and tail.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

MAX_HISTORY_CHARS = 50000
SHORT_HISTORY_LIMIT = 8
OPENING_TURNS = 2
RECENT_TURNS = 6
TRIM_STEP = 2

ASSISTANT_TRUNCATE_THRESHOLD = 3000
TRUNCATE_HEAD_CHARS = 2000
TRUNCATE_TAIL_CHARS = 500
TRUNCATION_MARKER = "\n\n[... response truncated for context ...]\n\n"

HISTORY_ROLES = ("user", "assistant")


@dataclass(frozen=True)
class Turn:
    """One normalized history entry"""
    role: str
    content: str

    def as_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class WindowedContext:
    """Upstream message list for exactly one chat request

    Attributes:
        messages: System message, windowed history, then the new user message
        history_turns: Number of history turns kept
        source_turns: Number of usable history turns received
        history_chars: Serialized size of the kept history before truncation
    """
    messages: Tuple[Dict[str, Any], ...]
    history_turns: int
    source_turns: int
    history_chars: int

    @property
    def is_follow_up(self) -> bool:
        return self.history_turns >= OPENING_TURNS

    def payload_chars(self) -> int:
        return serialized_size(self.messages)

    def to_payload(self) -> List[Dict[str, Any]]:
        """Fresh copy of the messages, safe to embed in a request body"""
        return json.loads(json.dumps(list(self.messages)))


def serialized_size(items: Iterable[Any]) -> int:
    """Length of the compact JSON encoding of a list"""
    return len(json.dumps(list(items), separators=(",", ":"), ensure_ascii=False))


def extract_text(content: Union[str, List[Any], None]) -> str:
    """Flatten message content to plain text

    Content may be a string or a list of parts carrying "text" or "content".
    """
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, dict):
                parts.append(str(part.get("text") or part.get("content") or ""))
            elif isinstance(part, str):
                parts.append(part)
        return "".join(parts)
    if content is None:
        return ""
    return str(content)


def normalize_history(history: Iterable[Any]) -> List[Turn]:
    """Keep non-empty user and assistant turns, in order

    Entries may be dicts or objects with role/content attributes.
    """
    turns = []
    for entry in history:
        if isinstance(entry, dict):
            role, content = entry.get("role"), entry.get("content")
        else:
            role, content = getattr(entry, "role", None), getattr(entry, "content", None)

        if role not in HISTORY_ROLES:
            continue

        text = extract_text(content)
        if not text.strip():
            continue
        turns.append(Turn(role=role, content=text))
    return turns


def select_window(turns: List[Turn]) -> List[Turn]:
    """Keep everything for short histories, else the opening pair plus the recent tail"""
    if len(turns) <= SHORT_HISTORY_LIMIT:
        return list(turns)
    return turns[:OPENING_TURNS] + turns[-RECENT_TURNS:]


def trim_to_budget(turns: List[Turn], max_chars: int) -> Tuple[List[Turn], int]:
    """Drop turns right after the opening pair until the history fits

    Returns:
        Tuple of (kept turns, serialized size of the kept turns)
    """
    kept = list(turns)
    size = serialized_size(t.as_dict() for t in kept)
    while size > max_chars and len(kept) > OPENING_TURNS:
        del kept[OPENING_TURNS:OPENING_TURNS + TRIM_STEP]
        size = serialized_size(t.as_dict() for t in kept)
        logger.info(f"Trimmed history to {len(kept)} msgs ({size / 1024:.1f}KB)")
    return kept, size


def truncate_long_reply(text: str) -> str:
    """Keep the head and tail of an oversized assistant reply"""
    if len(text) <= ASSISTANT_TRUNCATE_THRESHOLD:
        return text
    truncated = text[:TRUNCATE_HEAD_CHARS] + TRUNCATION_MARKER + text[-TRUNCATE_TAIL_CHARS:]
    logger.info(f"Truncated assistant message from {len(text)} to {len(truncated)} chars")
    return truncated


def to_upstream_message(turn: Turn) -> Dict[str, Any]:
    if turn.role == "user":
        return {"role": "user", "content": [{"type": "text", "text": turn.content}]}
    return {"role": "assistant", "content": truncate_long_reply(turn.content)}


def build_context(
    history: Optional[Iterable[Any]],
    message: str,
    system_prompt: str,
    max_history_chars: int = MAX_HISTORY_CHARS,
) -> WindowedContext:
    """Build the bounded message list for one upstream chat request

    Args:
        history: Prior conversation turns supplied by the client
        message: New user message
        system_prompt: Prompt placed first
        max_history_chars: Ceiling for the serialized history

    Returns:
        Immutable windowed context
    """
    turns = normalize_history(history or [])
    kept, history_chars = trim_to_budget(select_window(turns), max_history_chars)

    messages: List[Dict[str, Any]] = [{"role": "system", "content": system_prompt}]
    messages.extend(to_upstream_message(turn) for turn in kept)
    messages.append({"role": "user", "content": [{"type": "text", "text": message}]})

    return WindowedContext(
        messages=tuple(messages),
        history_turns=len(kept),
        source_turns=len(turns),
        history_chars=history_chars,
    )
