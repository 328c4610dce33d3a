"""
Context Assembly (stored history → LangChain messages)
======================================================

Purpose
-------
Turns the recent history of a chat session plus the new user message into
the ordered list of LangChain messages sent to the completion model.

Rules
-----
- The caller fetches at most `CONTEXT_FETCH_LIMIT` messages, newest first,
  after the new user message was stored; that message is therefore the last
  entry of the window as well as the appended final message.
- They are put back in chronological order and only the last
  `CONTEXT_WINDOW` are kept.
- One system instruction comes first; it names the referenced file and its
  MIME type when the turn carries one.
- The new user message is always last.

The functions here are pure: no database access, no network.
"""

from typing import Optional

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from humanlenk.database.entities.enums import MessageRole

CONTEXT_FETCH_LIMIT = 10
"""How many recent messages are read from the store per turn."""

CONTEXT_WINDOW = 6
"""How many of those are forwarded to the model."""

SYSTEM_PROMPT = (
    "You are HumanLenk, a helpful AI assistant that can summarize, edit, and clarify content. "
    "You can also help with file analysis when files are provided. "
    "Be concise, helpful, and professional in your responses."
)


def build_system_prompt(file: Optional[dict] = None) -> str:
    """
    System instruction for a turn.

    Args:
        file (dict | None): Serialised file referenced by the turn (`name`, `type`).

    Returns:
        str: The base instruction, plus a line naming the file when present.
    """
    if file is None:
        return SYSTEM_PROMPT
    return f"{SYSTEM_PROMPT}\nThe user has referenced a file: {file['name']} ({file['type']})"


def to_langchain_message(message: dict) -> BaseMessage:
    if message["role"] == MessageRole.ASSISTANT.value:
        return AIMessage(content=message["content"])
    return HumanMessage(content=message["content"])


def build_messages(history: list[dict], new_message: str, file: Optional[dict] = None) -> list[BaseMessage]:
    """
    Build the message list for one completion request.

    Args:
        history (list[dict]): Up to `CONTEXT_FETCH_LIMIT` serialised messages,
            newest first, as returned by `fetch_recent_messages`.
        new_message (str): Text of the user's new message.
        file (dict | None): File referenced by the turn, if any.

    Returns:
        list[BaseMessage]: System message, the last `CONTEXT_WINDOW` history
        messages in chronological order, then the new HumanMessage.
    """
    chronological = list(reversed(history[:CONTEXT_FETCH_LIMIT]))
    window = chronological[-CONTEXT_WINDOW:]

    messages: list[BaseMessage] = [SystemMessage(content=build_system_prompt(file))]
    messages.extend(to_langchain_message(message) for message in window)
    messages.append(HumanMessage(content=new_message))
    return messages
