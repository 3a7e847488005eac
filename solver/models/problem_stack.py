"""
Client-side session state: the navigation stack and the chat log.

The stack is the path from the original problem to the node being worked on.
stack[0] is always the root; every later entry is a subproblem. Entries are
only appended by a stuck response and only removed from the end, either one at
a time (a verified subproblem) or by breadcrumb truncation.
"""

from datetime import datetime, timezone
from typing import Iterator, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field

from solver.exceptions import StackError


class StackEntry(BaseModel):
    id: str
    title: str
    is_subproblem: bool


class ProblemStack:
    """Ordered path of problem nodes, root first."""

    def __init__(self):
        self._entries: List[StackEntry] = []

    @classmethod
    def start(cls, root_id: str, title: str) -> "ProblemStack":
        stack = cls()
        stack._entries.append(StackEntry(id=root_id, title=title, is_subproblem=False))
        return stack

    @property
    def entries(self) -> Tuple[StackEntry, ...]:
        return tuple(self._entries)

    @property
    def depth(self) -> int:
        return len(self._entries)

    @property
    def is_empty(self) -> bool:
        return not self._entries

    @property
    def root(self) -> StackEntry:
        if not self._entries:
            raise StackError("Stack has no root problem")
        return self._entries[0]

    @property
    def current(self) -> StackEntry:
        if not self._entries:
            raise StackError("Stack has no current problem")
        return self._entries[-1]

    @property
    def is_at_root(self) -> bool:
        return len(self._entries) == 1

    def push(self, problem_id: str, title: str) -> StackEntry:
        """Append a freshly generated subproblem."""
        if not self._entries:
            raise StackError("Cannot push a subproblem before the root problem is set")
        entry = StackEntry(id=problem_id, title=title, is_subproblem=True)
        self._entries.append(entry)
        return entry

    def pop(self) -> StackEntry:
        """Remove the current subproblem and return to its parent."""
        if len(self._entries) <= 1:
            raise StackError("Cannot pop the root problem")
        return self._entries.pop()

    def truncate_to(self, index: int) -> List[StackEntry]:
        """
        Breadcrumb navigation: keep entries [0..index], drop the rest.

        Returns:
            The removed entries, outermost first
        """
        if index < 0 or index >= len(self._entries):
            raise StackError(f"Breadcrumb index {index} out of range for depth {len(self._entries)}")
        removed = self._entries[index + 1:]
        del self._entries[index + 1:]
        return removed

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[StackEntry]:
        return iter(self.entries)


MessageRole = Literal["student", "tutor", "system"]


class ChatMessage(BaseModel):
    role: MessageRole
    content: str
    kind: str = "message"  # stuck, check, complete, reveal, ...
    problem_id: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ChatLog:
    """Append-only chronological message log. Never persisted server-side."""

    def __init__(self):
        self._messages: List[ChatMessage] = []

    def append(
        self,
        role: MessageRole,
        content: str,
        kind: str = "message",
        problem_id: Optional[str] = None,
    ) -> ChatMessage:
        message = ChatMessage(role=role, content=content, kind=kind, problem_id=problem_id)
        self._messages.append(message)
        return message

    @property
    def messages(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)
