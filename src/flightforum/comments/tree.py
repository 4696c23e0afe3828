"""Threaded comments per flight.

A ``CommentTree`` is an arena: nodes indexed by id plus an ordered child-id
list per node, so there is no recursive ownership and every traversal is an
explicit stack. Depth is unbounded in the data; only the reply affordance
stops at ``MAX_REPLY_DEPTH``.

Example:
    >>> tree = CommentTree.from_nested("AA123", [{"id": 1, "user": "ann", "text": "On time?",
    ...                                           "timestamp": "2025-01-29T14:30:00Z"}])
    >>> [(c.node.id, c.depth, c.can_reply) for c in tree.walk()]
    [(1, 0, True)]
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from flightforum.observability import get_logger

log = get_logger("flightforum.comments")

MAX_REPLY_DEPTH = 4

CommentId = int | str


class CommentNode(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    id: CommentId
    user: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)
    timestamp: datetime
    parent_id: CommentId | None = Field(default=None, alias="parentId")

    def to_display(self) -> dict[str, Any]:
        """Nested display shape minus ``replies``; ``parentId`` only on replies."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


@dataclass(frozen=True, slots=True)
class RenderedComment:
    """One step of a depth-first walk. Roots are depth 0."""

    node: CommentNode
    depth: int
    can_reply: bool


class CommentDraft(BaseModel):
    """A comment the user submitted but that has not been stored."""

    model_config = ConfigDict(frozen=True)

    flight_id: str
    text: str = Field(..., min_length=1)
    parent_id: CommentId | None = None


class CommentTree:
    """Append-only reply tree for one flight."""

    __slots__ = ("flight_id", "_nodes", "_children", "_roots")

    def __init__(self, flight_id: str, nodes: Iterable[CommentNode] = ()) -> None:
        self.flight_id = flight_id
        self._nodes: dict[CommentId, CommentNode] = {}
        self._children: dict[CommentId, list[CommentId]] = {}
        self._roots: list[CommentId] = []
        for node in nodes:
            self.add(node)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, comment_id: object) -> bool:
        return comment_id in self._nodes

    def __getitem__(self, comment_id: CommentId) -> CommentNode:
        return self._nodes[comment_id]

    @property
    def roots(self) -> list[CommentNode]:
        return [self._nodes[i] for i in self._roots]

    def replies(self, comment_id: CommentId) -> list[CommentNode]:
        return [self._nodes[i] for i in self._children[comment_id]]

    def add(self, node: CommentNode) -> CommentNode:
        """Append ``node`` as the last reply of its parent (or last root).

        Ids are unique and parents must already exist, which rules out cycles.
        """
        if node.id in self._nodes:
            raise ValueError(f"Duplicate comment id {node.id!r} on flight {self.flight_id}")
        if node.parent_id is not None and node.parent_id not in self._nodes:
            raise ValueError(f"Unknown parent comment {node.parent_id!r} on flight {self.flight_id}")
        self._nodes[node.id] = node
        self._children[node.id] = []
        (self._children[node.parent_id] if node.parent_id is not None else self._roots).append(node.id)
        return node

    def depth(self, comment_id: CommentId) -> int:
        depth, node = 0, self._nodes[comment_id]
        while node.parent_id is not None:
            depth += 1
            node = self._nodes[node.parent_id]
        return depth

    def can_reply(self, comment_id: CommentId) -> bool:
        return self.depth(comment_id) < MAX_REPLY_DEPTH

    def walk(self) -> Iterator[RenderedComment]:
        """Pre-order, depth-first, replies in insertion order."""
        stack: list[tuple[CommentId, int]] = [(i, 0) for i in reversed(self._roots)]
        while stack:
            comment_id, depth = stack.pop()
            yield RenderedComment(self._nodes[comment_id], depth, depth < MAX_REPLY_DEPTH)
            stack.extend((child, depth + 1) for child in reversed(self._children[comment_id]))

    def insert(
        self,
        draft: CommentDraft,
        *,
        id: CommentId,  # noqa: A002
        user: str,
        timestamp: datetime | None = None,
    ) -> CommentNode:
        """Store a validated draft as the last reply of its parent."""
        return self.add(CommentNode(
            id=id, user=user, text=draft.text,
            timestamp=timestamp or datetime.now(UTC), parent_id=draft.parent_id,
        ))

    # ─────────────────────────────────────────────────────────────────────────
    # Nested display shape
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def from_nested(cls, flight_id: str, comments: Iterable[Mapping[str, Any]]) -> CommentTree:
        """Build from ``[{id, user, text, timestamp, replies: [...]}, ...]``.

        The enclosing comment is the parent; a ``parentId`` key is ignored.
        """
        tree = cls(flight_id)
        stack: list[tuple[Mapping[str, Any], CommentId | None]] = [(c, None) for c in reversed(list(comments))]
        while stack:
            item, parent_id = stack.pop()
            fields = {k: v for k, v in item.items() if k not in ("replies", "parentId", "parent_id")}
            node = tree.add(CommentNode(**fields, parent_id=parent_id))
            stack.extend((reply, node.id) for reply in reversed(item.get("replies") or []))
        return tree

    def to_nested(self) -> list[dict[str, Any]]:
        """Inverse of ``from_nested``; ``replies`` only appears when non-empty."""
        out: list[dict[str, Any]] = []
        shaped: dict[CommentId, dict[str, Any]] = {}
        for step in self.walk():
            node = step.node
            shaped[node.id] = entry = node.to_display()
            if node.parent_id is None:
                out.append(entry)
            else:
                shaped[node.parent_id].setdefault("replies", []).append(entry)
        return out


class CommentBoard:
    """Comment trees keyed by flight id."""

    __slots__ = ("_trees",)

    def __init__(self, trees: Iterable[CommentTree] = ()) -> None:
        self._trees: dict[str, CommentTree] = {t.flight_id: t for t in trees}

    def __contains__(self, flight_id: object) -> bool:
        return flight_id in self._trees

    def __len__(self) -> int:
        return len(self._trees)

    def tree(self, flight_id: str) -> CommentTree:
        """Tree for ``flight_id``, created empty on first use."""
        if flight_id not in self._trees:
            self._trees[flight_id] = CommentTree(flight_id)
        return self._trees[flight_id]

    @property
    def flight_ids(self) -> list[str]:
        return list(self._trees)

    def submit(self, flight_id: str, text: str, parent_id: CommentId | None = None) -> CommentDraft | None:
        return submit_comment(self.tree(flight_id), text, parent_id)


def submit_comment(tree: CommentTree, text: str, parent_id: CommentId | None = None) -> CommentDraft | None:
    """Validate a submission and log it; the tree is not modified.

    Blank text is ignored (returns None). Replying to an unknown comment or
    to one at the reply depth limit raises ValueError.
    """
    if not text.strip():
        return None
    if parent_id is not None:
        if parent_id not in tree:
            raise ValueError(f"Unknown parent comment {parent_id!r} on flight {tree.flight_id}")
        if not tree.can_reply(parent_id):
            raise ValueError(f"Comment {parent_id!r} is at the reply depth limit ({MAX_REPLY_DEPTH})")
    draft = CommentDraft(flight_id=tree.flight_id, text=text.strip(), parent_id=parent_id)
    log.info("new comment", flight_id=draft.flight_id, parent_id=draft.parent_id, text=draft.text)
    return draft


SAMPLE_COMMENTS: dict[str, list[dict[str, Any]]] = {
    "AA123": [
        {
            "id": 1,
            "user": "Traveler123",
            "text": "Any delays expected today?",
            "timestamp": "2025-01-29T14:30:00Z",
            "replies": [
                {
                    "id": 2,
                    "user": "FlightWatcher",
                    "text": "All looks on time so far!",
                    "timestamp": "2025-01-29T15:00:00Z",
                    "parentId": 1,
                },
            ],
        },
    ],
}


def sample_board() -> CommentBoard:
    return CommentBoard(CommentTree.from_nested(fid, comments) for fid, comments in SAMPLE_COMMENTS.items())
