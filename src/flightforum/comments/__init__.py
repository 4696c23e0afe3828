"""Threaded comment model with a depth-bounded reply affordance."""

from .tree import (
    MAX_REPLY_DEPTH,
    SAMPLE_COMMENTS,
    CommentBoard,
    CommentDraft,
    CommentId,
    CommentNode,
    CommentTree,
    RenderedComment,
    sample_board,
    submit_comment,
)

__all__ = [
    "MAX_REPLY_DEPTH", "CommentId", "CommentNode", "CommentTree", "RenderedComment",
    "CommentBoard", "CommentDraft", "submit_comment", "SAMPLE_COMMENTS", "sample_board",
]
