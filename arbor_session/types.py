"""Node and session records plus their read-only projections."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "assistant"]

DISPLAY_NAME_LIMIT = 40


def _now() -> datetime:
    return datetime.now(timezone.utc)


def generate_id() -> str:
    return uuid4().hex


def truncate_content(content: str, limit: int = DISPLAY_NAME_LIMIT) -> str:
    if len(content) > limit:
        return content[: limit - 3] + "..."
    return content


@dataclass
class MessageNode:
    id: str
    role: Role
    content: str
    parent_id: Optional[str]
    child_ids: List[str] = field(default_factory=list)
    label: Optional[str] = None
    created_at: datetime = field(default_factory=_now)

    @property
    def display_name(self) -> str:
        return self.label or truncate_content(self.content)


@dataclass
class Session:
    id: str
    nodes: Dict[str, MessageNode] = field(default_factory=dict)
    root_id: Optional[str] = None
    active_branch: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=_now)


class MessageView(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    role: Role
    content: str
    label: Optional[str] = None
    parent_id: Optional[str] = None
    children: List[str] = Field(default_factory=list)
    timestamp: datetime

    @classmethod
    def from_node(cls, node: MessageNode) -> "MessageView":
        return cls(
            id=node.id,
            role=node.role,
            content=node.content,
            label=node.label,
            parent_id=node.parent_id,
            children=list(node.child_ids),
            timestamp=node.created_at,
        )


class TreeNode(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    role: Role
    content: str
    label: Optional[str] = None
    display_name: str
    timestamp: datetime
    children: List["TreeNode"] = Field(default_factory=list)


class SessionView(BaseModel):
    model_config = ConfigDict(extra="forbid")

    session_id: str
    messages: List[MessageView] = Field(default_factory=list)
    active_branch: List[str] = Field(default_factory=list)
    created_at: datetime


class SessionTreeView(BaseModel):
    model_config = ConfigDict(extra="forbid")

    session_id: str
    tree: Optional[TreeNode] = None
    active_branch: List[str] = Field(default_factory=list)
    created_at: datetime


class BranchStats(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path_length: int = 0
    total_branches: int = 0
    node_count: int = 0
    main_leaf_id: Optional[str] = None


TreeNode.model_rebuild()
