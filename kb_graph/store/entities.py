"""
Record store entities.

Plain projections of the rows held by the record store. The analytics core
only reads them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional


def _parse_datetime(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass
class Document:
    """A knowledge-base document."""
    id: int
    title: str
    user_id: int
    created_time: datetime
    content: Optional[str] = None
    category_id: Optional[int] = None
    updated_time: Optional[datetime] = None
    deleted: bool = False

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "user_id": self.user_id,
            "category_id": self.category_id,
            "created_time": self.created_time.isoformat(),
            "updated_time": self.updated_time.isoformat() if self.updated_time else None,
            "deleted": self.deleted
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Document":
        return cls(
            id=data["id"],
            title=data["title"],
            user_id=data["user_id"],
            created_time=_parse_datetime(data["created_time"]),
            content=data.get("content"),
            category_id=data.get("category_id"),
            updated_time=_parse_datetime(data.get("updated_time")),
            deleted=data.get("deleted", False)
        )


@dataclass
class Category:
    """A (possibly nested) document category."""
    id: int
    name: str
    user_id: int
    parent_id: Optional[int] = None
    sort_order: int = 0
    created_time: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "name": self.name,
            "user_id": self.user_id,
            "parent_id": self.parent_id,
            "sort_order": self.sort_order,
            "created_time": self.created_time.isoformat()
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Category":
        created = _parse_datetime(data.get("created_time"))
        return cls(
            id=data["id"],
            name=data["name"],
            user_id=data["user_id"],
            parent_id=data.get("parent_id"),
            sort_order=data.get("sort_order", 0),
            created_time=created or datetime.now()
        )


@dataclass
class Tag:
    """A user-defined tag."""
    id: int
    name: str
    user_id: int
    created_time: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "name": self.name,
            "user_id": self.user_id,
            "created_time": self.created_time.isoformat()
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Tag":
        created = _parse_datetime(data.get("created_time"))
        return cls(
            id=data["id"],
            name=data["name"],
            user_id=data["user_id"],
            created_time=created or datetime.now()
        )
