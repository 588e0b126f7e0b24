"""Store interfaces consumed by the paper procedures.

Filters are plain ``{field: value}`` mappings. A list or tuple value matches
any of its members; ``None`` values are ignored.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Protocol
from itimock.models.schemas import PaperRecord, QuestionIn, QuestionRecord

Filters = Dict[str, Any]

@dataclass
class Page:
    items: List[Any] = field(default_factory=list)
    total: int = 0

class QuestionStore(Protocol):
    def list(self, filters: Filters, limit: int, offset: int) -> Page: ...
    def list_ids(self, filters: Filters, limit: int, offset: int) -> Page: ...
    def get_many(self, ids: Iterable[str]) -> List[QuestionRecord]: ...
    def create_many(self, questions: List[QuestionIn], user_id: Optional[str], user_name: Optional[str]) -> List[QuestionRecord]: ...
    def delete(self, question_id: str) -> bool: ...

class PaperStore(Protocol):
    def list(self, filters: Filters, limit: Optional[int] = None, offset: int = 0) -> Page: ...
    def get(self, paper_id: str) -> Optional[PaperRecord]: ...
    def create(self, fields: Dict[str, Any]) -> PaperRecord: ...
    def update(self, paper_id: str, fields: Dict[str, Any]) -> PaperRecord: ...
