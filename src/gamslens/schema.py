from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field


class PositionDTO(BaseModel):
    line: int
    character: int


class RangeDTO(BaseModel):
    start: PositionDTO
    end: PositionDTO


class OutlineNodeDTO(BaseModel):
    name: str
    kind: str
    detail: str = ""
    range: RangeDTO
    selection_range: RangeDTO
    level: Optional[int] = None
    children: List["OutlineNodeDTO"] = []


class FoldingRangeDTO(BaseModel):
    start_line: int
    end_line: int
    kind: str


class TokenDTO(BaseModel):
    kind: str
    line: int
    raw: str
    processed: str
    level: Optional[int] = None
    title: Optional[str] = None
    full: Optional[str] = None
    base_keyword: Optional[str] = None
    keyword_index: Optional[int] = None
    keyword_length: Optional[int] = None


class OutlineResponse(BaseModel):
    uri: str
    symbols: List[OutlineNodeDTO] = []


class FoldingResponse(BaseModel):
    uri: str
    ranges: List[FoldingRangeDTO] = []


class TextEditDTO(BaseModel):
    start: Tuple[int, int]
    end: Tuple[int, int]
    replacement: str


class InsertSectionRequest(BaseModel):
    uri: Optional[str] = None
    name: str
    line: int = Field(ge=0)
    character: int = Field(default=0, ge=0)
    level: int = Field(default=1, ge=1)
    width: Optional[int] = Field(default=None, ge=0)


class ToggleLineCommentRequest(BaseModel):
    uri: str
    start_line: int = Field(ge=0)
    end_line: int = Field(ge=0)
    insert_space: Optional[bool] = None
    ignore_empty_lines: Optional[bool] = None


class EditResponse(BaseModel):
    uri: Optional[str] = None
    edits: List[TextEditDTO] = []
    warnings: List[str] = []
    errors: List[str] = []


OutlineNodeDTO.model_rebuild()
