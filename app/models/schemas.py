from __future__ import annotations
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DocumentCategory(str, Enum):
    WORD = "word"
    PDF = "pdf"
    TEXT = "text"
    UNKNOWN = "unknown"


class Resource(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    athro_id: str = Field(default="", alias="athroId")
    subject: str = ""
    topic: Optional[str] = None
    resource_type: str = Field(default="", alias="resourceType")  # MIME type, e.g. application/pdf
    resource_path: str = Field(default="", alias="resourcePath")  # storage key
    folder_path: Optional[str] = Field(default=None, alias="folderPath")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")

    @property
    def file_name(self) -> str:
        name = (self.resource_path or "").rstrip("/").split("/")[-1]
        return name or "Unknown file"

    @property
    def file_extension(self) -> str:
        name = (self.resource_path or "").rstrip("/").split("/")[-1]
        if "." not in name:
            return ""
        return name.rsplit(".", 1)[-1].lower()


class BoundingBox(BaseModel):
    top: float = 0.0
    left: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def center_x(self) -> float:
        return self.left + self.width / 2


class TextBlock(BaseModel):
    text: str
    bounding_box: BoundingBox = Field(default_factory=BoundingBox)
    page: int = 1


class ColumnSplit(BaseModel):
    left_blocks: List[TextBlock] = Field(default_factory=list)
    right_blocks: List[TextBlock] = Field(default_factory=list)
    is_two_column: bool = False
    is_bilingual: bool = False


class ExtractionResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: str
    is_actual_content: bool = Field(alias="isActualContent")


class ResourceContextRequest(BaseModel):
    resources: List[Resource] = Field(default_factory=list, max_length=50)


class ResourceContextResponse(BaseModel):
    context: str
    count: int


class HealthResponse(BaseModel):
    status: str
    storage: str
    cloud_ocr: str
    pdf_worker: str
