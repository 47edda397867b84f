from __future__ import annotations
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "study-document-ingest"
    app_env: str = "dev"
    app_port: int = 8000
    log_level: str = "INFO"

    storage_url: str = ""
    storage_api_key: Optional[str] = None
    storage_buckets: str = "playlist-documents,resources"
    storage_timeout_sec: float = 20.0

    textract_enabled: bool = True
    aws_region: str = "eu-west-2"
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    textract_timeout_sec: float = 60.0

    pdf_worker_enabled: bool = True

    # column / bilingual heuristics; tuned against bilingual exam papers
    layout_column_midline: float = Field(default=0.5, gt=0.0, lt=1.0)
    layout_cloud_min_column_blocks: int = Field(default=2, ge=0)
    layout_local_min_column_blocks: int = Field(default=3, ge=0)
    layout_cloud_row_epsilon: float = Field(default=0.01, ge=0.0)
    layout_local_row_epsilon: float = Field(default=0.006, ge=0.0)
    bilingual_similarity_ceiling: float = Field(default=0.8, ge=0.0, le=1.0)
    bilingual_min_words: int = Field(default=10, ge=0)
    bilingual_min_length_ratio: float = Field(default=0.5, ge=0.0, le=1.0)

    response_max_full_words: int = Field(default=500, ge=1)
    response_preview_words: int = Field(default=200, ge=1)
    response_pdf_max_full_words: int = Field(default=1000, ge=1)
    response_pdf_max_full_pages: int = Field(default=5, ge=1)
    response_pdf_preview_words: int = Field(default=300, ge=1)
    response_pdf_preview_paragraphs: int = Field(default=3, ge=1)

    @property
    def storage_bucket_list(self) -> List[str]:
        return [item.strip() for item in self.storage_buckets.split(",") if item.strip()]

    @property
    def textract_configured(self) -> bool:
        return bool(self.textract_enabled and self.aws_access_key_id and self.aws_secret_access_key)


settings = Settings()
