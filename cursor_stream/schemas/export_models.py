from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from cursor_stream.config.settings import CURSOR_BATCH_SIZE, EXPORT_DIR


class ExportRequest(BaseModel):
    """Parameters of a single collection export."""
    collection: str = Field(min_length=1)
    query: Dict[str, Any] = Field(default_factory=dict)
    projection: Optional[Dict[str, int]] = None
    batch_size: int = Field(default=CURSOR_BATCH_SIZE, gt=0)
    output_path: Optional[Path] = None

    @field_validator("collection")
    @classmethod
    def _no_dollar_prefix(cls, value: str) -> str:
        if value.startswith("$") or "\x00" in value:
            raise ValueError(f"invalid collection name: {value!r}")
        return value

    def resolved_output_path(self) -> Path:
        """Explicit path, or `<EXPORT_DIR>/<collection>.jsonl`."""
        return self.output_path or EXPORT_DIR / f"{self.collection}.jsonl"


class ExportResult(BaseModel):
    collection: str
    output_path: Path
    documents_written: int
    cancelled: bool = False
