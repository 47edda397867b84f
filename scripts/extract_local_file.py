from __future__ import annotations

import argparse
import asyncio
import json
import mimetypes
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.core.config import settings
from app.core.logging import setup_logging
from app.models.schemas import Resource
from app.services.document_processing_service import DocumentProcessingService


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the extraction pipeline on a local file.")
    parser.add_argument("path", type=Path)
    parser.add_argument("--topic", default=None)
    parser.add_argument("--mime", default=None, help="override the guessed MIME type")
    parser.add_argument("--no-worker", action="store_true", help="render PDFs in the calling thread")
    return parser.parse_args()


async def main() -> None:
    args = _parse_args()
    setup_logging()
    if args.no_worker:
        settings.pdf_worker_enabled = False

    content = args.path.read_bytes()
    mime = args.mime or mimetypes.guess_type(args.path.name)[0] or ""
    resource = Resource(
        id=f"local-{args.path.stem}",
        topic=args.topic,
        resource_type=mime,
        resource_path=args.path.name,
    )

    service = DocumentProcessingService()
    try:
        result = await service.process_content(resource, content)
        print(json.dumps(result.model_dump(by_alias=True), ensure_ascii=False, indent=2))
    finally:
        await service.close()


if __name__ == "__main__":
    asyncio.run(main())
