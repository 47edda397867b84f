from __future__ import annotations

import os
import sys
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError


def main() -> None:
    region = os.getenv("AWS_REGION", "eu-west-2")
    sample = os.getenv("TEXTRACT_SAMPLE_PDF", "")

    session = boto3.Session(
        region_name=region,
        aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID") or None,
        aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY") or None,
    )
    creds = session.get_credentials()
    if creds is None:
        print("NO_AWS_CREDENTIALS")
        return

    print(f"AWS_REGION={region}")
    print("AWS_CREDENTIALS=OK")

    if not sample:
        print("SKIP_DETECT (set TEXTRACT_SAMPLE_PDF=/path/to/file.pdf to call Textract)")
        return

    data = Path(sample).read_bytes()
    client = session.client("textract")
    try:
        res = client.detect_document_text(Document={"Bytes": data})
        lines = [b for b in res.get("Blocks", []) if b.get("BlockType") == "LINE"]
        pages = {b.get("Page", 1) for b in lines}
        print(f"DETECT_OK lines={len(lines)} pages={len(pages)}")
    except (BotoCoreError, ClientError) as exc:
        print(f"DETECT_FAILED {type(exc).__name__}: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
