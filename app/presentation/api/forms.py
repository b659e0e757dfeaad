from typing import Dict, List, Optional, Tuple

from fastapi import Request
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException

from ...domain.errors import UploadRejected


async def read_multipart(
    request: Request,
    file_field: str,
) -> Tuple[Dict[str, str], Optional[UploadFile]]:
    """
    Split a multipart body into text fields and at most one file.

    The caller must read the returned file before the request finishes.
    Any file part under another name, or a second file under ``file_field``,
    is rejected before anything is stored.
    """
    try:
        form = await request.form(max_files=2)
    except HTTPException as exc:
        # Starlette reports parser limits (too many files or fields) this way.
        raise UploadRejected(str(exc.detail)) from exc
    fields: Dict[str, str] = {}
    files: List[UploadFile] = []
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if key != file_field:
                raise UploadRejected(f"Unexpected file field: {key}")
            if value.filename:
                files.append(value)
        else:
            fields[key] = value
    if len(files) > 1:
        raise UploadRejected("Only one profile image may be uploaded.")
    return fields, files[0] if files else None
