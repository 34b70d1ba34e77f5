from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from app.core.config import Settings, get_settings
from app.domains.files.services import FileAccessError, SecureFileResolver, split_path

router = APIRouter(prefix="/api/serve-file", tags=["files"])


@router.get("/{file_path:path}")
async def serve_file(
    file_path: str,
    settings: Settings = Depends(get_settings)
):
    """Отдача файла из каталога загрузок с проверкой пути"""
    resolver = SecureFileResolver(settings.files_root, max_bytes=settings.max_served_file_bytes)

    try:
        served = resolver.resolve(split_path(file_path))
    except FileAccessError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    headers = dict(served.headers)
    content_type = headers.pop("Content-Type")
    return FileResponse(served.path, media_type=content_type, headers=headers)
