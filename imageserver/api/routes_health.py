import os

from fastapi import APIRouter, Depends, status

from ..core.upload_store import UploadStore, get_upload_store

router = APIRouter(tags=["health"])


def check_storage(store: UploadStore) -> dict:
    """Report whether the uploads directory is usable."""
    root = store.root
    exists = root.is_dir()
    return {
        "path": str(root),
        "exists": exists,
        "writable": exists and os.access(root, os.W_OK),
    }


@router.get("/health", status_code=status.HTTP_200_OK)
async def health(store: UploadStore = Depends(get_upload_store)) -> dict:
    storage = check_storage(store)
    return {
        "status": "ok" if storage["writable"] else "degraded",
        "storage": storage,
    }
