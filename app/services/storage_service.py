"""
Storage Service
Result files and certificate PDFs: Supabase Storage when configured, local disk otherwise
"""

import logging
import os
from pathlib import Path

import httpx
from fastapi import HTTPException, status
from app.config import settings

logger = logging.getLogger(__name__)

LOCAL_PREFIX = "local://"


class StorageService:
    """Supabase Storage / local disk helper"""

    @staticmethod
    def use_supabase() -> bool:
        return bool(settings.SUPABASE_URL and settings.SUPABASE_KEY)

    @staticmethod
    def _object_url(path: str) -> str:
        base = settings.SUPABASE_URL.rstrip("/")
        return f"{base}/storage/v1/object/{settings.STORAGE_BUCKET}/{path}"

    @staticmethod
    def _public_prefix() -> str:
        base = settings.SUPABASE_URL.rstrip("/")
        return f"{base}/storage/v1/object/public/{settings.STORAGE_BUCKET}/"

    @staticmethod
    def _auth_headers() -> dict:
        return {
            "Authorization": f"Bearer {settings.SUPABASE_KEY}",
            "apikey": settings.SUPABASE_KEY,
        }

    @staticmethod
    def _local_path(path: str) -> Path:
        root = Path(settings.UPLOAD_DIR).resolve()
        target = (root / path).resolve()
        if root not in target.parents:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid storage path"
            )
        return target

    @staticmethod
    async def save_bytes(path: str, content: bytes, content_type: str = None) -> str:
        """
        Store a file

        Args:
            path: Relative object path, e.g. 'results/<event_id>/<name>.pdf'
            content: File bytes
            content_type: MIME type

        Returns:
            Location string (public URL or local:// path) to keep in the database
        """
        if StorageService.use_supabase():
            headers = {
                **StorageService._auth_headers(),
                "Content-Type": content_type or "application/octet-stream",
                "x-upsert": "true"
            }
            async with httpx.AsyncClient(timeout=30) as client:
                resp = await client.post(StorageService._object_url(path), headers=headers, content=content)

            if resp.status_code not in (200, 201):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Storage upload failed: {resp.text}"
                )
            return f"{StorageService._public_prefix()}{path}"

        target = StorageService._local_path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        logger.debug("Stored %d bytes at %s", len(content), target)
        return f"{LOCAL_PREFIX}{path}"

    @staticmethod
    async def read_bytes(location: str) -> bytes:
        """Load a stored file back"""
        if location.startswith(LOCAL_PREFIX):
            target = StorageService._local_path(location[len(LOCAL_PREFIX):])
            if not target.exists():
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Stored file not found")
            return target.read_bytes()

        async with httpx.AsyncClient(timeout=30) as client:
            resp = await client.get(location)
        if resp.status_code != 200:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Stored file not found")
        return resp.content

    @staticmethod
    async def delete(location: str) -> None:
        """Remove a stored file; unknown locations are ignored"""
        if location.startswith(LOCAL_PREFIX):
            target = StorageService._local_path(location[len(LOCAL_PREFIX):])
            if target.exists():
                os.remove(target)
            return

        if not StorageService.use_supabase():
            return

        prefix = StorageService._public_prefix()
        if not location.startswith(prefix):
            return

        async with httpx.AsyncClient(timeout=30) as client:
            resp = await client.delete(
                StorageService._object_url(location[len(prefix):]),
                headers=StorageService._auth_headers()
            )

        if resp.status_code not in (200, 204, 404):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Storage delete failed: {resp.text}"
            )


# Create singleton instance
storage_service = StorageService()
