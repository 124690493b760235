"""
Cas d'usage 'videos'.

Contrôle d'accès côté serveur: l'URL de lecture signée d'une vidéo exclusive n'est émise
que pour un admin ou un abonné actif (active/trialing); sinon la vidéo est renvoyée
verrouillée (locked=True, signedUrl=None, sans url brute).
"""
import logging
import math
from typing import Any, Dict, List, Optional

from printstream.infra import storage
from printstream.utils.security import has_active_subscription, is_admin
from printstream.videos import repository

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10


class VideoNotFound(Exception):
    pass


def _storage_path(url: str) -> str:
    # URL publique complète ou chemin relatif au bucket
    return storage.object_path_from_url(url) if url.startswith("http") else url


def can_watch(video: Dict[str, Any], user: Optional[Dict[str, Any]]) -> bool:
    if not video.get("is_exclusive"):
        return True
    return is_admin(user) or has_active_subscription(user)


# module printstream.videos.service
def list_videos(*, page: int = 1, limit: int = DEFAULT_PAGE_SIZE, tag: Optional[str] = None, exclusive: Optional[bool] = None) -> Dict[str, Any]:
    page = max(int(page or 1), 1)
    limit = max(int(limit or DEFAULT_PAGE_SIZE), 1)
    rows, total = repository.list_videos(page=page, limit=limit, tag=tag, exclusive=exclusive)
    for row in rows:
        # emplacement du média jamais exposé pour une vidéo exclusive
        if row.get("is_exclusive"):
            row.pop("url", None)
    return {
        "videos": rows,
        "total_pages": math.ceil(total / limit),
        "current_page": page,
        "total_videos": total,
    }


def get_video_for(video_id: str, user: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    video = repository.get_video(video_id)
    if not video:
        raise VideoNotFound(video_id)
    if can_watch(video, user):
        video["signedUrl"] = storage.create_signed_url(_storage_path(video.get("url") or ""))
        video["locked"] = False
    else:
        video.pop("url", None)
        video["signedUrl"] = None
        video["locked"] = True
    return video


def create_video(data: Dict[str, Any], uploader_id: str, tags: Optional[List[str]] = None) -> Dict[str, Any]:
    video = repository.insert_video({
        "title": data["title"],
        "description": data.get("description") or "",
        "is_exclusive": bool(data.get("is_exclusive")),
        "url": data["url"],
        "thumbnail_url": data.get("thumbnail_url"),
        "uploaded_by": uploader_id,
    })
    if tags:
        resolved = repository.get_or_create_tags(tags)
        repository.link_tags(video["id"], [t["id"] for t in resolved if t.get("id") is not None])
        video["tags"] = resolved
    return video


def delete_video(video_id: str) -> None:
    """Supprime la ligne puis l'objet de stockage (échec de stockage journalisé seulement)."""
    video = repository.get_video(video_id)
    if not video:
        raise VideoNotFound(video_id)
    repository.delete_video(video_id)
    path = storage.object_path_from_url(video.get("url") or "")
    if path:
        storage.remove_object(path)
