import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from printstream.utils.errors import server_error
from printstream.utils.security import get_optional_user, require_admin
from printstream.videos import repository as videos_repository
from printstream.videos import service as videos_service
from printstream.videos.service import VideoNotFound

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/videos", tags=["Videos API"])


class CreateVideoRequest(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    isExclusive: bool = False
    url: str = Field(min_length=1)
    thumbnailUrl: Optional[str] = None
    tags: Optional[List[str]] = None


# module printstream.videos.views
@router.get("")
def list_videos(
    page: int = Query(1, ge=1),
    limit: int = Query(videos_service.DEFAULT_PAGE_SIZE, ge=1, le=100),
    tag: Optional[str] = None,
    exclusive: Optional[str] = None,
):
    """
    Liste paginée des vidéos (métadonnées seulement, jamais d'URL signée).
    - exclusive: "true" / "false" filtre sur is_exclusive
    - tag: filtre par nom de tag
    """
    flag = {"true": True, "false": False}.get((exclusive or "").lower())
    try:
        result = videos_service.list_videos(page=page, limit=limit, tag=tag, exclusive=flag)
    except Exception as e:
        logger.exception("videos.views.list_videos failed")
        raise server_error(e)
    return {
        "videos": result["videos"],
        "totalPages": result["total_pages"],
        "currentPage": result["current_page"],
        "totalVideos": result["total_videos"],
    }


@router.get("/tags")
def list_tags():
    try:
        return {"tags": videos_repository.list_tags()}
    except Exception as e:
        logger.exception("videos.views.list_tags failed")
        raise server_error(e)


@router.post("", status_code=201)
def create_video(body: CreateVideoRequest, user: Dict[str, Any] = Depends(require_admin)):
    data = {
        "title": body.title.strip(),
        "description": body.description,
        "is_exclusive": body.isExclusive,
        "url": body.url.strip(),
        "thumbnail_url": body.thumbnailUrl,
    }
    try:
        video = videos_service.create_video(data, user["id"], body.tags)
    except Exception as e:
        logger.exception("videos.views.create_video failed")
        raise server_error(e)
    return {"video": video}


@router.get("/{video_id}")
def get_video(video_id: str, user: Optional[Dict[str, Any]] = Depends(get_optional_user)):
    try:
        video = videos_service.get_video_for(video_id, user)
    except VideoNotFound:
        raise HTTPException(status_code=404, detail="Video not found")
    return {"video": video}


@router.delete("/{video_id}", dependencies=[Depends(require_admin)])
def delete_video(video_id: str):
    try:
        videos_service.delete_video(video_id)
    except VideoNotFound:
        raise HTTPException(status_code=404, detail="Video not found")
    except Exception as e:
        logger.exception("videos.views.delete_video failed id=%s", video_id)
        raise server_error(e)
    return {"message": "Video deleted successfully"}
