"""
Accès aux données pour la feature 'videos' (tables videos, tags, video_tags).
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

import printstream.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

VIDEO_COLUMNS = "*, profiles!videos_uploaded_by_fkey(id, first_name, last_name), tags(id, name)"
# Jointure interne pour filtrer les vidéos par nom de tag
VIDEO_COLUMNS_BY_TAG = "*, profiles!videos_uploaded_by_fkey(id, first_name, last_name), tags!inner(id, name)"


def _first(data: Any) -> Optional[dict]:
    if isinstance(data, list):
        return data[0] if data else None
    if isinstance(data, dict):
        return data
    return None


# module printstream.videos.repository
def list_videos(*, page: int, limit: int, tag: Optional[str] = None, exclusive: Optional[bool] = None) -> Tuple[List[dict], int]:
    offset = (page - 1) * limit
    query = (
        supabase_client.get_service_supabase()
        .table("videos")
        .select(VIDEO_COLUMNS_BY_TAG if tag else VIDEO_COLUMNS, count="exact")
    )
    if exclusive is not None:
        query = query.eq("is_exclusive", exclusive)
    if tag:
        query = query.eq("tags.name", tag)
    res = query.order("created_at", desc=True).range(offset, offset + limit - 1).execute()
    rows = res.data or []
    count = getattr(res, "count", None)
    return rows, int(count) if isinstance(count, int) else len(rows)


def get_video(video_id: str) -> Optional[dict]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("videos")
            .select(VIDEO_COLUMNS)
            .eq("id", video_id)
            .limit(1)
            .execute()
        )
        return _first(res.data)
    except Exception:
        logger.exception("videos.repository.get_video failed id=%s", video_id)
        return None


def insert_video(data: Dict[str, Any]) -> dict:
    res = supabase_client.get_service_supabase().table("videos").insert(data).execute()
    row = _first(res.data)
    if not row:
        raise RuntimeError("Video insert returned no row")
    return row


def delete_video(video_id: str) -> None:
    supabase_client.get_service_supabase().table("videos").delete().eq("id", video_id).execute()


def list_tags() -> List[dict]:
    res = (
        supabase_client.get_service_supabase()
        .table("tags")
        .select("id, name")
        .order("name", desc=False)
        .execute()
    )
    return res.data or []


def get_or_create_tags(names: List[str]) -> List[dict]:
    """Résout les tags par nom; les tags absents sont créés."""
    names = sorted({n.strip() for n in names if n and n.strip()})
    if not names:
        return []
    client = supabase_client.get_service_supabase()
    res = client.table("tags").select("id, name").in_("name", names).execute()
    existing = res.data or []
    known = {t.get("name") for t in existing}
    missing = [{"name": n} for n in names if n not in known]
    if missing:
        created = client.table("tags").insert(missing).execute()
        existing = existing + (created.data or [])
    return existing


def link_tags(video_id: Any, tag_ids: List[Any]) -> None:
    if not tag_ids:
        return
    rows = [{"video_id": video_id, "tag_id": tid} for tid in tag_ids]
    supabase_client.get_service_supabase().table("video_tags").insert(rows).execute()
