import logging
from datetime import datetime
from supabase import Client
from app.modules.posts.schemas import PostCreate, PostUpdate, PostResponse
from app.modules.activity.service import ActivityService
from app.core.content_status import first_published_at, utcnow
from app.core.errors import handle_supabase_error, not_found
from app.core.pagination import PaginatedResponse, build_page, page_range, search_filter, sort_params
from app.core.slug import generate_slug, unique_slug
from typing import List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)

POST_SORT_COLUMNS = ["created_at", "updated_at", "title", "publish_at"]


class PostService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.activity = ActivityService(supabase)

    def _unique_slug(self, source: str, exclude_id: Optional[str] = None) -> str:
        base = generate_slug(source)
        if not base:
            raise HTTPException(status_code=422, detail="Could not derive a slug from the title")
        query = self.supabase.table("posts")\
            .select("id, slug")\
            .ilike("slug", f"{base}%")
        if exclude_id:
            query = query.neq("id", exclude_id)
        result = query.execute()
        return unique_slug(base, [r["slug"] for r in result.data or []])

    def _get_row(self, post_id: str) -> dict:
        result = self.supabase.table("posts")\
            .select("*")\
            .eq("id", post_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise not_found("Post")
        return result.data[0]

    def list_posts(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        featured: Optional[bool] = None,
        category_id: Optional[str] = None,
        tags: Optional[List[str]] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        page: int = 1,
        per_page: int = 10,
    ) -> PaginatedResponse:
        try:
            query = self.supabase.table("posts").select("*", count="exact")
            if search:
                query = query.or_(search_filter(["title", "summary"], search))
            if status in ("published", "draft"):
                query = query.eq("is_published", status == "published")
            if featured is not None:
                query = query.eq("is_featured", featured)
            if category_id:
                query = query.eq("category_id", category_id)
            if tags:
                query = query.contains("tags", tags)

            column, desc = sort_params(sort_by, sort_order, POST_SORT_COLUMNS)
            start, end = page_range(page, per_page)
            result = query.order(column, desc=desc).range(start, end).execute()
            posts = [PostResponse(**row) for row in result.data or []]
            return build_page(posts, result.count, page, per_page)
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "list posts")

    def get_post(self, post_id: str) -> PostResponse:
        try:
            return PostResponse(**self._get_row(post_id))
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "get post")

    def get_post_by_slug(self, slug: str) -> PostResponse:
        try:
            result = self.supabase.table("posts")\
                .select("*")\
                .eq("slug", slug)\
                .limit(1)\
                .execute()
            if not result.data:
                raise not_found("Post")
            return PostResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "get post")

    def create_post(self, post_data: PostCreate, actor_id: Optional[str] = None, now: Optional[datetime] = None) -> PostResponse:
        now = now or utcnow()
        try:
            data = post_data.model_dump(mode="json")
            data["slug"] = self._unique_slug(post_data.slug or post_data.title)
            data["publish_at"] = first_published_at(None, post_data.is_published, now)
            data["created_by"] = actor_id

            result = self.supabase.table("posts").insert(data).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create post")

            post = PostResponse(**result.data[0])
            self.activity.log_activity(
                actor_id, "create", "posts",
                resource_type="post", resource_id=post.id, resource_name=post.title,
                new_values={"title": post.title, "is_published": post.is_published}
            )
            return post
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "create post")

    def update_post(
        self, post_id: str, post_data: PostUpdate, actor_id: Optional[str] = None, now: Optional[datetime] = None
    ) -> PostResponse:
        now = now or utcnow()
        try:
            current = self._get_row(post_id)
            update_data = post_data.model_dump(mode="json", exclude_unset=True)
            if "slug" in update_data and update_data["slug"] != current.get("slug"):
                update_data["slug"] = self._unique_slug(update_data["slug"] or current["title"], exclude_id=post_id)
            publishing = update_data.get("is_published", current.get("is_published", False))
            update_data["publish_at"] = first_published_at(current.get("publish_at"), publishing, now)
            update_data["updated_at"] = now.isoformat()

            result = self.supabase.table("posts")\
                .update(update_data)\
                .eq("id", post_id)\
                .execute()
            if not result.data:
                raise not_found("Post")

            post = PostResponse(**result.data[0])
            self.activity.log_activity(
                actor_id, "update", "posts",
                resource_type="post", resource_id=post_id, resource_name=post.title,
                old_values={"title": current.get("title"), "is_published": current.get("is_published")},
                new_values={"title": post.title, "is_published": post.is_published}
            )
            return post
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "update post")

    def delete_post(self, post_id: str, actor_id: Optional[str] = None) -> bool:
        try:
            current = self._get_row(post_id)
            result = self.supabase.table("posts")\
                .delete()\
                .eq("id", post_id)\
                .execute()
            self.activity.log_activity(
                actor_id, "delete", "posts",
                resource_type="post", resource_id=post_id, resource_name=current.get("title")
            )
            return bool(result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "delete post")

    def toggle_publish(self, post_id: str, actor_id: Optional[str] = None, now: Optional[datetime] = None) -> PostResponse:
        """Flip is_published; publish_at is only stamped the first time a post goes live"""
        now = now or utcnow()
        try:
            current = self._get_row(post_id)
            publishing = not current.get("is_published", False)
            result = self.supabase.table("posts")\
                .update({
                    "is_published": publishing,
                    "publish_at": first_published_at(current.get("publish_at"), publishing, now),
                    "updated_at": now.isoformat(),
                })\
                .eq("id", post_id)\
                .execute()
            if not result.data:
                raise not_found("Post")
            self.activity.log_activity(
                actor_id, "publish" if publishing else "unpublish", "posts",
                resource_type="post", resource_id=post_id, resource_name=current.get("title")
            )
            return PostResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "toggle post publish")

    def toggle_featured(self, post_id: str, actor_id: Optional[str] = None) -> PostResponse:
        try:
            current = self._get_row(post_id)
            featured = not current.get("is_featured", False)
            result = self.supabase.table("posts")\
                .update({"is_featured": featured, "updated_at": utcnow().isoformat()})\
                .eq("id", post_id)\
                .execute()
            if not result.data:
                raise not_found("Post")
            self.activity.log_activity(
                actor_id, "feature" if featured else "unfeature", "posts",
                resource_type="post", resource_id=post_id, resource_name=current.get("title")
            )
            return PostResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise handle_supabase_error(e, "toggle post featured")

    def list_tags(self) -> List[str]:
        try:
            result = self.supabase.table("posts").select("tags").execute()
            return sorted({tag for row in result.data or [] for tag in row.get("tags") or []})
        except Exception as e:
            raise handle_supabase_error(e, "list post tags")
