"""
Blog post repository.
"""
from typing import List, Optional

from sqlalchemy import desc

from picks_api.models import BlogPost
from picks_api.repositories.base import BaseRepository


class BlogPostRepository(BaseRepository[BlogPost]):
    """Repository for blog posts."""

    def __init__(self, db):
        super().__init__(BlogPost, db)

    def list_posts(self, published_only: bool = True, limit: int = 20) -> List[BlogPost]:
        """Newest first; drafts included only when ``published_only`` is False."""
        query = self.query()
        if published_only:
            query = query.filter(BlogPost.published.is_(True))
        return query.order_by(desc(BlogPost.created_at), desc(BlogPost.id)).limit(limit).all()

    def find_by_slug(self, slug: str) -> Optional[BlogPost]:
        return self.where_first(BlogPost.slug == slug)

    def slug_exists(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        criterion = [BlogPost.slug == slug]
        if exclude_id is not None:
            criterion.append(BlogPost.id != exclude_id)
        return self.exists_where(*criterion)
