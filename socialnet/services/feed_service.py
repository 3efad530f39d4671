"""Feed composition: followed, discovery and self buckets blended and shuffled."""

import logging
import math
import random
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from socialnet.core.exceptions import NotFoundError, ValidationError
from socialnet.crud import crud_post, crud_user
from socialnet.models.post import Post

logger = logging.getLogger(__name__)


class FeedService:
    """
    Build a user's home feed.

    Each call resamples the discovery bucket and reshuffles the union, so two
    identical requests usually return different orders. Pass a seeded
    ``random.Random`` to get reproducible feeds.
    """

    FOLLOWED_SHARE = 0.6
    DISCOVERY_SHARE = 0.35
    SELF_SHARE = 0.05

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def get_feed(self, db: Session, *, user_id: int, page: int = 1, limit: int = 20) -> List[Post]:
        """
        Blend posts from followed authors, random other authors and the user.

        Args:
            user_id: Requesting user.
            page: 1-based page number.
            limit: Page size.

        Returns:
            At most ``limit`` posts, no id repeated. An offset past the end
            yields an empty list.

        Raises:
            NotFoundError: If the requesting user does not exist.
            ValidationError: If page or limit is not positive.
        """
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive")

        user = crud_user.get(db, user_id)
        if not user:
            raise NotFoundError("User not found")

        following = crud_user.get_following_ids(db, user_id)
        circle = following | {user_id}

        followed = crud_post.get_recent_by_authors(
            db, author_ids=circle, limit=math.ceil(self.FOLLOWED_SHARE * limit)
        )
        discovery = self._sample_discovery(
            db,
            user_id=user_id,
            circle=circle,
            size=math.ceil(self.DISCOVERY_SHARE * limit),
        )
        own = crud_post.get_recent_by_authors(
            db, author_ids=[user_id], limit=math.ceil(self.SELF_SHARE * limit)
        )

        # First occurrence wins
        merged = {}
        for post in followed + discovery + own:
            merged.setdefault(post.id, post)
        posts = list(merged.values())
        self.rng.shuffle(posts)

        skip = (page - 1) * limit
        page_posts = posts[skip:skip + limit]
        logger.debug(
            f"Feed for user_id={user_id}: followed={len(followed)}, discovery={len(discovery)}, "
            f"self={len(own)}, unique={len(posts)}, returned={len(page_posts)}"
        )
        return page_posts

    def _sample_discovery(self, db: Session, *, user_id: int, circle: set, size: int) -> List[Post]:
        # Authors in a block relation with the requester never surface here
        excluded = circle | crud_user.get_blocked_ids(db, user_id)
        candidate_ids = crud_post.get_ids_not_by_authors(db, author_ids=excluded)
        if not candidate_ids or size <= 0:
            return []

        picked = self.rng.sample(candidate_ids, min(size, len(candidate_ids)))
        by_id = {post.id: post for post in crud_post.get_many(db, picked)}
        return [by_id[post_id] for post_id in picked if post_id in by_id]

    def get_following_feed(
        self, db: Session, *, user_id: int, skip: int = 0, limit: int = 20
    ) -> Tuple[List[Post], int]:
        """Chronological feed of followed authors and the user, with total count."""
        if not crud_user.get(db, user_id):
            raise NotFoundError("User not found")
        circle = crud_user.get_following_ids(db, user_id) | {user_id}
        return crud_post.get_by_authors(db, author_ids=circle, skip=skip, limit=limit)


# Singleton instance
feed_service = FeedService()
