from app.paywall.posts.service import PostService

__all__ = ["PostService"]
