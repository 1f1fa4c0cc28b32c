"""
Blog Subsystem

Posts stored as ``<year>/<slug>/meta.json`` folders with their images.
"""

from .factory import create_blog_module
from .models import BlogPost, BlogPostCreateRequest, BlogPostUpdateRequest
from .services import BlogService

__all__ = ["create_blog_module", "BlogPost", "BlogPostCreateRequest", "BlogPostUpdateRequest", "BlogService"]
