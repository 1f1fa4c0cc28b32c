"""
Blog service: one folder per post under ``<blog-uploads>/<year>/<slug>/``.
"""

import logging
import shutil
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

from app.request_utils import upload_size
from portfolio_store.errors import InvalidInput, NotFound, StorageError
from portfolio_store.filenames import slugify, unique_filename
from portfolio_store.json_files import list_subdirs, natural_sort_key, read_json_object, write_json

from .models import BlogPost, BlogPostCreateRequest, BlogPostUpdateRequest

logger = logging.getLogger(__name__)

META_FILE_NAME = "meta.json"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp")


def _new_id() -> str:
    return uuid.uuid4().hex[:13]


def _now() -> str:
    return datetime.now().strftime(TIMESTAMP_FORMAT)


class BlogService:
    """CRUD over blog post folders, keeping ``blog-index.json`` in sync."""

    def __init__(
        self,
        blog_dir: Path,
        index_file: Path,
        max_image_mb: int = 10,
        allowed_extensions=DEFAULT_IMAGE_EXTENSIONS
    ):
        self.blog_dir = Path(blog_dir)
        self.index_file = Path(index_file)
        self.max_image_bytes = max_image_mb * 1024 * 1024
        self.allowed_extensions = {ext.lower() for ext in allowed_extensions}

    def _is_image(self, name: str) -> bool:
        return Path(name).suffix.lower().lstrip(".") in self.allowed_extensions

    def _iter_posts(self) -> Iterator[Tuple[Path, Dict[str, Any]]]:
        for year_dir in list_subdirs(self.blog_dir, numeric_only=True):
            for post_dir in list_subdirs(year_dir):
                meta_file = post_dir / META_FILE_NAME
                if meta_file.is_file():
                    yield post_dir, read_json_object(meta_file)

    def _find_post(self, post_id: str) -> Tuple[Path, Dict[str, Any]]:
        for post_dir, meta in self._iter_posts():
            if meta.get("id") == post_id:
                return post_dir, meta
        raise NotFound("Blog post not found")

    def _save_meta(self, post_dir: Path, meta: Dict[str, Any]) -> None:
        try:
            write_json(post_dir / META_FILE_NAME, meta)
        except OSError as exc:
            logger.error(f"Failed to write meta.json for post {post_dir.name}: {exc}")
            raise StorageError("Failed to write meta.json") from exc

    @staticmethod
    def _validate_year(year: Optional[str]) -> str:
        year = (year or "").strip() or str(datetime.now().year)
        if not year.isdigit():
            raise InvalidInput("Year must be numeric")
        return year

    def list_posts(self) -> List[BlogPost]:
        """List all posts, newest first, and rewrite the blog index.

        Posts without an id are skipped; a repeated id keeps the first post found.
        """
        posts = []
        seen_ids = set()
        for post_dir, meta in self._iter_posts():
            if not meta.get("id"):
                logger.warning(f"Skipping blog post without id: {post_dir.parent.name}/{post_dir.name}")
                continue
            if meta["id"] in seen_ids:
                continue
            seen_ids.add(meta["id"])

            year, slug = post_dir.parent.name, post_dir.name
            images = sorted(
                (p.name for p in post_dir.iterdir() if p.is_file() and self._is_image(p.name)),
                key=natural_sort_key
            )
            posts.append(BlogPost.from_meta(year, slug, meta, [f"{year}/{slug}/{name}" for name in images]))

        posts.sort(key=lambda p: p.created, reverse=True)
        self._write_index(posts)
        return posts

    def _write_index(self, posts: List[BlogPost]) -> None:
        try:
            self.index_file.parent.mkdir(parents=True, exist_ok=True)
            write_json(self.index_file, [p.to_dict() for p in posts])
        except OSError as exc:
            logger.error(f"Failed to write blog index: {exc}")

    def create_post(self, request: BlogPostCreateRequest) -> BlogPost:
        """Create a post folder with its meta.json."""
        if not request.title:
            raise InvalidInput("Title is required")

        year = self._validate_year(request.year)
        year_dir = self.blog_dir / year
        slug = unique_filename(year_dir, slugify(request.title), template="{stem}-{n}{suffix}")
        post_dir = year_dir / slug

        try:
            post_dir.mkdir(parents=True)
        except OSError as exc:
            logger.error(f"Failed to create blog post directory {year}/{slug}: {exc}")
            raise StorageError("Failed to create blog post directory") from exc

        timestamp = _now()
        meta = {
            "id": _new_id(),
            "title": request.title,
            "slug": slug,
            "year": year,
            "category": request.category,
            "excerpt": request.excerpt,
            "content": request.content,
            "featured_image": request.featured_image,
            "author": request.author,
            "published": request.published,
            "tags": request.tags,
            "created": timestamp,
            "modified": timestamp
        }
        self._save_meta(post_dir, meta)
        logger.info(f"Created blog post {meta['id']} at {year}/{slug}")
        self.list_posts()
        return BlogPost.from_meta(year, slug, meta)

    def update_post(self, request: BlogPostUpdateRequest) -> BlogPost:
        """Apply the provided fields to a post.

        A changed year moves the folder into the new year, renaming the slug
        with a ``-N`` suffix if it is taken there.
        """
        post_dir, meta = self._find_post(request.id)
        changes = request.changes()

        new_year = changes.pop("year", None)
        meta.update(changes)
        meta["modified"] = _now()

        if new_year is not None and new_year != str(meta.get("year", post_dir.parent.name)):
            new_year = self._validate_year(new_year)
            target_year_dir = self.blog_dir / new_year
            slug = unique_filename(target_year_dir, post_dir.name, template="{stem}-{n}{suffix}")
            try:
                target_year_dir.mkdir(parents=True, exist_ok=True)
                post_dir = Path(shutil.move(str(post_dir), str(target_year_dir / slug)))
            except OSError as exc:
                logger.error(f"Failed to move blog post {request.id} to {new_year}: {exc}")
                raise StorageError("Failed to move blog post") from exc
            logger.info(f"Moved blog post {request.id} to {new_year}/{slug}")

        meta["year"] = post_dir.parent.name
        meta["slug"] = post_dir.name
        self._save_meta(post_dir, meta)
        self.list_posts()
        return BlogPost.from_meta(post_dir.parent.name, post_dir.name, meta)

    def delete_post(self, post_id: Optional[str]) -> None:
        """Remove a post folder with all its images."""
        if not post_id:
            raise InvalidInput("Blog post ID is required")
        post_dir, _ = self._find_post(post_id)
        try:
            shutil.rmtree(post_dir)
        except OSError as exc:
            logger.error(f"Failed to delete blog post {post_id}: {exc}")
            raise StorageError("Failed to delete blog post") from exc
        logger.info(f"Deleted blog post {post_id}")
        self.list_posts()

    def upload_image(self, blog_id: Optional[str], file_storage) -> Dict[str, str]:
        """Store an image inside a post folder under a random name.

        Returns:
            Dictionary with ``filename`` and the ``year/slug/filename`` path
        """
        if not blog_id:
            raise InvalidInput("Blog post ID is required")
        if file_storage is None or not file_storage.filename:
            raise InvalidInput("No image file provided")
        if not self._is_image(file_storage.filename):
            raise InvalidInput("Invalid file type")
        if upload_size(file_storage) > self.max_image_bytes:
            raise InvalidInput("File too large")

        post_dir, _ = self._find_post(blog_id)
        extension = Path(file_storage.filename).suffix.lower()
        filename = f"{uuid.uuid4().hex[:13]}{extension}"
        try:
            file_storage.save(str(post_dir / filename))
        except OSError as exc:
            logger.error(f"Failed to store blog image for {blog_id}: {exc}")
            raise StorageError("Failed to upload file") from exc

        relative_path = f"{post_dir.parent.name}/{post_dir.name}/{filename}"
        logger.info(f"Uploaded blog image {relative_path}")
        return {"filename": filename, "path": relative_path, "url": relative_path}
