import builtins
import sqlite3
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from gazeta.core.errors import QueueError, StoreError
from gazeta.domain.entities import Author, Category, Post, RevalidationTask, as_utc

# Columns update_by_id may touch
UPDATABLE_POST_FIELDS = ("title", "slug", "slug_lock", "status", "publish_at")


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def dt_to_str(value: datetime | None) -> str | None:
    """Fixed-width UTC ISO strings so SQL string comparison orders correctly."""
    if value is None:
        return None
    return as_utc(value).isoformat(timespec="microseconds")


def parse_dt(s: str | None) -> datetime | None:
    return datetime.fromisoformat(s) if s else None


class _SQLiteRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn


class SQLitePostRepo(_SQLiteRepo):
    def save(self, post: Post) -> Post:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO posts (
                    id, title, slug, slug_lock, status, publish_at,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title=excluded.title,
                    slug=excluded.slug,
                    slug_lock=excluded.slug_lock,
                    status=excluded.status,
                    publish_at=excluded.publish_at,
                    updated_at=excluded.updated_at
            """,
                (
                    str(post.id),
                    post.title,
                    post.slug,
                    int(post.slug_lock),
                    post.status,
                    dt_to_str(post.publish_at),
                    dt_to_str(post.created_at),
                    dt_to_str(post.updated_at),
                ),
            )

            # Replace relations wholesale; list order is the position
            conn.execute("DELETE FROM post_categories WHERE post_id = ?", (str(post.id),))
            conn.executemany(
                "INSERT INTO post_categories (post_id, category_id, position) VALUES (?, ?, ?)",
                [(str(post.id), str(c), i) for i, c in enumerate(dict.fromkeys(post.categories))],
            )
            conn.execute("DELETE FROM post_authors WHERE post_id = ?", (str(post.id),))
            conn.executemany(
                "INSERT INTO post_authors (post_id, author_id, position) VALUES (?, ?, ?)",
                [(str(post.id), str(a), i) for i, a in enumerate(dict.fromkeys(post.authors))],
            )

            conn.commit()
            return post
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(f"Failed to save post ({e})", post.id) from e
        finally:
            conn.close()

    def _map_row(self, conn: sqlite3.Connection, row: dict[str, Any]) -> Post:
        category_rows = conn.execute(
            "SELECT category_id FROM post_categories WHERE post_id = ? ORDER BY position ASC",
            (row["id"],),
        ).fetchall()
        author_rows = conn.execute(
            "SELECT author_id FROM post_authors WHERE post_id = ? ORDER BY position ASC",
            (row["id"],),
        ).fetchall()

        return Post(
            id=UUID(row["id"]),
            title=row["title"],
            slug=row["slug"],
            slug_lock=bool(row["slug_lock"]),
            status=row["status"],
            publish_at=parse_dt(row["publish_at"]),
            categories=[UUID(r["category_id"]) for r in category_rows],
            authors=[UUID(r["author_id"]) for r in author_rows],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def get_by_id(self, post_id: UUID) -> Post | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM posts WHERE id = ?", (str(post_id),)).fetchone()
            if not row:
                return None
            return self._map_row(conn, row)
        finally:
            conn.close()

    def get_by_slug(self, slug: str) -> Post | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM posts WHERE slug = ? ORDER BY created_at ASC LIMIT 1", (slug,)
            ).fetchone()
            if not row:
                return None
            return self._map_row(conn, row)
        finally:
            conn.close()

    def find(
        self,
        *,
        status: str | None = None,
        publish_after: datetime | None = None,
        publish_until: datetime | None = None,
        limit: int = 20,
    ) -> builtins.list[Post]:
        query = "SELECT * FROM posts WHERE 1=1"
        params: list[Any] = []

        if status:
            query += " AND status = ?"
            params.append(status)
        if publish_after is not None:
            query += " AND publish_at > ?"
            params.append(dt_to_str(publish_after))
        if publish_until is not None:
            query += " AND publish_at <= ?"
            params.append(dt_to_str(publish_until))

        query += " ORDER BY publish_at ASC LIMIT ?"
        params.append(limit)

        conn = self._get_conn()
        try:
            rows = conn.execute(query, params).fetchall()
            return [self._map_row(conn, r) for r in rows]
        finally:
            conn.close()

    def update_by_id(self, post_id: UUID, data: dict[str, Any]) -> Post:
        unknown = set(data) - set(UPDATABLE_POST_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        values: dict[str, Any] = dict(data)
        if "publish_at" in values:
            values["publish_at"] = dt_to_str(values["publish_at"])
        if "slug_lock" in values:
            values["slug_lock"] = int(values["slug_lock"])
        values["updated_at"] = dt_to_str(datetime.now(UTC))

        assignments = ", ".join(f"{column} = ?" for column in values)

        conn = self._get_conn()
        try:
            cursor = conn.execute(
                f"UPDATE posts SET {assignments} WHERE id = ?",
                (*values.values(), str(post_id)),
            )
            conn.commit()
            if cursor.rowcount == 0:
                raise StoreError("Post not found", post_id)
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(f"Failed to update post ({e})", post_id) from e
        finally:
            conn.close()

        updated = self.get_by_id(post_id)
        if updated is None:
            raise StoreError("Post not found", post_id)
        return updated

    def search_titles(self, variants: builtins.list[str], limit: int = 20) -> builtins.list[Post]:
        """
        Published posts whose title contains a variant.

        Matching happens in Python: SQLite's LIKE folds case for ASCII only,
        so "Școala" would not match the variant "școala".
        """
        needles = [v.lower() for v in variants if v]
        if not needles:
            return []

        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM posts WHERE status = 'published' ORDER BY publish_at DESC"
            ).fetchall()
            matched: list[Post] = []
            for row in rows:
                title = row["title"].lower()
                if any(n in title for n in needles):
                    matched.append(self._map_row(conn, row))
                    if len(matched) >= limit:
                        break
            return matched
        finally:
            conn.close()

    def delete(self, post_id: UUID) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM post_categories WHERE post_id = ?", (str(post_id),))
            conn.execute("DELETE FROM post_authors WHERE post_id = ?", (str(post_id),))
            conn.execute("DELETE FROM posts WHERE id = ?", (str(post_id),))
            conn.commit()
        finally:
            conn.close()


class SQLiteCategoryRepo(_SQLiteRepo):
    def save(self, category: Category) -> Category:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO categories (id, title, slug) VALUES (?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title=excluded.title,
                    slug=excluded.slug
            """,
                (str(category.id), category.title, category.slug),
            )
            conn.commit()
            return category
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(f"Failed to save category ({e})", category.id) from e
        finally:
            conn.close()

    def get_by_id(self, category_id: UUID) -> Category | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM categories WHERE id = ?", (str(category_id),)
            ).fetchone()
            if not row:
                return None
            return Category(id=UUID(row["id"]), title=row["title"], slug=row["slug"])
        finally:
            conn.close()


class SQLiteAuthorRepo(_SQLiteRepo):
    def save(self, author: Author) -> Author:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO authors (id, name) VALUES (?, ?)
                ON CONFLICT(id) DO UPDATE SET name=excluded.name
            """,
                (str(author.id), author.name),
            )
            conn.commit()
            return author
        finally:
            conn.close()

    def list_by_ids(self, author_ids: builtins.list[UUID]) -> builtins.list[Author]:
        if not author_ids:
            return []
        placeholders = ", ".join("?" for _ in author_ids)
        conn = self._get_conn()
        try:
            rows = conn.execute(
                f"SELECT * FROM authors WHERE id IN ({placeholders})",
                [str(a) for a in author_ids],
            ).fetchall()
            return [Author(id=UUID(r["id"]), name=r["name"]) for r in rows]
        finally:
            conn.close()


class SQLiteTaskQueue(_SQLiteRepo):
    """
    Revalidation task queue backed by the revalidation_tasks table.

    Enqueue never de-duplicates; claim is a single UPDATE ... RETURNING so
    two workers cannot run the same task.
    """

    def _map_row(self, row: dict[str, Any]) -> RevalidationTask:
        return RevalidationTask(
            id=UUID(row["id"]),
            task_slug=row["task_slug"],
            run_at=datetime.fromisoformat(row["run_at"]),
            target_id=UUID(row["target_id"]),
            target_slug=row["target_slug"],
            status=row["status"],
            attempts=row["attempts"],
            error_message=row["error_message"],
            claimed_by=row["claimed_by"],
            created_at=datetime.fromisoformat(row["created_at"]),
            completed_at=parse_dt(row["completed_at"]),
        )

    def save(self, task: RevalidationTask) -> RevalidationTask:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO revalidation_tasks (
                    id, task_slug, run_at, target_id, target_slug, status,
                    attempts, error_message, claimed_by, created_at, completed_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    run_at=excluded.run_at,
                    status=excluded.status,
                    attempts=excluded.attempts,
                    error_message=excluded.error_message,
                    claimed_by=excluded.claimed_by,
                    completed_at=excluded.completed_at
            """,
                (
                    str(task.id),
                    task.task_slug,
                    dt_to_str(task.run_at),
                    str(task.target_id),
                    task.target_slug,
                    task.status,
                    task.attempts,
                    task.error_message,
                    task.claimed_by,
                    dt_to_str(task.created_at),
                    dt_to_str(task.completed_at),
                ),
            )
            conn.commit()
            return task
        finally:
            conn.close()

    def enqueue(self, task: RevalidationTask) -> RevalidationTask:
        try:
            return self.save(task)
        except sqlite3.Error as e:
            raise QueueError(f"Failed to enqueue task {task.id}: {e}") from e

    def get_by_id(self, task_id: UUID) -> RevalidationTask | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM revalidation_tasks WHERE id = ?", (str(task_id),)
            ).fetchone()
            if not row:
                return None
            return self._map_row(row)
        finally:
            conn.close()

    def list_for_target(self, target_id: UUID) -> builtins.list[RevalidationTask]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM revalidation_tasks WHERE target_id = ? ORDER BY run_at ASC",
                (str(target_id),),
            ).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            conn.close()

    def claim_next_due(self, worker_id: str, now_utc: datetime) -> RevalidationTask | None:
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                """
                UPDATE revalidation_tasks
                SET status = 'running', claimed_by = ?
                WHERE id = (
                    SELECT id FROM revalidation_tasks
                    WHERE status = 'queued' AND run_at <= ?
                    ORDER BY run_at ASC
                    LIMIT 1
                )
                AND status = 'queued'
                RETURNING *
            """,
                (worker_id, dt_to_str(now_utc)),
            )

            row = cursor.fetchone()
            conn.commit()

            if not row:
                return None
            return self._map_row(row)
        finally:
            conn.close()
