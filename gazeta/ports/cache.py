from typing import Literal, Protocol

PathScope = Literal["page", "layout"]


class CacheRevalidatorPort(Protocol):
    """Invalidates cached renderings held by the frontend."""

    def revalidate_path(self, path: str, scope: PathScope | None = None) -> None:
        ...

    def revalidate_tag(self, tag: str) -> None:
        ...
