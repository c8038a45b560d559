from __future__ import annotations

from uuid import UUID


class DummySessionBegin:
    async def __aenter__(self) -> object:
        return object()

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False


class DummySessionLocal:
    def begin(self) -> DummySessionBegin:
        return DummySessionBegin()


def auth_headers(user_id: UUID, **extra: str) -> dict[str, str]:
    return {"X-User-Id": str(user_id), **extra}
