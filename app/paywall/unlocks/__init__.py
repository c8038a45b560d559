from app.paywall.unlocks.service import UnlockService
from app.paywall.unlocks.types import UnlockResult, UnlockStatus

__all__ = ["UnlockResult", "UnlockService", "UnlockStatus"]
