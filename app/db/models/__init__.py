from app.db.models.ledger_audit_runs import LedgerAuditRun
from app.db.models.posts import Post
from app.db.models.profiles import Profile
from app.db.models.subscriptions import Subscription
from app.db.models.transactions import Transaction
from app.db.models.unlocks import Unlock
from app.db.models.wallet_accounts import WalletAccount

__all__ = [
    "LedgerAuditRun",
    "Post",
    "Profile",
    "Subscription",
    "Transaction",
    "Unlock",
    "WalletAccount",
]
