from app.db.repo.ledger_audit_runs_repo import LedgerAuditRunsRepo
from app.db.repo.posts_repo import PostsRepo
from app.db.repo.profiles_repo import ProfilesRepo
from app.db.repo.subscriptions_repo import SubscriptionsRepo
from app.db.repo.transactions_repo import TransactionsRepo
from app.db.repo.unlocks_repo import UnlocksRepo
from app.db.repo.wallet_repo import WalletRepo

__all__ = [
    "LedgerAuditRunsRepo",
    "PostsRepo",
    "ProfilesRepo",
    "SubscriptionsRepo",
    "TransactionsRepo",
    "UnlocksRepo",
    "WalletRepo",
]
