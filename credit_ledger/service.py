import threading
from contextlib import contextmanager
from typing import Iterable, Iterator, NamedTuple, Optional
from uuid import uuid4

from core.clock import Clock, utc_now
from core.errors import InsufficientBalanceError, UnknownActionError, ValidationError
from core.storage import InMemoryRepository, Repository
from core.users import UserDirectory

from .models import (
    CREDIT_ACTIONS,
    REDEMPTION_REASON,
    CreditAction,
    CreditSummary,
    CreditTransaction,
)

SIGNUP_CREDITS = 100


class Posting(NamedTuple):
    user_id: str
    amount: int
    reason: str
    related_id: Optional[str] = None


def _require_int(amount) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationError(f"Credit amount must be an integer, got {amount!r}")


class CreditLedger:
    """Per-user credit balances backed by an append-only transaction log.

    The balance cached on the user record is only ever written together with
    a new transaction, so folding a user's history over ``signup_credits``
    always reproduces it.
    """

    def __init__(
        self,
        users: UserDirectory,
        storage: Optional[Repository[CreditTransaction]] = None,
        clock: Clock = utc_now,
        signup_credits: int = SIGNUP_CREDITS,
    ):
        self.users = users
        self.storage = storage if storage is not None else InMemoryRepository()
        self.clock = clock
        self.signup_credits = signup_credits
        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def ensure_initialized(self, user_id: str) -> int:
        with self.locked([user_id]):
            return self._ensure_initialized(user_id)

    def get_balance(self, user_id: str) -> int:
        return self.ensure_initialized(user_id)

    def post(self, user_id: str, amount: int, reason: str, related_id: Optional[str] = None) -> CreditTransaction:
        with self.locked([user_id]):
            return self._apply([Posting(user_id, amount, reason, related_id)])[0]

    def post_batch(self, postings: Iterable[Posting]) -> list[CreditTransaction]:
        """Apply several postings as one unit: all are appended or none is."""
        postings = [Posting(*p) for p in postings]
        with self.locked([p.user_id for p in postings]):
            return self._apply(postings)

    def award_for_action(self, user_id: str, action: str, related_id: Optional[str] = None) -> CreditTransaction:
        try:
            tag = CreditAction(action)
        except ValueError:
            raise UnknownActionError(f"Unknown credit action: {action}")
        return self.post(user_id, CREDIT_ACTIONS[tag], tag.value, related_id)

    def redeem(self, user_id: str, amount: int, reason: Optional[str] = None) -> CreditTransaction:
        _require_int(amount)
        if amount <= 0:
            raise ValidationError("Redemption amount must be positive")

        with self.locked([user_id]):
            balance = self._ensure_initialized(user_id)
            if balance < amount:
                raise InsufficientBalanceError(
                    f"Insufficient credits: balance is {balance}, redemption needs {amount}"
                )
            return self._apply([Posting(user_id, -amount, reason or REDEMPTION_REASON)])[0]

    def history(self, user_id: str) -> list[CreditTransaction]:
        self.users.find_user(user_id)
        entries = self.storage.find_by_predicate(lambda t: t.user_id == user_id)
        # stable sort keeps insertion order for equal timestamps before reversing
        entries.sort(key=lambda t: t.created_at)
        entries.reverse()
        return entries

    def get_summary(self, user_id: str) -> CreditSummary:
        balance = self.ensure_initialized(user_id)
        return CreditSummary(user_id=user_id, balance=balance, transactions=self.history(user_id))

    def replay_balance(self, user_id: str) -> int:
        balance = self.signup_credits
        for entry in reversed(self.history(user_id)):
            balance += entry.amount
        return balance

    def is_consistent(self, user_id: str) -> bool:
        """Check every snapshot chains onto the previous one and ends at the cached balance."""
        with self.locked([user_id]):
            cached = self._ensure_initialized(user_id)
            running = self.signup_credits
            for entry in reversed(self.history(user_id)):
                if entry.balance_before != running or entry.balance_after != running + entry.amount:
                    return False
                running = entry.balance_after
            return running == cached

    @contextmanager
    def locked(self, user_ids: Iterable[str]) -> Iterator[None]:
        """Hold the balance locks of ``user_ids``, acquired in sorted order."""
        locks = [self._lock_for(user_id) for user_id in sorted(set(user_ids))]
        for lock in locks:
            lock.acquire()
        try:
            yield
        finally:
            for lock in reversed(locks):
                lock.release()

    def _lock_for(self, user_id: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = self._locks[user_id] = threading.RLock()
            return lock

    def _ensure_initialized(self, user_id: str) -> int:
        user = self.users.find_user(user_id)
        if user.credit_balance is None:
            self.users.set_credit_balance(user_id, self.signup_credits)
            return self.signup_credits
        return user.credit_balance

    def _apply(self, postings: list[Posting]) -> list[CreditTransaction]:
        """Append ``postings`` in order; on any failure undo what was written.

        Callers must hold the locks of every user involved.
        """
        originals: dict[str, Optional[int]] = {}
        running: dict[str, int] = {}
        staged: list[CreditTransaction] = []
        for posting in postings:
            _require_int(posting.amount)
            if posting.user_id not in running:
                user = self.users.find_user(posting.user_id)
                originals[posting.user_id] = user.credit_balance
                running[posting.user_id] = (
                    self.signup_credits if user.credit_balance is None else user.credit_balance
                )
            balance = running[posting.user_id]
            staged.append(
                CreditTransaction(
                    id=uuid4(),
                    user_id=posting.user_id,
                    amount=posting.amount,
                    reason=posting.reason,
                    related_id=posting.related_id,
                    balance_before=balance,
                    balance_after=balance + posting.amount,
                    created_at=self.clock(),
                )
            )
            running[posting.user_id] = balance + posting.amount

        written: list[CreditTransaction] = []
        try:
            for transaction in staged:
                self.storage.insert(transaction)
                written.append(transaction)
                self.users.set_credit_balance(transaction.user_id, transaction.balance_after)
        except Exception:
            for transaction in reversed(written):
                self.storage.delete(transaction.id)
            for user_id, balance in originals.items():
                self.users.set_credit_balance(user_id, balance)
            raise
        return staged
