from decimal import Decimal
from typing import Dict, Iterator, Optional

from errors import AccountLocked, AccountNotFound, InsufficientFunds, NegativeAccountCreation, NegativeAmount
from models import AccountSnapshot, ClientAccount


class AccountStore:
    """
    In-memory account balances keyed by client id.
    The only place where money moves. Every operation raises a LedgerError
    subclass on rejection and leaves the account untouched in that case.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}

    def __len__(self) -> int:
        return len(self._accounts)

    def __iter__(self) -> Iterator[AccountSnapshot]:
        return self.snapshots()

    def snapshots(self) -> Iterator[AccountSnapshot]:
        """Yield a snapshot of every known account, in no particular order."""
        for account in self._accounts.values():
            yield account.snapshot()

    def get_snapshot(self, client_id: int) -> Optional[AccountSnapshot]:
        account = self._accounts.get(client_id)
        return account.snapshot() if account is not None else None

    def add_to_balance(self, client_id: int, amount: Decimal) -> None:
        """
        Apply a balance change to the available funds.
        Positive amounts are deposits, negative amounts withdrawals.
        Unknown clients are created, but never with a negative balance.
        """
        account = self._accounts.get(client_id)

        if account is None:
            if amount < 0:
                raise NegativeAccountCreation(f"Account creation would start with negative balance (client = {client_id})")
            self._accounts[client_id] = ClientAccount(client_id=client_id, available=amount)
            return

        if account.locked:
            raise AccountLocked(f"Cannot change balance of locked account (client = {client_id})")

        if account.available + amount < 0:
            raise InsufficientFunds(f"Transaction would cause negative balance (client = {client_id})")

        account.credit(amount)

    def hold_amount(self, client_id: int, amount: Decimal) -> None:
        """Move up to `amount` from available to held, capped at the available funds."""
        if amount < 0:
            raise NegativeAmount(f"Cannot hold negative amount (client = {client_id})")
        account = self._get_account(client_id)
        account.hold(min(account.available, amount))

    def release_held_amount(self, client_id: int, amount: Decimal) -> None:
        """Move up to `amount` from held back to available, capped at the held funds."""
        if amount < 0:
            raise NegativeAmount(f"Cannot release negative amount (client = {client_id})")
        account = self._get_account(client_id)
        account.release_hold(min(account.held, amount))

    def charge_back_amount(self, client_id: int, amount: Decimal) -> None:
        """Remove up to `amount` from the held funds and lock the account."""
        if amount < 0:
            raise NegativeAmount(f"Cannot charge back negative amount (client = {client_id})")
        account = self._get_account(client_id)
        account.remove_held(min(account.held, amount))
        # Locks even when less than `amount` was actually held.
        account.locked = True

    def _get_account(self, client_id: int) -> ClientAccount:
        account = self._accounts.get(client_id)
        if account is None:
            raise AccountNotFound(f"Client does not exist (client = {client_id})")
        return account
