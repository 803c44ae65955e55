"""Payment suggestion extraction - turns a location's payment history into ranked suggestions"""

import logging
from typing import Dict, List, Set
from proximity_gateway.domain.models import (
    AccountKind,
    LocationMatch,
    PaymentSuggestion,
    Transaction,
)
from proximity_gateway.domain.classification import CLASSIFICATION_RULES, WHOLE_WORD_RULES, classify_account

logger = logging.getLogger(__name__)


class PaymentSuggestionExtractor:
    """Groups completed transactions by destination account"""

    def __init__(self, ambiguous_is_business: bool = True, whole_word_keywords: bool = False):
        self.ambiguous_is_business = ambiguous_is_business
        self.rules = WHOLE_WORD_RULES if whole_word_keywords else CLASSIFICATION_RULES

    def extract(self, transactions: List[Transaction]) -> List[PaymentSuggestion]:
        """
        Build suggestions from a location's completed transactions.

        - Transactions without a destination account are skipped
        - Individual accounts are never suggested
        - One suggestion per (account_number, bank_name): frequency is the
          payment count, last_transaction_date the most recent payment

        Returns:
            Suggestions sorted by frequency desc, then most recent first
        """
        suggestions: Dict[tuple[str, str], PaymentSuggestion] = {}

        for txn in transactions:
            account = txn.to_account
            if account is None:
                continue

            if classify_account(account, self.ambiguous_is_business, self.rules) is not AccountKind.BUSINESS:
                logger.debug(
                    "Skipping individual account",
                    extra={"transaction_id": txn.transaction_id},
                )
                continue

            key = (account.account_number, account.bank_name)
            existing = suggestions.get(key)
            if existing is None:
                suggestions[key] = PaymentSuggestion(
                    account_number=account.account_number,
                    bank_name=account.bank_name,
                    account_name=account.account_name,
                    frequency=1,
                    last_transaction_date=txn.created_at,
                )
            else:
                existing.frequency += 1
                if txn.created_at > existing.last_transaction_date:
                    existing.last_transaction_date = txn.created_at

        return sorted(
            suggestions.values(),
            key=lambda s: (s.frequency, s.last_transaction_date),
            reverse=True,
        )


def deduplicate_suggestions(matches: List[LocationMatch]) -> List[LocationMatch]:
    """
    Keep each (account_number, bank_name) only under the first match that has it.

    Matches must already be in ranking order (closest first). A match left
    without suggestions is dropped, so the same business recorded under two
    Location rows only shows up once.
    """
    seen: Set[tuple[str, str]] = set()
    deduplicated: List[LocationMatch] = []

    for match in matches:
        unique = []
        for suggestion in match.payment_suggestions:
            if suggestion.key in seen:
                continue
            seen.add(suggestion.key)
            unique.append(suggestion)

        if unique:
            match.payment_suggestions = unique
            deduplicated.append(match)

    return deduplicated
