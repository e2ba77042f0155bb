"""
Keyword and pattern based spam detector for payment-related messages.

A message is scored by adding the weight of every check that fires:

    spam phrase     0.40   "Contains suspicious phrases"
    urgent words    0.20   "Uses urgent language"
    money words     0.20   "Contains financial terms"
    links           0.10   "Contains suspicious links"
    unusual sender  0.10   "Unusual sender"

The weights are not normalized. A message is spam when its score reaches
``SPAM_THRESHOLD``; the reason reported is the label of the first check
that fired. Trusted senders are never scored.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Sequence

from upi_guard import telemetry
from upi_guard.models import SpamMessage, SpamResult, Transaction, format_decimal

logger = logging.getLogger(__name__)

# "a.*b" matches when both words appear in that order anywhere in the text
SPAM_PHRASE_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"urgent.*money",
        r"prize.*won",
        r"bank.*suspend",
        r"verify.*account",
        r"click.*link",
        r"limited time offer",
        r"upi.*refund",
        r"payment.*failed.*retry",
        r"credit.*limit",
        r"send money",
        r"lottery",
        r"your account.*blocked",
    )
]

URGENT_WORDS = re.compile(
    r"urgent|immediate|now|hurry|quick|fast|alert|warning", re.IGNORECASE
)
MONEY_WORDS = re.compile(
    r"money|cash|bank|credit|debit|account|fund|transfer|send|receive|pay|payment|upi|wallet",
    re.IGNORECASE,
)
LINK_PATTERN = re.compile(r"https?://|www\.|bit\.ly|tinyurl|goo\.gl", re.IGNORECASE)

# Legitimate banks and services, matched as substrings in either direction
COMMON_SENDERS = (
    "hdfc", "sbi", "icici", "axis", "kotak", "paytm", "phonepe", "gpay",
    "googlepay", "amazon", "flipkart", "swiggy", "zomato", "ola", "uber",
)

FEATURE_WEIGHTS = {
    "contains_spam_pattern": 0.40,
    "contains_urgent_words": 0.20,
    "contains_money_words": 0.20,
    "contains_links": 0.10,
    "unusual_sender": 0.10,
}

SPAM_THRESHOLD = 0.5

TRUSTED_SENDER_REASON = "Trusted sender"
LEGITIMATE_REASON = "Message appears legitimate"

# Evaluation order; the first label that fires becomes the reason
SPAM_CHECKS = (
    ("contains_spam_pattern", "Contains suspicious phrases"),
    ("contains_urgent_words", "Uses urgent language"),
    ("contains_money_words", "Contains financial terms"),
    ("contains_links", "Contains suspicious links"),
    ("unusual_sender", "Unusual sender"),
)


def is_common_sender(sender: str) -> bool:
    """True if ``sender`` looks like one of the well-known banks or services."""
    sender = sender.lower()
    if not sender:
        return False
    return any(common in sender or sender in common for common in COMMON_SENDERS)


def contains_spam_phrase(text: str) -> bool:
    return any(pattern.search(text) for pattern in SPAM_PHRASE_PATTERNS)


class SpamDetector:
    """
    Spam scorer with an allow-list of trusted senders.

    Args:
        trusted_senders: Sender IDs exempt from scoring.
    """

    def __init__(self, trusted_senders: Optional[Iterable[str]] = None):
        self._trusted_senders: set[str] = set(trusted_senders or ())

    @property
    def trusted_senders(self) -> frozenset[str]:
        return frozenset(self._trusted_senders)

    def add_trusted_sender(self, sender: str) -> None:
        """Allow-list a sender. Adding the same sender twice is a no-op."""
        self._trusted_senders.add(sender)

    def _checks(self, message: str, sender: str) -> dict[str, bool]:
        # only the sender check looks at the sender
        return {
            "contains_spam_pattern": contains_spam_phrase(message),
            "contains_urgent_words": bool(URGENT_WORDS.search(message)),
            "contains_money_words": bool(MONEY_WORDS.search(message)),
            "contains_links": bool(LINK_PATTERN.search(message)),
            "unusual_sender": not is_common_sender(sender),
        }

    def is_spam(self, message: str, sender: str) -> SpamResult:
        """
        Score a message from ``sender``.

        Empty messages or senders are valid input; they simply match fewer
        checks.
        """
        if not isinstance(message, str) or not isinstance(sender, str):
            raise TypeError("message and sender must be strings")

        if sender in self._trusted_senders:
            telemetry.MESSAGES_CHECKED.labels(verdict="trusted").inc()
            return SpamResult(is_spam=False, score=0.0, reason=TRUSTED_SENDER_REASON)

        fired = self._checks(message, sender)
        score = 0.0
        reason = ""
        signals = []
        for name, label in SPAM_CHECKS:
            if not fired[name]:
                continue
            score += FEATURE_WEIGHTS[name]
            signals.append(name)
            reason = reason or label

        is_spam = score >= SPAM_THRESHOLD
        telemetry.MESSAGES_CHECKED.labels(verdict="spam" if is_spam else "ham").inc()
        logger.debug(
            "Checked message from %s: score=%.2f spam=%s signals=%s",
            sender,
            score,
            is_spam,
            signals,
        )
        return SpamResult(
            is_spam=is_spam,
            score=score,
            reason=reason if is_spam else LEGITIMATE_REASON,
            signals=tuple(signals),
        )

    classify = is_spam

    def classify_message(self, message: SpamMessage) -> SpamResult:
        return self.is_spam(message.message, message.sender)

    def is_transaction_suspicious(
        self,
        transaction: Transaction,
        recent_spam_messages: Sequence[SpamMessage],
    ) -> bool:
        """
        Whether a payment looks like the follow-through of a recent spam message.

        True when the receiver and a spam sender contain one another
        (case-insensitive), or when a spam message quotes the exact amount.
        Messages may be ``SpamMessage`` instances or ``{sender, message}``
        mappings.
        """
        if not recent_spam_messages:
            return False

        messages = [
            m if isinstance(m, SpamMessage) else SpamMessage.model_validate(m)
            for m in recent_spam_messages
        ]
        receiver = transaction.receiver.lower()
        for spam in messages:
            spam_sender = spam.sender.lower()
            if not spam_sender or not receiver:
                continue
            if spam_sender in receiver or receiver in spam_sender:
                logger.info(
                    "Transaction %s pays %s, which matches spam sender %s",
                    transaction.id,
                    transaction.receiver,
                    spam.sender,
                )
                return True

        amount = format_decimal(transaction.amount)
        for spam in messages:
            if amount in spam.message:
                logger.info(
                    "Transaction %s amount %s appears in a spam message from %s",
                    transaction.id,
                    amount,
                    spam.sender,
                )
                return True
        return False
