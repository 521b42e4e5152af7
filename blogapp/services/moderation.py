import logging
from dataclasses import dataclass
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModerationResult:
    accepted: bool
    term: Optional[str] = None

    @classmethod
    def accept(cls) -> "ModerationResult":
        return cls(accepted=True)

    @classmethod
    def reject(cls, term: str) -> "ModerationResult":
        return cls(accepted=False, term=term)


class ModerationFilter:
    """
    Rejects comment text containing a prohibited term.

    Matching is exact-token: the text is lower-cased and split on whitespace,
    and a token must equal a prohibited term to trigger rejection, so
    "badword1" is rejected while "badword1s" is not.
    """

    def __init__(self, prohibited_terms: Iterable[str]):
        self.prohibited_terms = frozenset(term.strip().lower() for term in prohibited_terms if term and term.strip())

    def check(self, text: Optional[str]) -> ModerationResult:
        if not text:
            return ModerationResult.accept()

        for token in text.lower().split():
            if token in self.prohibited_terms:
                logger.warning("Comment rejected for prohibited term %r", token)
                return ModerationResult.reject(token)

        return ModerationResult.accept()
