"""Clarification workflow for items the classifier could not settle.

Every question has one of a few fixed shapes and each shape maps its answers
to a classification deterministically. The workflow walks the pending items
in entry order; going back never discards an answer and going forward
requires one.
"""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING

from loguru import logger

from barakah.core.exceptions import InvalidAnswerError
from barakah.zakat.models import CategoryEntry, Classification, LineItem, to_decimal

if TYPE_CHECKING:
    from barakah.zakat.currency import CurrencyNormalizer


class QuestionType(StrEnum):
    ASSET_USE = "asset_use"
    FINANCING_TYPE = "financing_type"
    DEPOSIT_NATURE = "deposit_nature"
    OTHER = "other"


class ClarificationAnswer(StrEnum):
    TRADING = "trading"
    OPERATIONS = "operations"
    SHORT_TERM = "short_term"
    LONG_TERM = "long_term"
    ISLAMIC = "islamic"
    CONVENTIONAL = "conventional"
    PAID = "paid"
    HOLDING = "holding"
    ACKNOWLEDGE_UNCERTAIN = "acknowledge_uncertain"


ANSWER_MAP: dict[QuestionType, dict[ClarificationAnswer, Classification]] = {
    QuestionType.ASSET_USE: {
        ClarificationAnswer.TRADING: Classification.ZAKATABLE,
        ClarificationAnswer.SHORT_TERM: Classification.ZAKATABLE,
        ClarificationAnswer.OPERATIONS: Classification.EXEMPT,
        ClarificationAnswer.LONG_TERM: Classification.EXEMPT,
    },
    QuestionType.FINANCING_TYPE: {
        ClarificationAnswer.ISLAMIC: Classification.DEDUCTIBLE,
        ClarificationAnswer.CONVENTIONAL: Classification.NOT_DEDUCTIBLE,
    },
    QuestionType.DEPOSIT_NATURE: {
        ClarificationAnswer.PAID: Classification.ZAKATABLE,
        ClarificationAnswer.HOLDING: Classification.DEDUCTIBLE,
    },
    QuestionType.OTHER: {
        ClarificationAnswer.ACKNOWLEDGE_UNCERTAIN: Classification.EXEMPT,
    },
}


def question_type_for(question: str | None) -> QuestionType:
    """Infer the question shape from its wording."""
    text = (question or "").lower()
    if "islamic financing" in text or "interest-based" in text:
        return QuestionType.FINANCING_TYPE
    if "deposit" in text:
        return QuestionType.DEPOSIT_NATURE
    if "trading" in text or "business operations" in text or "long-term" in text:
        return QuestionType.ASSET_USE
    return QuestionType.OTHER


def allowed_answers(item: LineItem) -> tuple[ClarificationAnswer, ...]:
    return tuple(ANSWER_MAP[question_type_for(item.clarification_question)])


def apply_answer(
    item: LineItem,
    answer: ClarificationAnswer | str,
    market_value: Decimal | int | float | str | None = None,
    normalizer: CurrencyNormalizer | None = None,
) -> Classification:
    """Resolve ``item`` with ``answer`` and return its new classification.

    Raises:
        InvalidAnswerError: If the answer does not belong to the item's
            question shape, or a market value accompanies a non-zakatable answer.
    """
    try:
        answer = ClarificationAnswer(answer)
    except ValueError as e:
        raise InvalidAnswerError(f"Unknown answer {answer!r} for {item.name}") from e

    question_type = question_type_for(item.clarification_question)
    mapping = ANSWER_MAP[question_type]
    if answer not in mapping:
        valid = ", ".join(a.value for a in mapping)
        raise InvalidAnswerError(f"{answer.value!r} does not answer a {question_type.value} question (expected: {valid})")

    classification = mapping[answer]
    if isinstance(item, CategoryEntry):
        classification = item.restrict(classification)

    if market_value is not None:
        if classification is not Classification.ZAKATABLE:
            raise InvalidAnswerError(f"A market value only applies to zakatable answers, not {answer.value!r}")
        item.market_value = to_decimal(market_value, f"{item.name} market value")
        item.converted_market_value = item.market_value
        if normalizer is not None:
            normalizer.normalize(item)

    item.classification = classification
    item.clarification_answer = answer.value
    logger.info(f"Clarified {item.name!r}: {answer.value} -> {classification.value}")
    return classification


class ClarificationWorkflow:
    """Linear, resumable walk over the items that need clarification.

    The pending list is a snapshot taken at construction: items are kept in
    entry order and never duplicated, even if the same item is passed twice.
    """

    def __init__(self, items: list[LineItem], normalizer: CurrencyNormalizer | None = None):
        self.normalizer = normalizer
        self.pending_items: list[LineItem] = []
        seen: set[str] = set()
        for item in items:
            if item.classification is Classification.NEEDS_CLARIFICATION and item.id not in seen:
                seen.add(item.id)
                self.pending_items.append(item)
        self.current_index = 0
        self._answers: dict[str, ClarificationAnswer] = {}

    def __len__(self) -> int:
        return len(self.pending_items)

    @property
    def is_complete(self) -> bool:
        return self.current_index >= len(self.pending_items)

    @property
    def current(self) -> LineItem | None:
        if self.is_complete:
            return None
        return self.pending_items[self.current_index]

    @property
    def current_question_type(self) -> QuestionType | None:
        item = self.current
        return question_type_for(item.clarification_question) if item else None

    @property
    def answered_count(self) -> int:
        return len(self._answers)

    @property
    def progress(self) -> float:
        """Fraction of pending items answered so far."""
        if not self.pending_items:
            return 1.0
        return self.answered_count / len(self.pending_items)

    def answer_for(self, item: LineItem) -> ClarificationAnswer | None:
        return self._answers.get(item.id)

    def answer(
        self,
        answer: ClarificationAnswer | str,
        market_value: Decimal | int | float | str | None = None,
    ) -> Classification:
        """Answer the current item and advance to the next one."""
        item = self.current
        if item is None:
            raise InvalidAnswerError("All items have already been clarified")
        classification = apply_answer(item, answer, market_value, self.normalizer)
        self._answers[item.id] = ClarificationAnswer(answer)
        self.current_index += 1
        if self.is_complete:
            logger.debug(f"Clarification complete: {self.answered_count}/{len(self)} answered")
        return classification

    def back(self) -> LineItem | None:
        if self.current_index > 0:
            self.current_index -= 1
        return self.current

    def forward(self) -> LineItem | None:
        item = self.current
        if item is None:
            return None
        if item.id not in self._answers:
            raise InvalidAnswerError(f"Answer {item.name!r} before moving forward")
        self.current_index += 1
        return self.current
