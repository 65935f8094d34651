"""barakah classify: show how line item names are classified."""

from __future__ import annotations

import click
from rich.table import Table

from barakah.core.cli.common import console
from barakah.zakat.clarification import ANSWER_MAP, question_type_for
from barakah.zakat.classifier import classify_line_item
from barakah.zakat.models import Classification


@click.command()
@click.argument("names", nargs=-1, required=True)
def classify(names: tuple[str, ...]) -> None:
    """Classify one or more line item NAMES."""
    table = Table(title="Classification")
    table.add_column("Item")
    table.add_column("Classification")
    table.add_column("Ruling / question")
    table.add_column("Answers")

    for name in names:
        result = classify_line_item(name)
        answers = ""
        detail = result.islamic_ruling or ""
        if result.classification is Classification.NEEDS_CLARIFICATION:
            question_type = question_type_for(result.clarification_question)
            answers = ", ".join(a.value for a in ANSWER_MAP[question_type])
            detail = result.clarification_question or ""
        table.add_row(name, result.classification.value, detail, answers)

    console.print(table)
