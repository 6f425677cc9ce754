"""Presets command for listing symbol selection probability presets."""

import typer

from ...core.models import CATEGORIES, PRESETS, ProbabilityProfile
from ..app import app, console, get_json_mode
from ..utils import Output


@app.command("presets")
def presets_command():
    """
    Show the weights of every probability preset.

    Use --probas custom with the --p<category> flags of 'generate' to supply
    your own weights instead.
    """
    out = Output(console=console, json_mode=get_json_mode())
    profiles = [ProbabilityProfile.from_preset(name) for name in PRESETS]

    if out.json_mode:
        out.set_data("presets", {p.name: p.as_dict() for p in profiles})
    else:
        rows = [
            [category.value] + [f"{p.weight(category):.2f}" for p in profiles]
            for category in CATEGORIES
        ]
        out.table(
            "Probability Presets",
            ["Category"] + [p.name for p in profiles],
            rows,
            styles=["cyan"],
        )

    raise typer.Exit(out.finish())
