"""Random names for ephemeral environments."""

from __future__ import annotations

import random

ADJECTIVES: tuple[str, ...] = tuple(
    """
    brave swift mighty clever bright noble wise bold
    calm keen quiet lopsided wobbly fleeting glittering flying
    """.split()
)

NOUNS: tuple[str, ...] = tuple(
    """
    falcon eagle wolf bear lion tiger hawk owl fox deer snake
    turtle rabbit fish bird catdog horse monkey gorilla dragon unicorn
    """.split()
)


def generate_ephemeral_name(rng: random.Random | None = None) -> str:
    """Return a random adjective-noun pair such as ``brave-falcon``."""
    chooser = rng if rng is not None else random
    return f"{chooser.choice(ADJECTIVES)}-{chooser.choice(NOUNS)}"