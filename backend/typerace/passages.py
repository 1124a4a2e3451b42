import random

SAMPLE_PASSAGES = [
    "The quick brown fox jumps over the lazy dog near the riverbank where children often play during summer afternoons.",
    "Technology has revolutionized the way we communicate, work, and live our daily lives, bringing incredible opportunities.",
    "In the heart of the bustling city, where skyscrapers reach toward the clouds and people move with purpose through streets.",
    "A good habit is easier to keep than to start, so practice a little every day and watch your speed slowly climb.",
    "Old maps of the coastline show harbors that have long since filled with sand, yet sailors still tell stories about them.",
]


def choose_passage() -> str:
    """Pick the passage for one race; called once per room."""
    return random.choice(SAMPLE_PASSAGES)
