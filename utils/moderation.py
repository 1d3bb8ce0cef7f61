"""Profanity filter applied to chirp bodies before they are stored."""

BANNED_WORDS = frozenset({"kerfuffle", "sharbert", "fornax"})
REPLACEMENT = "****"


def clean_body(text: str) -> str:
    """Replace banned words (case-insensitive, whole words only)."""
    words = text.split(" ")
    return " ".join(REPLACEMENT if word.lower() in BANNED_WORDS else word for word in words)
