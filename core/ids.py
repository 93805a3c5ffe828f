"""
Identifier helpers for jobs and WebSocket clients.
"""

import random
import string
import time

BASE36_ALPHABET = string.digits + string.ascii_lowercase


def epoch_ms() -> int:
    return int(time.time() * 1000)


def random_base36(length: int) -> str:
    return "".join(random.choice(BASE36_ALPHABET) for _ in range(length))


def generate_translation_id() -> str:
    """Job id: ``translation-<epoch-ms>-<8 base36 chars>``"""
    return f"translation-{epoch_ms()}-{random_base36(8)}"


def generate_client_id() -> str:
    """Client id: ``<epoch-ms>-<5 base36 chars>``"""
    return f"{epoch_ms()}-{random_base36(5)}"
