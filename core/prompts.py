"""
System prompts for HTML translation.
"""

from typing import Optional

HTML_RULES = """VERY IMPORTANT INSTRUCTIONS:
1. The text contains HTML tags like <div>, <p>, etc.
2. DO NOT translate HTML tags or attributes
3. DO NOT add tag names as text content in your output
4. DO NOT add any text like 'div', 'p', 'span', etc. before or after tags
5. Only translate the actual text BETWEEN the HTML tags
6. Keep all HTML structure and formatting intact

For example:
Input: "<div>Hello world</div>"
Correct output: "<div>Hello world</div>"
INCORRECT output: "<div>div Hello world</div>" or "<div>Hello world div</div>"

Input: "<p>Bonjour le monde</p>"
Correct output: "<p>Hello world</p>"
INCORRECT output: "<p>p Hello world</p>" or "<p>Hello world p</p>\""""


def build_system_prompt(
    target_language: str = "English",
    part: Optional[int] = None,
    total: Optional[int] = None,
) -> str:
    """
    Build the translator instruction.

    Args:
        target_language: Language to translate into.
        part: 1-based fragment number when translating a chunked document.
        total: Number of fragments in the document.
    """
    if part is not None and total is not None:
        header = (
            f"You are a translator. Translate the following HTML fragment to {target_language}.\n"
            f"This is part {part} of {total} of a larger text."
        )
    else:
        header = f"You are a translator. Translate the following text to {target_language}."
    return f"{header}\n\n{HTML_RULES}"
