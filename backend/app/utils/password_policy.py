"""
Password Policy
Strength rules applied to every password a user chooses.
"""

import re
from typing import List

MIN_LENGTH = 8
SPECIAL_CHARACTERS = "!@#$%^&*()-_=+{};:,<.>"

# (pattern that must match, message when it does not)
RULES = [
    (re.compile(r"[a-z]"), "Password must include a lowercase letter"),
    (re.compile(r"[A-Z]"), "Password must include an uppercase letter"),
    (re.compile(r"\d"), "Password must include a number"),
    (re.compile(f"[{re.escape(SPECIAL_CHARACTERS)}]"), "Password must include a special character"),
]


def validate_password(password: str) -> List[str]:
    """
    Every rule the password breaks, in a stable order; empty when it is acceptable.
    """
    if not password:
        return ["Password is required"]

    problems = []
    if len(password) < MIN_LENGTH:
        problems.append(f"Password must be at least {MIN_LENGTH} characters long")
    problems.extend(message for pattern, message in RULES if not pattern.search(password))
    return problems
