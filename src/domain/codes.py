"""
Verification code generation.

Codes come from the secrets module (CSPRNG) and are rendered as uppercase
hexadecimal. No uniqueness check is made against stored codes.
"""

import math
import secrets
from dataclasses import dataclass

CODE_ALPHABET = "0123456789ABCDEF"


@dataclass(frozen=True)
class CodeGenerator:
    """Produces fixed-length uppercase hex codes."""

    length: int = 6

    def __post_init__(self) -> None:
        if self.length < 4:
            raise ValueError("code length must be at least 4")

    def generate(self) -> str:
        # token_hex yields two characters per byte; trim for odd lengths
        return secrets.token_hex(math.ceil(self.length / 2))[: self.length].upper()
