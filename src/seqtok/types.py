"""
Core types for sequence tokenization.
"""

from typing import TypeAlias

Token: TypeAlias = str
TokenId: TypeAlias = int
TokenPair: TypeAlias = tuple[Token, Token]
Corpus: TypeAlias = list[Token]
