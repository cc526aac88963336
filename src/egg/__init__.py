"""The egg language front end: lexer, parser and name analysis."""

__version__ = "0.1.0"
