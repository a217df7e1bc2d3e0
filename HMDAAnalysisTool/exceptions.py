"""Exceptions raised by the HMDA analysis pipeline."""


class HMDAAnalysisError(Exception):
    """Base exception for the analysis pipeline."""

    pass


class DataError(HMDAAnalysisError):
    """Input file is missing, malformed, or too small for the requested sample."""

    pass


class ParseError(HMDAAnalysisError):
    """A column expected to be numeric holds a non-numeric, non-placeholder token."""

    def __init__(self, column: str, tokens, n_rows: int):
        self.column = column
        self.tokens = list(tokens)
        self.n_rows = n_rows
        preview = ', '.join(repr(t) for t in self.tokens[:5])
        super().__init__(
            f"Column '{column}' has {n_rows} non-numeric value(s): {preview}"
        )


class LookupGapError(HMDAAnalysisError):
    """A categorical code has no entry in its recode table (strict validation only)."""

    pass
