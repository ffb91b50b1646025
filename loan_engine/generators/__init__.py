"""Synthetic data generators for demos and tests."""

from loan_engine.generators.disbursement import (
    DisbursementGenerator,
    LoanGroup,
    LoanTermsGenerator,
)

__all__ = ["DisbursementGenerator", "LoanGroup", "LoanTermsGenerator"]
