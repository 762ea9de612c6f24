"""Reducing-balance EMI calculator with prepayments and loan comparison."""
