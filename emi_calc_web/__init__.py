"""Web front end for the EMI calculator."""
