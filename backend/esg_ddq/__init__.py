"""ESG Due Diligence Questionnaire and Investment Memo generation."""
__version__ = "1.0.0"
