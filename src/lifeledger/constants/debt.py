"""
Debt category display metadata and amortization limits.
Labels and colors match what the debt list and category progress cards render.
"""

# Hard ceiling for amortization loops (100 years of monthly payments).
MAX_PAYOFF_MONTHS = 1200

# Keyed by DebtCategory value
DEBT_CATEGORY_CONFIG = {
    "credit_card": {"label": "Credit Card", "color": "#EF4444"},
    "personal_loan": {"label": "Personal Loan", "color": "#F59E0B"},
    "auto_loan": {"label": "Auto Loan", "color": "#3B82F6"},
    "student_loan": {"label": "Student Loan", "color": "#8B5CF6"},
    "mortgage": {"label": "Mortgage", "color": "#06B6D4"},
    "medical": {"label": "Medical", "color": "#EC4899"},
    "other": {"label": "Other", "color": "#6B7280"},
}
