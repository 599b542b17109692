"""FinanceAI chat backend."""
