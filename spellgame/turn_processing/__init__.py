"""Turn processing: submission validation and turn resolution.

Kept free of FastAPI and redis so the rules can be exercised directly in tests.
"""
