"""
spendwise
~~~~~~~~~

Personal expense tracking API. Expenses are categorized and summarized by
a language model, saving goals report derived progress. Run with
``uvicorn spendwise.main:create_app --factory``.
"""
