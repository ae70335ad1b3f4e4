"""Built-in toolkits.

Each module in this package implements a setup(registrar) function that
registers its conversion tools.
"""
