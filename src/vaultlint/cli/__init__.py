"""
Command-line interface -- ``vaultlint`` console script.
"""
