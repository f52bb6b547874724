"""Domain layer (wire models and the error taxonomy).

Domain modules do not perform IO; infrastructure and services build on them.
"""
