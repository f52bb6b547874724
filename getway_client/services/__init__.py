"""Application services layer.

Services compose the HTTP client and token store into auth and domain
operations. They should avoid UI concerns.
"""
