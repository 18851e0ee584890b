"""
Use cases for the minicrud API.

Each service module orchestrates the JSON collections to implement the
business rules (register, log in, manage records). Routers call these
services instead of manipulating files or sessions directly.
"""
