"""
Auth Module Tests
----------------
Token codec, refresh-token lifecycle, Google validation and route gates.
"""
