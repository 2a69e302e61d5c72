"""
Shared service utilities.

- http.py      - requests session with retry adapter and default timeout
"""
