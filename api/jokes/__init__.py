"""
Joke storage and the HTTP routes around it.
"""
