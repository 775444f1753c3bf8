"""
Persistence and query layer of a question-and-answer forum.
"""
