"""
Workflow Service
Order status workflow with dispute locking, plus participant-scoped conversations.
"""
