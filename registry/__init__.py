"""Hospital directory application.

Models, services, views and routes for hospitals, their departments and
role-scoped user registration behind signed session tokens.
"""
