"""
auth — User authentication module.

Provides:
  • Signed token creation & verification
  • Password hashing (bcrypt)
  • Login / Register / current-user API routes
  • ``get_current_user_id`` FastAPI dependency
"""
