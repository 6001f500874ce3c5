# __init__.py
# Routers package for the Endless Forge API gateway

# Re-exports router instances for convenient import in main.py.

# @see: gateway/routes/profile.py - Profile picture and display name endpoints
# @see: gateway/routes/contact.py - Contact form endpoint
# @see: gateway/main.py - Router registration

from gateway.routes.contact import router as contact_router
from gateway.routes.profile import router as profile_router

__all__ = ["contact_router", "profile_router"]
