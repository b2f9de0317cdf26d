"""Forms module - shareable volunteer-hour forms."""

from volugram.modules.forms.router import router

__all__ = ["router"]
