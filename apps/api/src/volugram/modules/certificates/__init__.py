"""
Certificates module - scoring and PDF rendering of volunteer certificates.
"""

from volugram.modules.certificates.renderer import CertificateRenderer, render_certificate
from volugram.modules.certificates.scoring import ReviewCategory, average_rating, describe

__all__ = [
    "CertificateRenderer",
    "ReviewCategory",
    "average_rating",
    "describe",
    "render_certificate",
]
