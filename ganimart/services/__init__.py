"""Application services layer.

Services coordinate work across the domain and infrastructure layers (store
mutations, persistence). They should avoid UI concerns.
"""

from ganimart.services.storefront import Storefront

__all__ = ["Storefront"]
