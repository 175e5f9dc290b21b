"""GaniMart: a single-page storefront backed by a locally persisted document."""

__version__ = "0.1.0"
