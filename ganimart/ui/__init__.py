"""Streamlit views and UI helpers."""
