"""
HTTP API and client for the article translator service.
"""
