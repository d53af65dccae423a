"""Core services: rate limiting, normalization, analysis, chat, extraction"""
