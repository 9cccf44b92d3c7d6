"""Moodtunes - mood-based music recommendations with a resilient Spotify integration"""
