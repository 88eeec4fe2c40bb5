"""Embedding providers and data-update events"""
