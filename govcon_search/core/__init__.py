"""Core configuration, models, search and suggestions"""
