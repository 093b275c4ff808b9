"""Utility helpers: history and error logging"""
